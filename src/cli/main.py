"""
Command-line entry point.

Usage:
    linkman serve
    linkman create-api-key --description "Laptop browser extension"
    linkman create-api-key --description "Phone" --key my-chosen-secret

Both subcommands apply pending database migrations first.
"""
import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from core.config import Settings, get_settings
from db.migrate import run_migrations

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the linkman command."""
    parser = argparse.ArgumentParser(
        prog='linkman',
        description='Bookmark service with AI-generated tags.',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('serve', help='Run the HTTP API server')

    create_parser = subparsers.add_parser('create-api-key', help='Create a new API key')
    create_parser.add_argument(
        '-d', '--description', required=True,
        help='Description for the API key',
    )
    create_parser.add_argument(
        '-k', '--key', default=None,
        help='Specific key string to use. A random UUID is generated if omitted.',
    )
    return parser


async def create_api_key(description: str, key: str | None = None) -> str:
    """Insert a credential and return its secret."""
    from db.session import async_session_factory, engine  # noqa: PLC0415
    from services.credential_service import create_credential  # noqa: PLC0415

    try:
        async with async_session_factory() as session:
            credential = await create_credential(session, description, secret=key)
            await session.commit()
    finally:
        await engine.dispose()

    logger.info("Successfully created new API key: %s", description)
    return credential.secret


def serve(settings: Settings) -> None:
    """Run the API with uvicorn (blocks until shutdown)."""
    import uvicorn  # noqa: PLC0415

    logger.info("Starting linkman server on %s:%d", settings.host, settings.port)
    uvicorn.run(
        'api.main:app',
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"ERROR: invalid configuration:\n{e}", file=sys.stderr)
        raise SystemExit(1) from e

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == 'serve' and not settings.openai_url:
        logger.error("OPENAI_URL must be set to run the server")
        raise SystemExit(1)

    try:
        run_migrations(settings.database_url)
    except Exception as e:
        logger.exception("Database migration failed")
        raise SystemExit(1) from e

    if args.command == 'serve':
        serve(settings)
    elif args.command == 'create-api-key':
        try:
            secret = asyncio.run(create_api_key(args.description, args.key))
        except IntegrityError as e:
            logger.error("An API key with that value already exists")
            raise SystemExit(1) from e
        print(secret)


if __name__ == '__main__':
    main()
