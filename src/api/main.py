"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from api.routers import admin, bookmarks
from core.config import get_settings
from db.session import engine
from services import ingestion
from services.tagger import TagClient, set_tag_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()

    # Startup: shared chat-completion client for ingestion tasks
    tag_client = TagClient.from_settings(app_settings)
    set_tag_client(tag_client)
    logger.info("Tagging with model %s at %s", tag_client.model, app_settings.openai_url)

    yield

    # Shutdown: stop in-flight ingestion, then release shared clients
    await ingestion.cancel_pending()
    set_tag_client(None)
    await tag_client.aclose()
    await engine.dispose()


app_settings = get_settings()

app = FastAPI(
    title="Linkman API",
    description="Personal bookmarks with AI-generated tags.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    _request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed bodies and query parameters as 400 Bad Request."""
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request, exc: SQLAlchemyError,
) -> JSONResponse:
    """Log database failures and return a generic 500 without internal details."""
    logger.error(
        "Database error on %s %s", request.method, request.url.path, exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bookmarks.router)
app.include_router(admin.router)
