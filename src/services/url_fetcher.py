"""URL fetching service for retrieving the raw HTML of bookmarked pages."""
import logging
from dataclasses import dataclass

import httpx

from services.exceptions import FetchFailedError

logger = logging.getLogger(__name__)

# Desktop browser UA so sites serve their normal markup, plus a bot token
# so site operators can tell these requests apart in their logs.
USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 LinkmanBot/1.0'
)


@dataclass
class FetchResult:
    """Body of a fetched page and the charset its response declared."""

    content: bytes
    encoding: str | None  # charset from the Content-Type header, if any


async def fetch_url(url: str) -> FetchResult:
    """
    Fetch the raw body of a URL.

    Follows redirects. Uses httpx's default timeouts; no retries.

    Args:
        url:
            The URL to fetch.

    Returns:
        FetchResult with the undecoded body and the header charset. Without a
        header charset, detection is left to the HTML parser (meta tags, BOM).

    Raises:
        FetchFailedError: On a non-2xx status (status_code set) or a transport
            error (reason set).
    """
    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            headers={'User-Agent': USER_AGENT},
        ) as client:
            response = await client.get(url)
    except httpx.TimeoutException as e:
        raise FetchFailedError(url, reason='Request timed out') from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchFailedError(url, reason=f'Request failed: {e}') from e

    if not response.is_success:
        raise FetchFailedError(url, status_code=response.status_code)

    logger.debug('Fetched %s (%d bytes)', url, len(response.content))
    return FetchResult(content=response.content, encoding=response.charset_encoding)
