"""Chat-completion client that asks a model for topical tags."""
import logging

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from core.config import Settings
from services.exceptions import TaggingError, TagParseFailedError

logger = logging.getLogger(__name__)

MAX_TAGS = 6

# The endpoint authenticates through OPENAI_EXTRA_HEADERS (gateway headers);
# the SDK still requires some api_key value.
PLACEHOLDER_API_KEY = "<nothing>"

SYSTEM_PROMPT = """Task: Content Tagging.
Constraints:
- Exactly 6 tags.
- Format: Raw JSON ONLY. No markdown code blocks. No intro/outro text.
- Tags: Single words only. No hyphens, no spaces, all lowercase.
- Schema: {"tags": ["word1", "word2", ...]}"""


class TagResponse(BaseModel):
    """Expected shape of the model output."""

    tags: list[str]


def build_messages(url: str, excerpt: str) -> list[dict[str, str]]:
    """Build the system and user messages for a tagging request."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": f"URL: {url}\n\nCONTENT:\n{excerpt}\n\nJSON Output:",
        },
    ]


def parse_tags(raw: str) -> list[str]:
    """
    Parse model output into at most MAX_TAGS tags.

    The output must be exactly a JSON object with a `tags` array of strings;
    no attempt is made to recover JSON embedded in prose or code fences.
    Tag strings are returned as-is (formatting is the model's contract).

    Raises:
        TagParseFailedError: If the output does not match {"tags": [str, ...]}.
    """
    try:
        parsed = TagResponse.model_validate_json(raw)
    except ValidationError as e:
        raise TagParseFailedError(raw, reason=f"{e.error_count()} validation error(s)") from e
    return parsed.tags[:MAX_TAGS]


class TagClient:
    """
    Process-wide tagging client.

    Wraps a single AsyncOpenAI instance (and its connection pool) shared by every
    ingestion task.
    """

    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        self._client = client
        self._model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "TagClient":
        """Create a client for the configured endpoint, model and extra headers."""
        if not settings.openai_url:
            raise ValueError("OPENAI_URL must be set to enable tagging")
        client = AsyncOpenAI(
            base_url=settings.openai_url,
            api_key=PLACEHOLDER_API_KEY,
            default_headers=settings.openai_extra_headers,
            max_retries=0,
        )
        return cls(client, settings.openai_model)

    @property
    def model(self) -> str:
        """Model identifier sent with every request."""
        return self._model

    async def tag(self, url: str, excerpt: str) -> list[str]:
        """
        Ask the model for tags describing a page.

        Args:
            url: The page URL (included in the prompt).
            excerpt: Text excerpt of the page.

        Returns:
            Up to MAX_TAGS tags in the order the model produced them.

        Raises:
            TaggingError: If the request fails.
            TagParseFailedError: If the response is not the expected JSON.
        """
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=build_messages(url, excerpt),
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            raise TaggingError(f"Chat completion request failed: {e}") from e

        output = ""
        if response.choices and response.choices[0].message.content:
            output = response.choices[0].message.content

        logger.info("AI generated JSON for %s: %s", url, output)
        return parse_tags(output)

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.close()


# Global tag client state using a container to avoid global statement
class _TagClientState:
    """Container for global tag client state."""

    client: TagClient | None = None


_state = _TagClientState()


def get_tag_client() -> TagClient:
    """
    Get the global tag client.

    The client must be initialized by set_tag_client() (app lifespan) before use.
    Raises RuntimeError if called before initialization.
    """
    if _state.client is None:
        raise RuntimeError("Tag client not initialized")
    return _state.client


def set_tag_client(client: TagClient | None) -> None:
    """Set the global tag client instance."""
    _state.client = client
