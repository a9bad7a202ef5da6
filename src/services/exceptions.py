"""Shared exceptions for the bookmark ingestion pipeline."""


class IngestionError(Exception):
    """
    Base exception for a failed ingestion step.

    Raised by the fetch, excerpt and tagging steps. The ingestion worker catches
    these, logs them with the bookmark id and URL, and leaves the row unchanged.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class FetchFailedError(IngestionError):
    """Raised when a page cannot be retrieved (non-2xx status or transport error)."""

    def __init__(
        self,
        url: str,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is not None:
            message = f"Fetching {url} failed with HTTP {status_code}"
        else:
            message = f"Fetching {url} failed: {reason}"
        super().__init__(message)


class ExcerptFailedError(IngestionError):
    """Raised when HTML cannot be converted to a text excerpt."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Excerpt conversion failed: {reason}")


class TaggingError(IngestionError):
    """Raised when the chat-completion request itself fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class TagParseFailedError(TaggingError):
    """Raised when the model's response is not a JSON object of the form {"tags": [...]}."""

    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Could not parse tags from model output: {reason}")
