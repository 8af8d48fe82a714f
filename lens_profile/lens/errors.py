from typing import Optional, Sequence


class LensError(Exception):
    """Base class for everything that can go wrong talking to the Lens API."""


class UpstreamUnreachable(LensError):
    """Transport failure: DNS, refused connection, timeout."""


class UpstreamError(LensError):
    """The API answered, but with a non-2xx status or a GraphQL `errors` array."""

    def __init__(self, message: str, *, status: Optional[int] = None, messages: Sequence[str] = ()):
        super().__init__(message)
        self.status = status
        self.messages = list(messages)


class MalformedResponse(LensError):
    """The response is missing the `data.*` shape the operation expects."""


class ItemMalformed(LensError):
    """A single feed item lacks required structure. Skipped, never fatal."""


class ContentParseError(LensError):
    """An article's `contentJson` attribute is not a JSON array of blocks."""
