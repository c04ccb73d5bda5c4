"""Exception hierarchy for the Teh Telegram SDK and dispatch layer."""

from typing import Any, Dict, Optional


class TehError(Exception):
    """Base class for every error raised by this library."""


class ConfigurationError(TehError):
    """The client cannot be constructed (e.g. missing bot token)."""


class TransportError(TehError):
    """The remote host could not be reached (network failure or timeout).

    Attributes:
        method: Bot API method being called.
    """

    def __init__(self, method: str, cause: Exception) -> None:
        """Initialise with the API method and the underlying transport error."""
        self.method = method
        super().__init__(f"Transport error calling {method}: {cause}")


class ParseError(TehError):
    """The response body was not valid JSON.

    Attributes:
        method: Bot API method being called.
        status_code: HTTP status code of the response.
        raw: First 100 characters of the body.
    """

    def __init__(self, method: str, status_code: int, raw: str) -> None:
        """Initialise with the API method, HTTP status and the raw body."""
        self.method = method
        self.status_code = status_code
        self.raw = raw[:100]
        super().__init__(f"Could not parse {method} response (HTTP {status_code}): {self.raw!r}")


class RemoteAPIError(TehError):
    """The Bot API answered with ``{"ok": false, ...}``.

    Attributes:
        error_code: ``error_code`` field of the response.
        description: ``description`` field of the response.
        parameters: ``parameters`` field (``retry_after``, ``migrate_to_chat_id``).
        method: Bot API method being called.
    """

    def __init__(
        self,
        error_code: int,
        description: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
        method: Optional[str] = None,
    ) -> None:
        """Initialise with the fields of the error response."""
        self.error_code = error_code
        self.description = description or "Unknown error"
        self.parameters = parameters or {}
        self.method = method
        super().__init__(f"API error {error_code}: {self.description}")

    @property
    def retry_after(self) -> Optional[int]:
        """Seconds the server asked us to wait, when it said so."""
        return self.parameters.get("retry_after")


class UnresolvableChatError(TehError):
    """A context operation needs a destination but the update carries none."""


class DoubleAdvanceError(TehError):
    """A middleware called ``advance()`` more than once in one invocation."""
