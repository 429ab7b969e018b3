"""
Error taxonomy for AI metadata generation.

Every failure inside the generation pipeline is expressed as one of these
exceptions. Orchestrators catch them at their own boundary and turn them into a
tagged result (``success=False`` plus a readable ``error`` string), so callers
only ever see exceptions when they use the lower-level pieces directly.

Error Categories:
    - ConfigurationError: settings missing, feature disabled, unknown or
      unimplemented provider, invalid provider configuration. Never retried.
    - BackendError: non-2xx response, connection failure or empty content from
      the AI backend. BackendTimeoutError is the timeout flavour.
    - ParseError: the backend answered but the payload lacks the expected fields.
    - LoggingError: the audit log write failed. Always swallowed.

Python Learning Notes:
    - Custom exception classes inherit from Exception (via MetagenError)
    - Class attributes (code) give every subclass a stable machine-readable tag
    - ``raise NewError(...) from original`` keeps the original traceback chained
"""

from typing import Any, Dict, Optional


class MetagenError(Exception):
    """
    Base class for all metagen errors.

    Attributes:
        message (str): Human-readable description, safe to show to an editor.
        provider (Optional[str]): Provider id or display name involved, if any.
        cause (Optional[BaseException]): Underlying exception, if any.
    """

    code = "UNKNOWN"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary for structured logging."""
        return {
            "code": self.code,
            "message": self.message,
            "provider": self.provider,
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(MetagenError):
    """Settings are missing or invalid, or the requested feature is switched off."""

    code = "INVALID_CONFIG"


class BackendError(MetagenError):
    """The AI backend could not produce a usable answer."""

    code = "API_ERROR"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, provider=provider, cause=cause)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class BackendTimeoutError(BackendError):
    """The backend call exceeded the configured timeout."""

    code = "TIMEOUT"


class ParseError(MetagenError):
    """The backend response was malformed or missing expected fields."""

    code = "PARSE_ERROR"


class LoggingError(MetagenError):
    """Persisting an audit log entry failed."""

    code = "LOGGING_ERROR"
