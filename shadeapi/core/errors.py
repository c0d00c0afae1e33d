import errno
import json
import logging
import socket
from typing import List, Optional

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error carrying the HTTP status class and message shown to the client."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
        errors: Optional[List[str]] = None,
    ):
        if status_code is not None:
            self.status_code = status_code
        self.message = message or self.default_message
        self.errors = list(errors) if errors else []
        super().__init__(self.message)

    def __repr__(self):
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class ClientValidationError(ApiError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[str]] = None):
        super().__init__(message=message, errors=errors)


class _ServiceError(ApiError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(message=message)


class ServiceAuthError(_ServiceError):
    status_code = 401
    default_message = "Authentication failed with analysis service"


class ConfigurationError(ServiceAuthError):
    # Missing credentials are a server fault, not the caller's
    status_code = 500
    default_message = "Analysis service API key not configured"


class ServiceTimeout(_ServiceError):
    status_code = 408
    default_message = "Analysis service request timeout. Please try again"


class ServiceThrottled(_ServiceError):
    status_code = 429
    default_message = "Analysis service rate limit exceeded. Please try again later"


class ServiceUnavailable(_ServiceError):
    status_code = 503
    default_message = "Analysis service temporarily unavailable"


class ResponseFormatError(_ServiceError):
    status_code = 500
    default_message = "Invalid response format from analysis service"


class InternalError(_ServiceError):
    status_code = 500
    default_message = "Failed to process tooth shade analysis"


_AUTH_MARKERS = ("401", "authentication")
_THROTTLE_MARKERS = ("429", "rate limit")
_TIMEOUT_MARKERS = ("timeout", "timed out")
_CONNECTION_MARKERS = (
    "econnrefused",
    "enotfound",
    "connection refused",
    "connection error",
    "name or service not known",
    "nodename nor servname",
)


def _error_text(exc: BaseException) -> str:
    parts = [str(exc), type(exc).__name__]
    for attr in ("code", "status_code"):
        value = getattr(exc, attr, None)
        if value is not None:
            parts.append(str(value))
    return " ".join(parts).lower()


def _is_connection_failure(exc: BaseException, text: str) -> bool:
    if isinstance(exc, (ConnectionRefusedError, socket.gaierror)):
        return True
    if isinstance(exc, OSError) and exc.errno == errno.ECONNREFUSED:
        return True
    return any(marker in text for marker in _CONNECTION_MARKERS)


def classify_error(exc: BaseException) -> ApiError:
    """
    Map any failure raised while running an analysis onto the API error taxonomy.

    The external client does not type its failures reliably, so the rules look
    at the error text and the ``code``/``status_code`` attributes. Rules are
    applied in order and the first match wins.
    """
    if isinstance(exc, ApiError):
        return exc

    text = _error_text(exc)

    if any(marker in text for marker in _AUTH_MARKERS):
        return ServiceAuthError()
    if any(marker in text for marker in _THROTTLE_MARKERS):
        return ServiceThrottled()
    if any(marker in text for marker in _TIMEOUT_MARKERS):
        return ServiceTimeout()
    if _is_connection_failure(exc, text):
        return ServiceUnavailable()
    if isinstance(exc, json.JSONDecodeError):
        return ResponseFormatError()

    logger.debug(f"Unclassified error {type(exc).__name__}: {exc}")
    return InternalError()
