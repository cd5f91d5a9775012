"""
Error handling for chat-completion streaming.

Every failure carries an ErrorKind so callers can branch on the category
without matching exception types:
- Input validation before any I/O
- Missing credentials
- HTTP status failures with the numeric code preserved
- Transport failures
- Malformed event payloads
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Failure categories surfaced by a stream."""
    INVALID_INPUT = "invalid_input"
    MISSING_CREDENTIAL = "missing_credential"
    BAD_STATUS = "bad_status"
    NETWORK_ERROR = "network_error"
    DECODE_ERROR = "decode_error"


class LLMError(Exception):
    """Base LLM error with rich context."""

    kind: ErrorKind = ErrorKind.NETWORK_ERROR

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.status_code = status_code
        self.response_data = response_data or {}


class InvalidInputError(LLMError):
    """Request construction inputs were rejected."""
    kind = ErrorKind.INVALID_INPUT


class MissingCredentialError(LLMError):
    """No API credential was configured."""
    kind = ErrorKind.MISSING_CREDENTIAL


class BadStatusError(LLMError):
    """HTTP response outside the 2xx range."""
    kind = ErrorKind.BAD_STATUS


class NetworkError(LLMError):
    """Transport-level failure (connect, read, timeout)."""
    kind = ErrorKind.NETWORK_ERROR


class StreamDecodeError(LLMError):
    """An event payload could not be decoded into a delta envelope."""
    kind = ErrorKind.DECODE_ERROR

    def __init__(self, message: str, *, payload: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.payload = payload


class StreamCancelledError(Exception):
    """Raised by blocking helpers when the stream was cancelled.

    Not an LLMError: cancellation is a caller decision, not a failure.
    """


ERROR_TYPES: dict[ErrorKind, type[LLMError]] = {
    ErrorKind.INVALID_INPUT: InvalidInputError,
    ErrorKind.MISSING_CREDENTIAL: MissingCredentialError,
    ErrorKind.BAD_STATUS: BadStatusError,
    ErrorKind.NETWORK_ERROR: NetworkError,
    ErrorKind.DECODE_ERROR: StreamDecodeError,
}
