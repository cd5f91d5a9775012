"""
Core streaming dataclasses.

This module provides the value types exchanged with the streaming core:
- Message roles
- The immutable wire request
- Content deltas
- Terminal stream outcomes
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .exceptions import ERROR_TYPES, ErrorKind, LLMError

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4-turbo"
DEFAULT_TEMPERATURE = 0.7
AVAILABLE_MODELS = ("gpt-4o", "gpt-4-turbo", "gpt-3.5-turbo")


class MessageRole(Enum):
    """OpenAI-compatible message roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class OutcomeStatus(Enum):
    """Terminal states of a stream."""
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RequestMessage:
    """One (role, content) pair as sent on the wire."""
    role: str
    content: str


@dataclass(frozen=True)
class StreamRequest:
    """Immutable chat-completion request descriptor."""
    model: str
    messages: tuple[RequestMessage, ...]
    temperature: float = DEFAULT_TEMPERATURE
    stream: bool = True

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON request body."""
        return {
            "model": self.model,
            "messages": [
                {"role": m.role, "content": m.content} for m in self.messages
            ],
            "temperature": self.temperature,
            "stream": self.stream,
        }


@dataclass(frozen=True)
class ContentDelta:
    """A single fragment of assistant output text."""
    content: str

    def __str__(self) -> str:
        return self.content


_DESCRIPTIONS = {
    ErrorKind.INVALID_INPUT: "Invalid request: {message}",
    ErrorKind.MISSING_CREDENTIAL: "Missing API key. Please set it in Settings.",
    ErrorKind.BAD_STATUS: "API Error – Status Code: {status_code}",
    ErrorKind.NETWORK_ERROR: "Network Error: {message}",
    ErrorKind.DECODE_ERROR: "Internal Error: Failed to decode API response.",
}


@dataclass(frozen=True)
class StreamOutcome:
    """Terminal state of a stream session."""
    status: OutcomeStatus
    error: ErrorKind | None = None
    status_code: int | None = None
    message: str | None = None

    @classmethod
    def completed(cls) -> StreamOutcome:
        return cls(OutcomeStatus.COMPLETED)

    @classmethod
    def cancelled(cls) -> StreamOutcome:
        return cls(OutcomeStatus.CANCELLED)

    @classmethod
    def failed(
        cls,
        error: ErrorKind,
        message: str | None = None,
        status_code: int | None = None,
    ) -> StreamOutcome:
        return cls(
            OutcomeStatus.FAILED,
            error=error,
            status_code=status_code,
            message=message,
        )

    @classmethod
    def from_exception(cls, exc: LLMError) -> StreamOutcome:
        return cls.failed(exc.kind, str(exc), exc.status_code)

    @property
    def is_completed(self) -> bool:
        return self.status is OutcomeStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    @property
    def is_cancelled(self) -> bool:
        return self.status is OutcomeStatus.CANCELLED

    @property
    def description(self) -> str:
        """Human-readable description for display next to partial output."""
        if self.status is OutcomeStatus.COMPLETED:
            return "Completed."
        if self.status is OutcomeStatus.CANCELLED:
            return "API request canceled."
        template = _DESCRIPTIONS[self.error]
        return template.format(
            message=self.message or "unknown error",
            status_code=self.status_code,
        )

    def to_exception(self) -> LLMError:
        """Rebuild the matching LLMError for a failed outcome."""
        if self.error is None:
            raise ValueError(f"Outcome {self.status.value} carries no error")
        error_type = ERROR_TYPES[self.error]
        return error_type(
            self.message or self.description,
            status_code=self.status_code,
        )
