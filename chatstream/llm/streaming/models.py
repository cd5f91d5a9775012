"""
Streaming-specific models: decoder/session states and the delta envelope.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum

from pydantic import BaseModel


class DecoderState(Enum):
    """SSE decoder states."""
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


class SessionState(Enum):
    """Stream session lifecycle."""
    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self not in (SessionState.IDLE, SessionState.STREAMING)


class DeltaPayload(BaseModel):
    content: str | None = None


class ChoicePayload(BaseModel):
    delta: DeltaPayload


class DeltaEnvelope(BaseModel):
    """`{"choices": [{"delta": {"content": ...}}]}`; other fields are ignored."""
    choices: list[ChoicePayload]

    @property
    def content(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].delta.content


@dataclass
class DecoderStats:
    """Counters for one decoder instance."""
    total_lines: int = 0
    data_lines: int = 0
    deltas: int = 0
    skipped_lines: int = 0
    bytes_received: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)
