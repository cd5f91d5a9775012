"""
Incremental SSE decoder for chat-completion streams.

Raw bytes go in, ContentDeltas come out. Only complete, newline-terminated
lines are ever parsed, so chunk boundaries from the network do not matter.
"""

from __future__ import annotations

from pydantic import ValidationError

from ..exceptions import StreamDecodeError
from ..models import ContentDelta
from .models import DecoderState, DecoderStats, DeltaEnvelope

DATA_PREFIX = b"data:"
DONE_TOKEN = "[DONE]"
LINE_TERMINATOR = b"\n"


class SSEFrameDecoder:
    """
    Stateful decoder turning an event-stream byte source into content deltas.

    The decoder stops for good after the `[DONE]` sentinel (COMPLETED) or the
    first undecodable payload (FAILED); later input is ignored.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self.state = DecoderState.STREAMING
        self.error: StreamDecodeError | None = None
        self.stats = DecoderStats()

    @property
    def is_finished(self) -> bool:
        return self.state is not DecoderState.STREAMING

    @property
    def is_completed(self) -> bool:
        return self.state is DecoderState.COMPLETED

    @property
    def pending_bytes(self) -> int:
        """Size of the trailing partial line still waiting for a terminator."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> list[ContentDelta]:
        """
        Append a chunk and decode every complete line it finishes.

        Returns the deltas in line order. Deltas decoded before a failing
        line in the same chunk are still returned; check `state` afterwards.
        """
        if self.is_finished:
            return []

        self.stats.bytes_received += len(chunk)
        self._buffer.extend(chunk)

        deltas: list[ContentDelta] = []
        while not self.is_finished:
            end = self._buffer.find(LINE_TERMINATOR)
            if end < 0:
                break
            line = bytes(self._buffer[:end])
            del self._buffer[:end + 1]

            delta = self._process_line(line)
            if delta is not None:
                deltas.append(delta)

        return deltas

    def _process_line(self, line: bytes) -> ContentDelta | None:
        self.stats.total_lines += 1

        if not line.startswith(DATA_PREFIX):
            self.stats.skipped_lines += 1
            return None

        try:
            payload = line[len(DATA_PREFIX):].decode("utf-8").strip()
        except UnicodeDecodeError as e:
            self._fail(f"Event payload is not valid UTF-8: {e}", "")
            return None

        if not payload:
            self.stats.skipped_lines += 1
            return None

        self.stats.data_lines += 1

        if payload == DONE_TOKEN:
            self.state = DecoderState.COMPLETED
            return None

        try:
            envelope = DeltaEnvelope.model_validate_json(payload)
        except ValidationError as e:
            self._fail(f"Invalid delta envelope: {e.errors()[0]['msg']}", payload)
            return None

        content = envelope.content
        # Role-only and empty deltas carry no text
        if not content:
            return None

        self.stats.deltas += 1
        return ContentDelta(content)

    def _fail(self, message: str, payload: str) -> None:
        self.state = DecoderState.FAILED
        self.error = StreamDecodeError(message, payload=payload)

    def get_stats(self) -> dict[str, int]:
        """Get decoding statistics for monitoring."""
        return self.stats.as_dict()
