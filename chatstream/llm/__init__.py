"""
Chat-completion streaming over Server-Sent Events.

This package provides:
- Type-safe request, delta and outcome models
- Request construction from a conversation
- Incremental SSE decoding
- Cancellable streaming sessions
"""

from __future__ import annotations

from .exceptions import (
    BadStatusError,
    ErrorKind,
    InvalidInputError,
    LLMError,
    MissingCredentialError,
    NetworkError,
    StreamCancelledError,
    StreamDecodeError,
)
from .models import (
    ContentDelta,
    MessageRole,
    OutcomeStatus,
    RequestMessage,
    StreamOutcome,
    StreamRequest,
)
from .request_builder import build_stream_request
from .streaming.parser import SSEFrameDecoder
from .streaming.session import StreamSession, open_stream
from .client import ChatCompletionsClient

__all__ = [
    "BadStatusError",
    # Client
    "ChatCompletionsClient",
    # Core models
    "ContentDelta",
    # Exceptions
    "ErrorKind",
    "InvalidInputError",
    "LLMError",
    "MessageRole",
    "MissingCredentialError",
    "NetworkError",
    "OutcomeStatus",
    "RequestMessage",
    # Streaming
    "SSEFrameDecoder",
    "StreamCancelledError",
    "StreamDecodeError",
    "StreamOutcome",
    "StreamRequest",
    "StreamSession",
    "build_stream_request",
    "open_stream",
]
