"""chatstream - cancellable chat-completion streaming over SSE."""

from chatstream.llm import (
    ChatCompletionsClient,
    ContentDelta,
    ErrorKind,
    StreamOutcome,
    StreamSession,
    build_stream_request,
    open_stream,
)

__all__ = [
    "ChatCompletionsClient",
    "ContentDelta",
    "ErrorKind",
    "StreamOutcome",
    "StreamSession",
    "build_stream_request",
    "open_stream",
]
