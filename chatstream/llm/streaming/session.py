"""
Cancellable streaming session over one chat-completion HTTP exchange.

A background producer task owns the connection: it reads raw bytes, feeds
the SSE decoder and pushes deltas into a queue. The consumer pulls deltas
by iterating the session and always receives exactly one StreamOutcome last.
"""

from __future__ import annotations

import asyncio
import contextlib
import uuid
from collections.abc import AsyncIterator
from typing import Any

import httpx

from chatstream.logging_utils import (
    ContextualLogger,
    StreamErrorHandler,
    operation_context,
)

from ..exceptions import ErrorKind, StreamCancelledError
from ..models import (
    DEFAULT_ENDPOINT,
    ContentDelta,
    OutcomeStatus,
    StreamOutcome,
    StreamRequest,
)
from .models import SessionState
from .parser import SSEFrameDecoder

DEFAULT_QUEUE_SIZE = 64
DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)
MAX_ERROR_BODY_CHARS = 500
EVENT_STREAM_TYPE = "text/event-stream"

_TERMINAL_STATES = {
    OutcomeStatus.COMPLETED: SessionState.COMPLETED,
    OutcomeStatus.FAILED: SessionState.FAILED,
    OutcomeStatus.CANCELLED: SessionState.CANCELLED,
}

# Queued after a cancel so a consumer blocked on get() wakes up
_WAKE = object()

StreamItem = ContentDelta | StreamOutcome


class StreamSession:
    """
    One request/response streaming session; never reused.

    Usage:
        async with open_stream(request, api_key) as session:
            async for item in session:
                ...

    Iteration yields ContentDelta items in arrival order and then exactly one
    StreamOutcome. Failures are reported through that outcome, not raised.
    """

    def __init__(
        self,
        request: StreamRequest,
        credential: str | None,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | float | None = DEFAULT_TIMEOUT,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self.request = request
        self.endpoint = endpoint
        self.session_id = uuid.uuid4().hex[:12]
        self._credential = credential
        self._http_client = http_client
        self._timeout = timeout
        self._decoder = SSEFrameDecoder()
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=queue_size)
        self._producer: asyncio.Task[None] | None = None
        self._state = SessionState.IDLE
        self._outcome: StreamOutcome | None = None
        self._outcome_delivered = False
        self._log = ContextualLogger({
            "session_id": self.session_id,
            "model": request.model,
        })

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def outcome(self) -> StreamOutcome | None:
        """Terminal outcome once reached, else None."""
        return self._outcome

    @property
    def decoder(self) -> SSEFrameDecoder:
        return self._decoder

    def request_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._credential}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def start(self) -> None:
        """Dispatch the request. Only the first call has any effect."""
        if self._state is not SessionState.IDLE:
            return

        if not self._credential:
            self._log.warning("No API credential configured; request not sent")
            self._settle(StreamOutcome.failed(
                ErrorKind.MISSING_CREDENTIAL, "No API credential configured"
            ))
            return

        self._state = SessionState.STREAMING
        self._log.info(
            "Stream started",
            endpoint=self.endpoint,
            message_count=len(self.request.messages),
            temperature=self.request.temperature,
        )
        self._producer = asyncio.create_task(
            self._produce(), name=f"stream-session-{self.session_id}"
        )

    def cancel(self) -> None:
        """
        Stop the session and abort the connection.

        Safe in any state; a no-op once a terminal state is reached.
        """
        if self._state.is_terminal:
            return

        self._settle(StreamOutcome.cancelled())
        if self._producer is not None and not self._producer.done():
            self._producer.cancel()
        if not self._queue.full():
            self._queue.put_nowait(_WAKE)

    async def aclose(self) -> None:
        """Cancel if still running and wait until the connection is released."""
        self.cancel()
        if self._producer is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._producer

    async def __aenter__(self) -> StreamSession:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Consumer side
    # ------------------------------------------------------------------ #

    def __aiter__(self) -> AsyncIterator[StreamItem]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[StreamItem]:
        # Leaving the loop early (break, error, GC) still tears down the producer
        try:
            while True:
                try:
                    item = await self.__anext__()
                except StopAsyncIteration:
                    return
                yield item
        finally:
            await self.aclose()

    async def __anext__(self) -> StreamItem:
        if self._outcome_delivered:
            raise StopAsyncIteration
        if self._state is SessionState.IDLE:
            await self.start()

        if self._outcome is None:
            item = await self._queue.get()
            if self._outcome is None:
                if isinstance(item, ContentDelta):
                    return item
                if isinstance(item, StreamOutcome):
                    self._settle(item)
                elif isinstance(item, BaseException):
                    self._state = SessionState.FAILED
                    self._outcome_delivered = True
                    raise item

        self._outcome_delivered = True
        return self._outcome

    async def collect(self) -> str:
        """
        Consume the whole stream and return the concatenated reply.

        Raises:
            LLMError: The matching subclass when the stream failed
            StreamCancelledError: When the stream was cancelled
        """
        parts: list[str] = []
        async with operation_context(
            "collect_stream", context={"session_id": self.session_id}
        ), self:
            async for item in self:
                if isinstance(item, ContentDelta):
                    parts.append(item.content)
                elif item.is_failed:
                    raise item.to_exception()
                elif item.is_cancelled:
                    raise StreamCancelledError(item.description)
        return "".join(parts)

    def _settle(self, outcome: StreamOutcome) -> None:
        self._outcome = outcome
        self._state = _TERMINAL_STATES[outcome.status]

        if outcome.is_failed:
            self._log.error(
                "Stream failed",
                error_kind=outcome.error.value,
                status_code=outcome.status_code,
                error_message=outcome.message,
                **self._decoder.get_stats(),
            )
        elif outcome.is_cancelled:
            self._log.info("Stream cancelled", **self._decoder.get_stats())
        else:
            self._log.info("Stream completed", **self._decoder.get_stats())

    # ------------------------------------------------------------------ #
    # Producer side
    # ------------------------------------------------------------------ #

    async def _produce(self) -> None:
        client = self._http_client or httpx.AsyncClient(timeout=self._timeout)
        try:
            outcome = await self._transfer(client)
        except Exception as e:
            kind = StreamErrorHandler.classify_error(e)
            if kind is None:
                await self._queue.put(e)
                return
            outcome = StreamOutcome.failed(
                kind,
                StreamErrorHandler.describe(e),
                getattr(e, "status_code", None),
            )
        finally:
            if self._http_client is None:
                await client.aclose()

        await self._queue.put(outcome)

    async def _transfer(self, client: httpx.AsyncClient) -> StreamOutcome:
        async with client.stream(
            "POST",
            self.endpoint,
            headers=self.request_headers(),
            json=self.request.to_payload(),
        ) as response:
            if not response.is_success:
                body = await response.aread()
                detail = body.decode("utf-8", errors="replace")[:MAX_ERROR_BODY_CHARS]
                message = f"HTTP {response.status_code}"
                if detail.strip():
                    message = f"{message}: {detail.strip()}"
                return StreamOutcome.failed(
                    ErrorKind.BAD_STATUS,
                    message,
                    response.status_code,
                )

            content_type = response.headers.get("content-type", "")
            media_type = content_type.split(";", 1)[0].strip().lower()
            if media_type != EVENT_STREAM_TYPE:
                self._log.warning(
                    "Unexpected content type for streaming response",
                    content_type=content_type,
                )

            async for chunk in response.aiter_bytes():
                for delta in self._decoder.feed(chunk):
                    await self._queue.put(delta)
                if self._decoder.error is not None:
                    raise self._decoder.error
                if self._decoder.is_finished:
                    break

        return StreamOutcome.completed()


def open_stream(
    request: StreamRequest,
    credential: str | None,
    *,
    endpoint: str = DEFAULT_ENDPOINT,
    http_client: httpx.AsyncClient | None = None,
    timeout: httpx.Timeout | float | None = DEFAULT_TIMEOUT,
    queue_size: int = DEFAULT_QUEUE_SIZE,
) -> StreamSession:
    """
    Open a cancellable stream of ContentDelta items followed by one outcome.

    The request is dispatched when the session is entered or first iterated.
    Pass `http_client` to share a connection pool; the session closes any
    client it creates itself.
    """
    return StreamSession(
        request,
        credential,
        endpoint=endpoint,
        http_client=http_client,
        timeout=timeout,
        queue_size=queue_size,
    )
