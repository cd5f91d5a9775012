"""
HTTP client for streaming chat completions.

Holds one pooled httpx.AsyncClient plus the endpoint, credential and
sampling defaults, and opens a fresh StreamSession per send action.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import httpx

from .models import DEFAULT_ENDPOINT, DEFAULT_MODEL, DEFAULT_TEMPERATURE
from .request_builder import build_stream_request
from .streaming.session import (
    DEFAULT_QUEUE_SIZE,
    DEFAULT_TIMEOUT,
    StreamSession,
    open_stream,
)

if TYPE_CHECKING:                                        # pragma: no cover
    from chatstream.config import Configuration
    from chatstream.history.models import Conversation, Message


class ChatCompletionsClient:
    """Streaming chat-completions client configured by endpoint, model and key."""

    def __init__(
        self,
        api_key: str | None,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint
        self.model = model
        self.temperature = temperature
        self.queue_size = queue_size
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            timeout=timeout, transport=transport
        )

    @classmethod
    def from_configuration(
        cls, config: Configuration, **overrides: Any
    ) -> ChatCompletionsClient:
        """Build a client for the active provider in `config`."""
        llm_config = config.get_llm_config()
        http_config = config.get_http_client_config()
        streaming_config = config.get_streaming_config()

        kwargs: dict[str, Any] = {
            "endpoint": config.endpoint_url,
            "model": llm_config["model"],
            "temperature": llm_config["temperature"],
            "timeout": httpx.Timeout(
                connect=http_config["connect_timeout"],
                read=http_config["read_timeout"],
                write=http_config["write_timeout"],
                pool=http_config["pool_timeout"],
            ),
            "queue_size": streaming_config["queue_size"],
        }
        kwargs.update(overrides)
        return cls(config.llm_api_key, **kwargs)

    def stream(
        self,
        conversation: Conversation | Sequence[Message],
        *,
        model: str | None = None,
        temperature: float | None = None,
    ) -> StreamSession:
        """
        Open a stream replying to `conversation`.

        Raises:
            InvalidInputError: If the conversation or settings are invalid.
        """
        request = build_stream_request(
            conversation,
            model or self.model,
            self.temperature if temperature is None else temperature,
        )
        return open_stream(
            request,
            self.api_key,
            endpoint=self.endpoint,
            http_client=self.client,
            queue_size=self.queue_size,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> ChatCompletionsClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
