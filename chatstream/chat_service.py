"""
Chat Service for chatstream

This module handles the caller side of a streamed reply:
- Conversation creation with a default system prompt
- Appending the user turn and an assistant placeholder
- Applying deltas to the placeholder by message id
- Annotating partial replies when a stream fails
- Cancelling the previous stream when a new message is sent
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Any

from pydantic import BaseModel, ConfigDict

from chatstream.history.models import Conversation, Message
from chatstream.llm.models import ContentDelta, MessageRole, StreamOutcome
from chatstream.llm.streaming.session import StreamSession
from chatstream.logging_utils import log_operation

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful and concise assistant."
DEFAULT_TITLE_PREFIX = "Chat"
PLACEHOLDER_TEXT = ""
ERROR_PREFIX = "⚠️ Error: "


class ChatService:
    """
    Conversation orchestrator
    1. Takes your message
    2. Opens a stream for the whole conversation
    3. Streams the reply into an assistant message
    4. Reports how the stream ended
    """

    class ChatServiceConfig(BaseModel):
        model_config = ConfigDict(arbitrary_types_allowed=True)

        llm_client: Any  # ChatCompletionsClient
        system_prompt: str = DEFAULT_SYSTEM_PROMPT
        title_prefix: str = DEFAULT_TITLE_PREFIX

    def __init__(self, service_config: ChatService.ChatServiceConfig):
        self.llm_client = service_config.llm_client
        self.system_prompt = service_config.system_prompt
        self.title_prefix = service_config.title_prefix
        self.conversations: list[Conversation] = []
        self._active: StreamSession | None = None

    @property
    def is_streaming(self) -> bool:
        return self._active is not None and not self._active.state.is_terminal

    def new_conversation(self, title: str | None = None) -> Conversation:
        """Create a conversation seeded with the system prompt."""
        conversation = Conversation(
            title=title or f"{self.title_prefix} {len(self.conversations) + 1}"
        )
        if self.system_prompt:
            conversation.add_message(MessageRole.SYSTEM, self.system_prompt)
        self.conversations.insert(0, conversation)
        return conversation

    def cancel(self) -> None:
        """Cancel the active stream, if any."""
        if self._active is not None:
            self._active.cancel()

    async def send(
        self,
        conversation: Conversation,
        text: str,
        **stream_kwargs: Any,
    ) -> AsyncGenerator[ContentDelta | StreamOutcome, None]:
        """
        Append a user message and stream the assistant reply into the
        conversation. Yields each delta and finally the outcome.

        Blank input is ignored and yields nothing.
        """
        text = text.strip()
        if not text:
            return

        self.cancel()
        conversation.add_message(MessageRole.USER, text)
        session = self.llm_client.stream(conversation, **stream_kwargs)
        reply = conversation.add_message(MessageRole.ASSISTANT, PLACEHOLDER_TEXT)
        self._active = session

        try:
            async with session:
                async for item in session:
                    if isinstance(item, ContentDelta):
                        self._apply_delta(conversation, reply.id, item)
                    else:
                        self._apply_outcome(conversation, reply, item)
                    yield item
        finally:
            if self._active is session:
                self._active = None

    @log_operation(
        "chat_reply",
        summarize=lambda outcome: outcome.status.value if outcome else None,
    )
    async def reply(
        self, conversation: Conversation, text: str, **stream_kwargs: Any
    ) -> StreamOutcome | None:
        """Send `text` and wait for the whole reply; returns the outcome."""
        outcome: StreamOutcome | None = None
        async for item in self.send(conversation, text, **stream_kwargs):
            if isinstance(item, StreamOutcome):
                outcome = item
        return outcome

    def _apply_delta(
        self, conversation: Conversation, message_id: str, delta: ContentDelta
    ) -> None:
        message = conversation.find_message(message_id)
        if message is None:
            logger.warning(f"Dropping delta for missing message {message_id}")
            return
        message.append_text(delta.content)

    def _apply_outcome(
        self, conversation: Conversation, reply: Message, outcome: StreamOutcome
    ) -> None:
        if not outcome.is_failed:
            return

        annotation = f"{ERROR_PREFIX}{outcome.description}"
        logger.error(
            f"Reply in conversation {conversation.id} failed: {outcome.description}"
        )
        if reply.text:
            reply.text = f"{reply.text}\n\n{annotation}"
        else:
            reply.text = annotation
