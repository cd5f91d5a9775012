# chatstream/history/models.py
from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from chatstream.llm.models import MessageRole


class Message(BaseModel):
    """
    One conversational turn. Text only grows while a reply is streamed into it.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: MessageRole
    text: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def append_text(self, fragment: str) -> None:
        self.text += fragment


class Conversation(BaseModel):
    """
    Ordered message list; insertion order is conversation order.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = "New Chat"
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    messages: list[Message] = Field(default_factory=list)

    def add_message(self, role: MessageRole, text: str = "") -> Message:
        message = Message(role=role, text=text)
        self.messages.append(message)
        return message

    def find_message(self, message_id: str) -> Message | None:
        for message in self.messages:
            if message.id == message_id:
                return message
        return None

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None
