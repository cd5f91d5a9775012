"""
Request construction for streaming chat completions.

Pure mapping from a conversation and sampling settings to a StreamRequest.
No I/O happens here.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

from .exceptions import InvalidInputError
from .models import RequestMessage, StreamRequest

if TYPE_CHECKING:                                        # pragma: no cover
    from chatstream.history.models import Conversation, Message


def build_stream_request(
    conversation: Conversation | Sequence[Message],
    model: str,
    temperature: float,
) -> StreamRequest:
    """
    Build the wire request for one send action.

    Args:
        conversation: Conversation (or plain message sequence) to send
        model: Target model identifier
        temperature: Sampling temperature, passed through unchecked for range

    Returns:
        Immutable StreamRequest with streaming enabled

    Raises:
        InvalidInputError: If there are no messages, the model id is blank,
            or the temperature is not a finite number.
    """
    messages = getattr(conversation, "messages", conversation)
    if not messages:
        raise InvalidInputError("Conversation must contain at least one message")

    if not isinstance(model, str) or not model.strip():
        raise InvalidInputError("Model identifier must be a non-empty string")

    if isinstance(temperature, bool) or not isinstance(temperature, int | float):
        raise InvalidInputError(
            f"Temperature must be a number, got {type(temperature).__name__}"
        )
    if not math.isfinite(temperature):
        raise InvalidInputError(f"Temperature must be finite, got {temperature}")

    return StreamRequest(
        model=model,
        messages=tuple(
            RequestMessage(role=m.role.value, content=m.text) for m in messages
        ),
        temperature=float(temperature),
        stream=True,
    )
