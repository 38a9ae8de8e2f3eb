"""Domain models for the channel adapter."""
from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


def gen_id() -> str:
    return str(uuid.uuid4())


# ============================================================================
# Enums
# ============================================================================


class ChannelState(str, Enum):
    """Connection lifecycle of a channel instance."""

    unconfigured = "unconfigured"
    connecting = "connecting"
    listening = "listening"


class PayloadType(str, Enum):
    """Canonical payload shapes understood by the renderers."""

    text = "text"
    image = "image"
    card = "card"
    carousel = "carousel"
    single_choice = "single-choice"
    quick_reply = "quick_reply"


# ============================================================================
# Core Models
# ============================================================================


class Conversation(BaseModel):
    """An exchange between a tenant's bot and one platform channel."""

    id: str = Field(default_factory=gen_id, description="Unique conversation identifier")
    tenant_id: str = Field(description="Owning tenant")
    channel_ref: str = Field(description="Platform channel / DM identifier used for delivery")
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Message(BaseModel):
    """A canonical message recorded against a conversation."""

    id: str = Field(default_factory=gen_id, description="Unique message identifier")
    conversation_id: str = Field(description="Conversation this message belongs to")
    author_id: Optional[str] = Field(default=None, description="Platform user reference, None for the bot")
    payload: dict[str, Any] = Field(default_factory=dict, description="Canonical payload")
    sent_on: datetime = Field(default_factory=datetime.utcnow)
    feedback: Optional[int] = Field(default=None, description="User rating attached after the fact")
