"""Collaborator contracts consumed by channels, and their tenant-scoped services."""
from __future__ import annotations

from typing import Any, Optional, Protocol

from conduit.core.scope import ScopeCache
from conduit.domain.models import Conversation, Message


class ConversationStore(Protocol):
    async def get(self, conversation_id: str) -> Optional[Conversation]: ...

    async def recent(self, channel_ref: str) -> Conversation:
        """Most recent conversation for the channel reference, created if none exists."""
        ...


class MessageStore(Protocol):
    async def create(self, conversation_id: str, payload: dict[str, Any], author_id: Optional[str]) -> Message: ...

    async def history(self, conversation_id: str, limit: int = 50) -> list[Message]: ...


class FeedbackUpdater(Protocol):
    async def update(self, event_id: str, feedback: int) -> None: ...


class ConversationService(ScopeCache[ConversationStore]):
    pass


class MessageService(ScopeCache[MessageStore]):
    pass


class FeedbackService(ScopeCache[FeedbackUpdater]):
    pass
