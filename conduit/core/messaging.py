from __future__ import annotations
from typing import Any
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from conduit.channels.base import Channel
from conduit.config import Settings
from conduit.core.conduits import Conduits
from conduit.core.stores import ConversationService, FeedbackService, MessageService
from conduit.domain.models import Message
from conduit.observability.logging import get_logger
from conduit.persistence.db import init_db
from conduit.persistence.repo import SqlConversationStore, SqlFeedbackUpdater, SqlMessageStore
from conduit.security.auth import tenant_for_key

log = get_logger("messaging")

class Messaging:
    """Owns the tenant-scoped stores and channel instances.

    The HTTP layer goes through this object only.
    """
    def __init__(self, settings: Settings, engine: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]):
        self.settings = settings
        self.engine = engine
        self.session_factory = session_factory

        self.conversations = ConversationService(lambda tenant_id: SqlConversationStore(session_factory, tenant_id))
        self.messages = MessageService(lambda tenant_id: SqlMessageStore(session_factory, tenant_id))
        self.feedback = FeedbackService(lambda tenant_id: SqlFeedbackUpdater(session_factory, tenant_id))
        self.conduits = Conduits(settings, self.conversations, self.messages, self.feedback)

    async def start(self) -> None:
        await init_db(self.engine)
        log.info("messaging_started", tenants=sorted(self.settings.tenants))

    async def stop(self) -> None:
        await self.conduits.close()
        await self.engine.dispose()
        log.info("messaging_stopped")

    def tenant_for_key(self, api_key: str | None) -> str | None:
        return tenant_for_key(self.settings, api_key)

    async def channel(self, tenant_id: str, name: str) -> Channel:
        return await self.conduits.channel(tenant_id, name)

    async def send(self, tenant_id: str, channel: str, conversation_id: str, payload: dict[str, Any]) -> None:
        ch = await self.channel(tenant_id, channel)
        await ch.send(conversation_id, payload)

    async def list_messages(self, tenant_id: str, conversation_id: str, limit: int = 50) -> list[Message]:
        store = self.messages.for_tenant(tenant_id)
        return await store.history(conversation_id, limit=limit)
