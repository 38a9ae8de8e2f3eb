"""SQL-backed conversation, message and feedback stores, one instance per tenant."""
from __future__ import annotations
import asyncio
from datetime import datetime
from typing import Any, Optional
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from conduit.domain.models import Conversation, Message, gen_id
from conduit.observability.logging import get_logger
from conduit.persistence.schema import ConversationRow, MessageRow

log = get_logger("persistence")

def _conversation(r: ConversationRow) -> Conversation:
    return Conversation(id=r.id, tenant_id=r.tenant_id, channel_ref=r.channel_ref, created_at=r.created_at)

def _message(r: MessageRow) -> Message:
    return Message(
        id=r.id, conversation_id=r.conversation_id, author_id=r.author_id,
        payload=r.payload or {}, sent_on=r.sent_on, feedback=r.feedback,
    )

class SqlConversationStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], tenant_id: str):
        self.session_factory = session_factory
        self.tenant_id = tenant_id
        self._create_locks: dict[str, asyncio.Lock] = {}

    async def get(self, conversation_id: str) -> Optional[Conversation]:
        async with self.session_factory() as s:
            row = await s.get(ConversationRow, conversation_id)
            # conversations of other tenants are invisible
            if row is None or row.tenant_id != self.tenant_id:
                return None
            return _conversation(row)

    async def recent(self, channel_ref: str) -> Conversation:
        # one creator per channel ref; concurrent webhooks for a new channel share it
        lock = self._create_locks.setdefault(channel_ref, asyncio.Lock())
        async with lock, self.session_factory() as s:
            stmt = (
                select(ConversationRow)
                .where(ConversationRow.tenant_id == self.tenant_id, ConversationRow.channel_ref == channel_ref)
                .order_by(desc(ConversationRow.created_at))
                .limit(1)
            )
            row = (await s.execute(stmt)).scalars().first()
            if row is None:
                row = ConversationRow(id=gen_id(), tenant_id=self.tenant_id, channel_ref=channel_ref, created_at=datetime.utcnow())
                s.add(row)
                await s.commit()
                log.info("conversation_created", conversation_id=row.id, channel_ref=channel_ref)
            return _conversation(row)

class SqlMessageStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], tenant_id: str):
        self.session_factory = session_factory
        self.tenant_id = tenant_id

    async def create(self, conversation_id: str, payload: dict[str, Any], author_id: Optional[str]) -> Message:
        msg = Message(conversation_id=conversation_id, author_id=author_id, payload=payload)
        async with self.session_factory() as s:
            s.add(MessageRow(
                id=msg.id, conversation_id=msg.conversation_id, author_id=msg.author_id,
                payload=msg.payload, sent_on=msg.sent_on, feedback=None,
            ))
            await s.commit()
        return msg

    async def history(self, conversation_id: str, limit: int = 50) -> list[Message]:
        async with self.session_factory() as s:
            stmt = (
                select(MessageRow)
                .join(ConversationRow, ConversationRow.id == MessageRow.conversation_id)
                .where(MessageRow.conversation_id == conversation_id, ConversationRow.tenant_id == self.tenant_id)
                .order_by(desc(MessageRow.sent_on))
                .limit(limit)
            )
            rows = list((await s.execute(stmt)).scalars().all())
        # reverse to chronological
        rows.reverse()
        return [_message(r) for r in rows]

class SqlFeedbackUpdater:
    """Attaches a rating to a previously recorded inbound message. Best-effort."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], tenant_id: str):
        self.session_factory = session_factory
        self.tenant_id = tenant_id

    async def update(self, event_id: str, feedback: int) -> None:
        async with self.session_factory() as s:
            row = await s.get(MessageRow, event_id)
            conversation = await s.get(ConversationRow, row.conversation_id) if row else None
            if row is None or conversation is None or conversation.tenant_id != self.tenant_id:
                log.warning("feedback_event_not_found", event_id=event_id)
                return
            row.feedback = feedback
            await s.commit()
            log.info("feedback_recorded", event_id=event_id, feedback=feedback)
