from __future__ import annotations

from typing import Any, Optional

import pytest

from conduit.channels.slack.context import SlackClients
from conduit.core.stores import ConversationService, FeedbackService, MessageService
from conduit.domain.models import Conversation, Message


class FakeConversationStore:
    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        self.by_id: dict[str, Conversation] = {}

    def add(self, conversation_id: str, channel_ref: str) -> Conversation:
        conv = Conversation(id=conversation_id, tenant_id=self.tenant_id, channel_ref=channel_ref)
        self.by_id[conversation_id] = conv
        return conv

    async def get(self, conversation_id: str) -> Optional[Conversation]:
        return self.by_id.get(conversation_id)

    async def recent(self, channel_ref: str) -> Conversation:
        for conv in reversed(list(self.by_id.values())):
            if conv.channel_ref == channel_ref:
                return conv
        conv = Conversation(tenant_id=self.tenant_id, channel_ref=channel_ref)
        self.by_id[conv.id] = conv
        return conv


class FakeMessageStore:
    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        self.created: list[Message] = []

    async def create(self, conversation_id: str, payload: dict[str, Any], author_id: Optional[str]) -> Message:
        msg = Message(conversation_id=conversation_id, payload=payload, author_id=author_id)
        self.created.append(msg)
        return msg

    async def history(self, conversation_id: str, limit: int = 50) -> list[Message]:
        return [m for m in self.created if m.conversation_id == conversation_id][-limit:]


class FakeFeedbackUpdater:
    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        self.updates: list[tuple[str, int]] = []

    async def update(self, event_id: str, feedback: int) -> None:
        self.updates.append((event_id, feedback))


class FakeWebClient:
    """Stands in for slack_sdk's AsyncWebClient; records chat.postMessage calls."""

    def __init__(self, log: list | None = None):
        self.posted: list[dict[str, Any]] = []
        self.log = log if log is not None else []

    async def chat_postMessage(self, **kwargs: Any) -> dict[str, Any]:
        self.posted.append(kwargs)
        self.log.append(("chat_postMessage", kwargs))
        return {"ok": True, "ts": "1.0"}


class FakeResponder:
    def __init__(self, log: list | None = None):
        self.posts: list[tuple[str, dict[str, Any]]] = []
        self.log = log if log is not None else []

    async def post(self, url: str, body: dict[str, Any]) -> None:
        self.posts.append((url, body))
        self.log.append(("respond", body))


@pytest.fixture
def conversations() -> ConversationService:
    return ConversationService(FakeConversationStore)


@pytest.fixture
def messages() -> MessageService:
    return MessageService(FakeMessageStore)


@pytest.fixture
def feedback() -> FeedbackService:
    return FeedbackService(FakeFeedbackUpdater)


@pytest.fixture
def call_log() -> list:
    return []


@pytest.fixture
def web(call_log) -> FakeWebClient:
    return FakeWebClient(call_log)


@pytest.fixture
def responder(call_log) -> FakeResponder:
    return FakeResponder(call_log)


@pytest.fixture
def slack_clients(web, responder) -> SlackClients:
    return SlackClients(web=web, responder=responder)  # type: ignore[arg-type]
