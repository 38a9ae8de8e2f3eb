from __future__ import annotations
import abc
import asyncio
import copy
import time
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar
from conduit.core.errors import ConfigurationError, ResolutionError
from conduit.core.stores import ConversationService, FeedbackService, MessageService
from conduit.domain.models import ChannelState, Conversation, Message
from conduit.observability import metrics
from conduit.observability.logging import get_logger, tenant_context

log = get_logger("channel")

@dataclass
class RenderContext:
    """Unit of work for one outbound send.

    Renderers append to ``fragments`` and the orchestrator records each renderer
    that fired in ``handlers``. Senders only read.
    """
    tenant_id: str
    channel_ref: str
    payload: dict[str, Any]
    fragments: list[dict[str, Any]] = field(default_factory=list)
    handlers: list[str] = field(default_factory=list)

ContextT = TypeVar("ContextT", bound=RenderContext)
ConfigT = TypeVar("ConfigT")

class Renderer(abc.ABC, Generic[ContextT]):
    """Stateless transformer from canonical payload to wire fragments."""
    id: str = "renderer"

    @abc.abstractmethod
    def handles(self, context: ContextT) -> bool:
        ...

    @abc.abstractmethod
    def render(self, context: ContextT) -> None:
        ...

class Sender(abc.ABC, Generic[ContextT]):
    """Stateless delivery strategy. At most one platform call per send."""

    @abc.abstractmethod
    def handles(self, context: ContextT) -> bool:
        ...

    @abc.abstractmethod
    async def send(self, context: ContextT) -> None:
        ...

def resolve_ref(raw: Any, key: str) -> Optional[str]:
    """Accept both ``{"channel": {"id": "C1"}}`` and ``{"channel": "C1"}``."""
    if not isinstance(raw, dict):
        return None
    value = raw.get(key)
    if isinstance(value, dict):
        value = value.get("id")
    return value if isinstance(value, str) and value else None

class Channel(abc.ABC, Generic[ConfigT, ContextT]):
    """One platform connection owned by one tenant.

    Lifecycle: unconfigured -> connecting -> listening. ``setup()`` connects
    once; ``send`` drives the renderer chain then the sender chain, both in
    declared order and strictly one after the other.
    """
    def __init__(
        self,
        tenant_id: str,
        config: ConfigT,
        conversations: ConversationService,
        messages: MessageService,
        feedback: FeedbackService | None = None,
    ):
        self.tenant_id = tenant_id
        self.config = config
        self.conversations = conversations
        self.messages = messages
        self.feedback = feedback
        self.state = ChannelState.unconfigured
        self.renderers: list[Renderer[ContextT]] = []
        self.senders: list[Sender[ContextT]] = []
        self._setup_lock = asyncio.Lock()

    @property
    @abc.abstractmethod
    def id(self) -> str:
        ...

    async def setup(self) -> None:
        async with self._setup_lock:
            if self.state == ChannelState.listening:
                return
            self.state = ChannelState.connecting
            try:
                await self.setup_connection()
            except Exception:
                self.state = ChannelState.unconfigured
                raise
            self.renderers = self.setup_renderers()
            self.senders = self.setup_senders()
            self.state = ChannelState.listening
            log.info("channel_listening", tenant_id=self.tenant_id, channel=self.id,
                     renderers=[r.id for r in self.renderers], senders=[type(s).__name__ for s in self.senders])

    async def close(self) -> None:
        """Release platform resources; the channel must be set up again before use."""
        async with self._setup_lock:
            if self.state == ChannelState.unconfigured:
                return
            await self.close_connection()
            self.state = ChannelState.unconfigured

    @abc.abstractmethod
    async def setup_connection(self) -> None:
        ...

    async def close_connection(self) -> None:
        pass

    @abc.abstractmethod
    def setup_renderers(self) -> list[Renderer[ContextT]]:
        ...

    @abc.abstractmethod
    def setup_senders(self) -> list[Sender[ContextT]]:
        ...

    @abc.abstractmethod
    def create_context(self, conversation: Conversation, payload: dict[str, Any]) -> ContextT:
        ...

    async def send(self, conversation_id: str, payload: dict[str, Any]) -> None:
        if self.state != ChannelState.listening:
            raise ConfigurationError(f"channel {self.id} is {self.state.value}, call setup() first")

        with tenant_context(self.tenant_id, self.id):
            conversation = await self.conversations.for_tenant(self.tenant_id).get(conversation_id)
            if conversation is None:
                raise ResolutionError(f"conversation not found: {conversation_id}")

            started = time.perf_counter()
            context = self.create_context(conversation, copy.deepcopy(payload))

            for renderer in self.renderers:
                if renderer.handles(context):
                    renderer.render(context)
                    context.handlers.append(renderer.id)
                    metrics.renders.labels(renderer=renderer.id).inc()

            try:
                for sender in self.senders:
                    if sender.handles(context):
                        await sender.send(context)
            except Exception:
                metrics.delivery_errors.labels(channel=self.id).inc()
                raise

            metrics.outbound_sends.labels(channel=self.id).inc()
            metrics.send_latency.observe(time.perf_counter() - started)
            log.debug("payload_sent", conversation_id=conversation_id, handlers=context.handlers,
                      fragments=len(context.fragments))

    async def receive(self, raw: dict[str, Any], payload: dict[str, Any]) -> Message:
        channel_ref = resolve_ref(raw, "channel")
        user_ref = resolve_ref(raw, "user")
        if channel_ref is None:
            raise ResolutionError("inbound event carries no channel reference")

        with tenant_context(self.tenant_id, self.id):
            conversation = await self.conversations.for_tenant(self.tenant_id).recent(channel_ref)
            message = await self.messages.for_tenant(self.tenant_id).create(conversation.id, payload, user_ref)
            metrics.inbound_messages.labels(channel=self.id).inc()
            log.info("message_received", conversation_id=conversation.id, message_id=message.id,
                     payload_type=payload.get("type"))
            return message

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} tenant={self.tenant_id} state={self.state.value}>"
