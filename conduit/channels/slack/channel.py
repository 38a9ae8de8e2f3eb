from __future__ import annotations
from typing import Any, Mapping
from slack_sdk.signature import SignatureVerifier
from slack_sdk.web.async_client import AsyncWebClient
from conduit.channels.base import Channel, Renderer, Sender
from conduit.channels.renderers.card import CardToCarouselRenderer
from conduit.channels.slack.client import ResponseUrlClient
from conduit.channels.slack.context import SlackClients, SlackContext
from conduit.channels.slack.inbound import SlackInboundRouter
from conduit.channels.slack.renderers.carousel import SlackCarouselRenderer
from conduit.channels.slack.renderers.choices import SlackChoicesRenderer
from conduit.channels.slack.renderers.feedback import SlackFeedbackRenderer
from conduit.channels.slack.renderers.image import SlackImageRenderer
from conduit.channels.slack.renderers.text import SlackTextRenderer
from conduit.channels.slack.senders.common import SlackCommonSender
from conduit.channels.slack.senders.typing import SlackTypingSender
from conduit.config import SlackConfig
from conduit.core.errors import ConfigurationError
from conduit.core.stores import ConversationService, FeedbackService, FeedbackUpdater, MessageService
from conduit.domain.models import Conversation
from conduit.observability.logging import get_logger

log = get_logger("slack")

class SlackChannel(Channel[SlackConfig, SlackContext]):
    """Slack adapter.

    Inbound: Events API messages and block_actions interactivity, pushed to
    ``handle_event`` / ``handle_interactive`` by the webhook routes.
    Outbound: Block Kit via chat.postMessage.
    """
    def __init__(
        self,
        tenant_id: str,
        config: SlackConfig,
        conversations: ConversationService,
        messages: MessageService,
        feedback: FeedbackService | None = None,
        external_url: str = "",
        typing_delay_ms: int = 1000,
        clients: SlackClients | None = None,
    ):
        super().__init__(tenant_id, config, conversations, messages, feedback)
        self.external_url = external_url.rstrip("/")
        self.typing_delay_ms = typing_delay_ms
        self.clients = clients
        self._owns_clients = False
        self.inbound: SlackInboundRouter | None = None
        self._verifier: SignatureVerifier | None = None

    @property
    def id(self) -> str:
        return "slack"

    async def setup_connection(self) -> None:
        missing = [name for name in ("bot_token", "signing_secret") if not getattr(self.config, name)]
        if missing:
            raise ConfigurationError(f"slack config for tenant {self.tenant_id} is missing {', '.join(missing)}")

        if self.clients is None:
            self.clients = SlackClients(web=AsyncWebClient(token=self.config.bot_token), responder=ResponseUrlClient())
            self._owns_clients = True
        self._verifier = SignatureVerifier(self.config.signing_secret)
        self.inbound = SlackInboundRouter(self.receive, self.clients.responder, feedback=self._feedback_updater)

        for title, path in (("events", "events"), ("interactive", "interactive")):
            log.info("slack_webhook_listening", kind=title, tenant_id=self.tenant_id,
                     url=f"{self.external_url}/webhooks/{self.tenant_id}/slack/{path}")

    async def close_connection(self) -> None:
        if self._owns_clients and self.clients is not None:
            await self.clients.responder.aclose()
            self.clients = None
            self._owns_clients = False
        self.inbound = None
        self._verifier = None

    def setup_renderers(self) -> list[Renderer[SlackContext]]:
        return [
            CardToCarouselRenderer(),
            SlackTextRenderer(),
            SlackImageRenderer(),
            SlackCarouselRenderer(),
            SlackChoicesRenderer(),
            SlackFeedbackRenderer(),
        ]

    def setup_senders(self) -> list[Sender[SlackContext]]:
        return [SlackTypingSender(self.typing_delay_ms), SlackCommonSender()]

    def create_context(self, conversation: Conversation, payload: dict[str, Any]) -> SlackContext:
        return SlackContext(
            tenant_id=self.tenant_id,
            channel_ref=conversation.channel_ref,
            payload=payload,
            client=self.clients,
            bot_url=self.external_url,
        )

    def verify(self, body: str | bytes, headers: Mapping[str, str]) -> bool:
        if self._verifier is None:
            raise ConfigurationError("slack channel is not set up")
        return self._verifier.is_valid_request(body, dict(headers))

    async def handle_event(self, envelope: dict[str, Any]) -> None:
        """Listener for Events API callbacks. Only ``message`` events are consumed."""
        event = envelope.get("event") if envelope.get("type") == "event_callback" else envelope
        if not isinstance(event, dict) or event.get("type") != "message":
            log.debug("slack_event_ignored", type=event.get("type") if isinstance(event, dict) else None)
            return
        await self._router().dispatch(event)

    async def handle_interactive(self, payload: dict[str, Any]) -> None:
        """Listener for interactivity payloads (button clicks, selects, overflow menus)."""
        await self._router().dispatch(payload)

    def _router(self) -> SlackInboundRouter:
        if self.inbound is None:
            raise ConfigurationError("slack channel is not set up")
        return self.inbound

    def _feedback_updater(self) -> FeedbackUpdater | None:
        return self.feedback.for_tenant(self.tenant_id) if self.feedback else None
