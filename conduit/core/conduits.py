from __future__ import annotations
from conduit.channels.base import Channel
from conduit.channels.slack.channel import SlackChannel
from conduit.config import Settings
from conduit.core.errors import ResolutionError
from conduit.core.scope import TenantScopeCache
from conduit.core.stores import ConversationService, FeedbackService, MessageService
from conduit.observability.logging import get_logger

log = get_logger("conduits")

# Channel name -> adapter class. The name is also the TenantConfig attribute holding its config.
CHANNEL_TYPES: dict[str, type[Channel]] = {
    "slack": SlackChannel,
}

class Conduits(TenantScopeCache[dict[str, Channel]]):
    """One instance of every configured channel, per tenant."""

    def __init__(
        self,
        settings: Settings,
        conversations: ConversationService,
        messages: MessageService,
        feedback: FeedbackService | None = None,
    ):
        super().__init__()
        self.settings = settings
        self.conversations = conversations
        self.messages = messages
        self.feedback = feedback

    def create_scope(self, tenant_id: str) -> dict[str, Channel]:
        tenant = self.settings.tenants.get(tenant_id)
        if tenant is None:
            raise ResolutionError(f"unknown tenant: {tenant_id}")

        channels: dict[str, Channel] = {}
        for name, cls in CHANNEL_TYPES.items():
            config = getattr(tenant, name, None)
            if config is None:
                continue
            channels[name] = cls(
                tenant_id,
                config,
                self.conversations,
                self.messages,
                self.feedback,
                external_url=self.settings.external_url,
                typing_delay_ms=self.settings.typing_delay_ms,
            )
        log.info("tenant_channels_created", tenant_id=tenant_id, channels=sorted(channels))
        return channels

    async def channel(self, tenant_id: str, name: str) -> Channel:
        """The tenant's channel instance, set up on first use."""
        channel = self.for_tenant(tenant_id).get(name)
        if channel is None:
            raise ResolutionError(f"channel {name!r} is not configured for tenant {tenant_id}")
        await channel.setup()
        return channel

    async def close(self) -> None:
        for tenant_id in self.tenants():
            for channel in self.for_tenant(tenant_id).values():
                await channel.close()
