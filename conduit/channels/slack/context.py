from __future__ import annotations
from dataclasses import dataclass
from slack_sdk.web.async_client import AsyncWebClient
from conduit.channels.base import RenderContext
from conduit.channels.slack.client import ResponseUrlClient

@dataclass
class SlackClients:
    """Platform clients handed to senders. Renderers never touch them."""
    web: AsyncWebClient
    responder: ResponseUrlClient

@dataclass
class SlackContext(RenderContext):
    """Slack render context; ``fragments`` are Block Kit blocks."""
    client: SlackClients | None = None
    bot_url: str = ""
