from __future__ import annotations
import asyncio
import aiohttp
from slack_sdk.errors import SlackApiError
from conduit.channels.base import Sender
from conduit.channels.slack.context import SlackContext
from conduit.core.errors import ConfigurationError, DeliveryError

# Transport failures raised by AsyncWebClient underneath slack_sdk.
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)

# Notification text when the payload carries none of its own.
FALLBACK_TEXT = "New message"

class SlackCommonSender(Sender[SlackContext]):
    """Posts every rendered block in a single chat.postMessage call."""

    def handles(self, context: SlackContext) -> bool:
        return bool(context.fragments)

    async def send(self, context: SlackContext) -> None:
        if context.client is None:
            raise ConfigurationError("slack context has no client bundle")
        text = context.payload.get("text")
        try:
            await context.client.web.chat_postMessage(
                channel=context.channel_ref,
                blocks=context.fragments,
                text=text if isinstance(text, str) and text else FALLBACK_TEXT,
            )
        except SlackApiError as e:
            raise DeliveryError("slack", f"chat.postMessage failed: {e.response.get('error', e)}") from e
        except TRANSPORT_ERRORS as e:
            raise DeliveryError("slack", f"chat.postMessage failed: {type(e).__name__}: {e}") from e
