from __future__ import annotations
import asyncio
from conduit.channels.base import Sender
from conduit.channels.slack.context import SlackContext

class SlackTypingSender(Sender[SlackContext]):
    """Simulates typing by pausing before the message goes out.

    Slack has no typing indicator for bots, so no platform call is made.
    ``typing: true`` waits the default delay, ``typing: <ms>`` waits that long.
    """
    def __init__(self, default_delay_ms: int = 1000):
        self.default_delay_ms = default_delay_ms

    def handles(self, context: SlackContext) -> bool:
        return bool(context.payload.get("typing"))

    async def send(self, context: SlackContext) -> None:
        typing = context.payload["typing"]
        delay_ms = typing if isinstance(typing, int) and not isinstance(typing, bool) else self.default_delay_ms
        await asyncio.sleep(delay_ms / 1000)
