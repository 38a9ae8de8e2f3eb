from __future__ import annotations
from conduit.channels.base import Renderer
from conduit.channels.slack.context import SlackContext

class SlackTextRenderer(Renderer[SlackContext]):
    id = "text"

    def handles(self, context: SlackContext) -> bool:
        text = context.payload.get("text")
        return isinstance(text, str) and bool(text)

    def render(self, context: SlackContext) -> None:
        context.fragments.append({
            "type": "section",
            "text": {"type": "mrkdwn", "text": context.payload["text"]},
        })
