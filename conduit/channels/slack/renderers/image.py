from __future__ import annotations
from conduit.channels.base import Renderer
from conduit.domain.models import PayloadType
from conduit.channels.slack.context import SlackContext

class SlackImageRenderer(Renderer[SlackContext]):
    id = "image"

    def handles(self, context: SlackContext) -> bool:
        return context.payload.get("type") == PayloadType.image and bool(context.payload.get("image"))

    def render(self, context: SlackContext) -> None:
        payload = context.payload
        block = {
            "type": "image",
            "image_url": payload["image"],
            "alt_text": payload.get("alt_text") or payload.get("title") or "image",
        }
        if payload.get("title"):
            block["title"] = {"type": "plain_text", "text": payload["title"]}
        context.fragments.append(block)
