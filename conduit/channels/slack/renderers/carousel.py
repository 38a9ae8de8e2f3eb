from __future__ import annotations
from typing import Any
from conduit.channels.base import Renderer
from conduit.domain.models import PayloadType
from conduit.channels.slack.context import SlackContext

# Placeholder in "Open URL" actions replaced by the bot's public URL.
BOT_URL_PLACEHOLDER = "BOT_URL"

class SlackCarouselRenderer(Renderer[SlackContext]):
    """One section per card, followed by an actions block for its buttons.

    Button action ids drive what the interactive router does when clicked:
    ``replace_buttons*`` swaps the buttons for the chosen label,
    ``discard_action*`` (links) produce nothing.
    """
    id = "carousel"

    def handles(self, context: SlackContext) -> bool:
        return context.payload.get("type") == PayloadType.carousel and bool(context.payload.get("items"))

    def render(self, context: SlackContext) -> None:
        for index, card in enumerate(context.payload["items"]):
            section: dict[str, Any] = {
                "type": "section",
                "block_id": f"title_{index}",
                "text": {"type": "mrkdwn", "text": self._card_text(card)},
            }
            if card.get("image"):
                section["accessory"] = {"type": "image", "image_url": card["image"], "alt_text": "image"}
            context.fragments.append(section)

            buttons = []
            for n, action in enumerate(card.get("actions") or []):
                button = self._button(context, action, f"{index}_{n}")
                if button is not None:
                    buttons.append(button)
            if buttons:
                context.fragments.append({"type": "actions", "block_id": f"actions_{index}", "elements": buttons})

    @staticmethod
    def _card_text(card: dict[str, Any]) -> str:
        title = f"*{card.get('title', '')}*"
        return f"{title}\n{card['subtitle']}" if card.get("subtitle") else title

    @staticmethod
    def _button(context: SlackContext, action: dict[str, Any], suffix: str) -> dict[str, Any] | None:
        label = {"type": "plain_text", "text": action.get("title", "")}
        kind = action.get("action")
        if kind == "Say something":
            return {"type": "button", "action_id": f"replace_buttons{suffix}", "text": label, "value": action.get("text", "")}
        if kind == "Postback":
            return {"type": "button", "action_id": f"postback{suffix}", "text": label, "value": action.get("payload", "")}
        if kind == "Open URL":
            url = action.get("url", "").replace(BOT_URL_PLACEHOLDER, context.bot_url)
            return {"type": "button", "action_id": f"discard_action{suffix}", "text": label, "url": url}
        return None
