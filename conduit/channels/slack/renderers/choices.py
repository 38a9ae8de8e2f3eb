from __future__ import annotations
from conduit.channels.base import Renderer
from conduit.domain.models import PayloadType
from conduit.channels.slack.context import SlackContext

OPTION_SELECTED = "option_selected"

class SlackChoicesRenderer(Renderer[SlackContext]):
    """Renders the choices of a ``single-choice`` payload.

    The question itself comes from the text renderer. Buttons replace
    themselves with the picked label once clicked; ``dropdown: true`` renders
    a static select instead.
    """
    id = "choices"

    def handles(self, context: SlackContext) -> bool:
        return context.payload.get("type") == PayloadType.single_choice and bool(context.payload.get("choices"))

    def render(self, context: SlackContext) -> None:
        choices = context.payload["choices"]
        if context.payload.get("dropdown"):
            elements = [{
                "type": "static_select",
                "action_id": OPTION_SELECTED,
                "placeholder": {"type": "plain_text", "text": context.payload.get("placeholder") or "Select..."},
                "options": [
                    {"text": {"type": "plain_text", "text": c["title"]}, "value": c["value"]}
                    for c in choices
                ],
            }]
        else:
            elements = [
                {
                    "type": "button",
                    "action_id": f"replace_buttons{n}",
                    "text": {"type": "plain_text", "text": c["title"]},
                    "value": c["value"],
                }
                for n, c in enumerate(choices)
            ]
        context.fragments.append({"type": "actions", "elements": elements})
