from __future__ import annotations
from conduit.channels.base import Renderer
from conduit.channels.slack.context import SlackContext

FEEDBACK_ACTION = "feedback-overflow"
FEEDBACK_BLOCK_PREFIX = "feedback-"

class SlackFeedbackRenderer(Renderer[SlackContext]):
    """Appends a thumbs up / down menu under an answer.

    The block id carries the inbound event the answer replied to, so the
    rating can be attached to it when the user picks an option.
    """
    id = "feedback"

    def handles(self, context: SlackContext) -> bool:
        return bool(context.payload.get("collect_feedback")) and bool(context.payload.get("incoming_event_id"))

    def render(self, context: SlackContext) -> None:
        context.fragments.append({
            "type": "actions",
            "block_id": f"{FEEDBACK_BLOCK_PREFIX}{context.payload['incoming_event_id']}",
            "elements": [{
                "type": "overflow",
                "action_id": FEEDBACK_ACTION,
                "options": [
                    {"text": {"type": "plain_text", "text": "👍"}, "value": "1"},
                    {"text": {"type": "plain_text", "text": "👎"}, "value": "-1"},
                ],
            }],
        })
