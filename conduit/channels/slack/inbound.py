from __future__ import annotations
from typing import Any, Awaitable, Callable, Optional
from conduit.channels.slack.client import ResponseUrlClient
from conduit.channels.slack.events import ActionEvent, MessageEvent, decode_event
from conduit.channels.slack.renderers.choices import OPTION_SELECTED
from conduit.channels.slack.renderers.feedback import FEEDBACK_ACTION, FEEDBACK_BLOCK_PREFIX
from conduit.core.errors import MalformedEventError
from conduit.core.stores import FeedbackUpdater
from conduit.domain.models import PayloadType
from conduit.observability import metrics
from conduit.observability.logging import get_logger

log = get_logger("slack.inbound")

Receive = Callable[[dict[str, Any], dict[str, Any]], Awaitable[Any]]

DISCARDED_SUBTYPES = frozenset({"bot_message", "message_deleted", "message_changed"})
TEXT_FALLBACK = "N/A"

# Only plain buttons go through the prefix routing below.
BUTTON = "button"
DISCARD_PREFIX = "discard_action"
REPLACE_PREFIX = "replace_buttons"
REMOVE_PREFIX = "remove_buttons"

def extract_text(event: MessageEvent) -> str:
    """First non-empty of the text, the first file's name, the first file's title."""
    first = event.files[0] if event.files else None
    candidates = [event.text, first.name if first else None, first.title if first else None]
    for candidate in candidates:
        if candidate:
            return candidate
    return TEXT_FALLBACK

def quick_reply(label: str, value: str) -> dict[str, Any]:
    return {"type": PayloadType.quick_reply.value, "text": label, "payload": value}

class SlackInboundRouter:
    """Turns raw Slack events into canonical inbound payloads.

    Noise (bot echoes, edits, deletions, link buttons) and malformed events are
    dropped here; everything else is handed to ``receive`` together with the
    raw event so the channel can resolve channel and user references.
    """
    def __init__(
        self,
        receive: Receive,
        responder: ResponseUrlClient,
        feedback: Callable[[], Optional[FeedbackUpdater]] | None = None,
    ):
        self._receive = receive
        self._responder = responder
        self._feedback = feedback

    async def dispatch(self, raw: dict[str, Any]) -> None:
        try:
            event = decode_event(raw)
            if isinstance(event, MessageEvent):
                await self._on_message(raw, event)
            else:
                await self._on_action(raw, event)
        except MalformedEventError as e:
            metrics.inbound_discarded.labels(reason="malformed").inc()
            log.warning("inbound_event_malformed", error=str(e))

    async def _on_message(self, raw: dict[str, Any], event: MessageEvent) -> None:
        if event.subtype in DISCARDED_SUBTYPES or event.from_bot:
            metrics.inbound_discarded.labels(reason=event.subtype or "bot").inc()
            log.debug("message_discarded", subtype=event.subtype, bot_id=event.bot_id)
            return
        await self._receive(raw, {"type": PayloadType.text.value, "text": extract_text(event)})

    async def _on_action(self, raw: dict[str, Any], event: ActionEvent) -> None:
        action_id = event.action_id

        if action_id == OPTION_SELECTED:
            option = event.action.selected_option
            if option is None:
                raise MalformedEventError("option_selected without selected_option")
            await self._receive(raw, quick_reply(option.text.text, option.value))
            return

        if action_id == FEEDBACK_ACTION:
            await self._on_feedback(event)
            return

        if event.action.type != BUTTON:
            metrics.inbound_discarded.labels(reason="unsupported_action").inc()
            log.debug("action_discarded", action_id=action_id, action_type=event.action.type)
            return

        if action_id.startswith(DISCARD_PREFIX):
            metrics.inbound_discarded.labels(reason="discard_action").inc()
            return

        label = event.action.text.text if event.action.text else ""
        value = event.action.value or ""
        if action_id.startswith(REPLACE_PREFIX):
            await self._respond(event, {"text": f"*{label}*", "replace_original": True})
        elif action_id.startswith(REMOVE_PREFIX):
            await self._respond(event, {"delete_original": True})
        await self._receive(raw, quick_reply(label, value))

    async def _respond(self, event: ActionEvent, body: dict[str, Any]) -> None:
        if not event.response_url:
            raise MalformedEventError(f"{event.action_id} without response_url")
        await self._responder.post(event.response_url, body)

    async def _on_feedback(self, event: ActionEvent) -> None:
        block_id = event.block_id or ""
        if not block_id.startswith(FEEDBACK_BLOCK_PREFIX):
            raise MalformedEventError(f"feedback action with block id {block_id!r}")
        event_id = block_id[len(FEEDBACK_BLOCK_PREFIX):]
        try:
            rating = int(event.selected_value or "")
        except ValueError as e:
            raise MalformedEventError(f"feedback value is not an integer: {event.selected_value!r}") from e

        updater = self._feedback() if self._feedback else None
        if updater is None:
            log.info("feedback_ignored", event_id=event_id, feedback=rating, reason="no_updater")
            return
        await updater.update(event_id, rating)
