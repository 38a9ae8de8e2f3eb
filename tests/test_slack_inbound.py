import pytest

from conduit.channels.slack.events import ActionEvent, MessageEvent, decode_event
from conduit.channels.slack.inbound import SlackInboundRouter, extract_text
from conduit.core.errors import MalformedEventError


class Inbox:
    def __init__(self, log):
        self.received = []
        self.log = log

    async def __call__(self, raw, payload):
        self.received.append((raw, payload))
        self.log.append(("receive", payload))


@pytest.fixture
def inbox(call_log):
    return Inbox(call_log)


@pytest.fixture
def router(inbox, responder, feedback):
    return SlackInboundRouter(inbox, responder, feedback=lambda: feedback.for_tenant("bot-a"))


def message(**fields):
    return {"type": "message", "channel": "C1", "user": "U1", **fields}


def block_action(action, response_url="https://hooks.slack.com/actions/T/1/x"):
    return {
        "type": "block_actions",
        "channel": {"id": "C1"},
        "user": {"id": "U1"},
        "response_url": response_url,
        "actions": [action],
    }


def test_decode_dispatches_on_type():
    assert isinstance(decode_event(message(text="hi")), MessageEvent)
    assert isinstance(decode_event(block_action({"action_id": "x"})), ActionEvent)


@pytest.mark.parametrize("raw", [
    {"type": "reaction_added"},
    {"type": "message"},
    {"type": "block_actions", "actions": []},
    "not-an-event",
])
def test_decode_rejects_unknown_shapes(raw):
    with pytest.raises(MalformedEventError):
        decode_event(raw)


@pytest.mark.asyncio
async def test_plain_message_is_received_as_text(router, inbox):
    raw = message(text="hello")
    await router.dispatch(raw)
    assert inbox.received == [(raw, {"type": "text", "text": "hello"})]


@pytest.mark.asyncio
@pytest.mark.parametrize("noise", [
    message(subtype="bot_message", text="echo"),
    message(subtype="message_deleted"),
    message(subtype="message_changed", text="edited"),
    message(bot_id="B1", text="from a bot"),
])
async def test_noise_is_discarded(router, inbox, noise):
    await router.dispatch(noise)
    assert inbox.received == []


@pytest.mark.parametrize("fields,expected", [
    ({"text": "hi"}, "hi"),
    ({"text": "", "files": [{"name": "report.pdf", "title": "Report"}]}, "report.pdf"),
    ({"files": [{"title": "Report"}]}, "Report"),
    ({"files": [{}]}, "N/A"),
    ({}, "N/A"),
])
def test_text_fallback(fields, expected):
    assert extract_text(MessageEvent.model_validate(message(**fields))) == expected


@pytest.mark.asyncio
async def test_selected_option_becomes_quick_reply_without_touching_controls(router, inbox, responder):
    raw = block_action({
        "action_id": "option_selected",
        "type": "static_select",
        "selected_option": {"text": {"type": "plain_text", "text": "Blue"}, "value": "blue"},
    })
    await router.dispatch(raw)

    assert inbox.received == [(raw, {"type": "quick_reply", "text": "Blue", "payload": "blue"})]
    assert responder.posts == []


@pytest.mark.asyncio
async def test_replace_buttons_rewrites_original_then_replies(router, call_log, responder):
    raw = block_action({
        "action_id": "replace_buttons0_1",
        "type": "button",
        "text": {"type": "plain_text", "text": "Buy"},
        "value": "buy plan",
    })
    await router.dispatch(raw)

    assert call_log == [
        ("respond", {"text": "*Buy*", "replace_original": True}),
        ("receive", {"type": "quick_reply", "text": "Buy", "payload": "buy plan"}),
    ]
    assert responder.posts[0][0] == "https://hooks.slack.com/actions/T/1/x"


@pytest.mark.asyncio
async def test_remove_buttons_deletes_original_then_replies(router, call_log):
    await router.dispatch(block_action({
        "action_id": "remove_buttons2",
        "type": "button",
        "text": {"type": "plain_text", "text": "No"},
        "value": "no",
    }))
    assert call_log == [
        ("respond", {"delete_original": True}),
        ("receive", {"type": "quick_reply", "text": "No", "payload": "no"}),
    ]


@pytest.mark.asyncio
async def test_other_buttons_only_reply(router, call_log):
    await router.dispatch(block_action({
        "action_id": "postback0_0",
        "type": "button",
        "text": {"type": "plain_text", "text": "More"},
        "value": "more",
    }))
    assert call_log == [("receive", {"type": "quick_reply", "text": "More", "payload": "more"})]


@pytest.mark.asyncio
async def test_link_buttons_are_ignored(router, call_log):
    await router.dispatch(block_action({"action_id": "discard_action0_1", "type": "button", "url": "https://x"}))
    assert call_log == []


@pytest.mark.asyncio
async def test_replace_without_response_url_is_dropped(router, call_log):
    raw = block_action({"action_id": "replace_buttons0", "type": "button", "value": "x"}, response_url=None)
    await router.dispatch(raw)
    assert call_log == []


@pytest.mark.asyncio
async def test_feedback_is_recorded_without_inbound_message(router, inbox, feedback):
    await router.dispatch(block_action({
        "action_id": "feedback-overflow",
        "block_id": "feedback-evt-42",
        "type": "overflow",
        "selected_option": {"text": {"type": "plain_text", "text": "👎"}, "value": "-1"},
    }))
    assert feedback.for_tenant("bot-a").updates == [("evt-42", -1)]
    assert inbox.received == []


@pytest.mark.asyncio
async def test_feedback_without_updater_is_ignored(inbox, responder):
    router = SlackInboundRouter(inbox, responder, feedback=None)
    await router.dispatch(block_action({
        "action_id": "feedback-overflow",
        "block_id": "feedback-evt-1",
        "selected_option": {"value": "1"},
    }))
    assert inbox.received == []


@pytest.mark.asyncio
@pytest.mark.parametrize("action", [
    {"action_id": "feedback-overflow", "block_id": "other-evt-1", "selected_option": {"value": "1"}},
    {"action_id": "feedback-overflow", "block_id": "feedback-evt-1", "selected_option": {"value": "great"}},
])
async def test_malformed_feedback_is_dropped(router, feedback, action):
    await router.dispatch(block_action(action))
    assert feedback.for_tenant("bot-a").updates == []


@pytest.mark.asyncio
async def test_malformed_event_does_not_raise(router, call_log):
    await router.dispatch({"type": "message", "text": "no channel"})
    assert call_log == []


@pytest.mark.asyncio
@pytest.mark.parametrize("action", [
    {"action_id": "pick_date", "type": "datepicker", "selected_date": "2024-05-01"},
    {"action_id": "region", "type": "static_select", "selected_option": {"value": "eu"}},
    {"action_id": "extras", "type": "checkboxes", "selected_options": []},
    {"action_id": "replace_buttons0", "type": "overflow", "selected_option": {"value": "x"}},
])
async def test_non_button_actions_are_discarded(router, call_log, action):
    await router.dispatch(block_action(action))
    assert call_log == []
