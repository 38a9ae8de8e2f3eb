import asyncio

import aiohttp
import pytest
from slack_sdk.errors import SlackApiError

from conduit.channels.slack.context import SlackClients, SlackContext
from conduit.channels.slack.senders import typing as typing_sender
from conduit.channels.slack.senders.common import FALLBACK_TEXT, SlackCommonSender
from conduit.channels.slack.senders.typing import SlackTypingSender
from conduit.core.errors import ConfigurationError, DeliveryError


class UnreachableWebClient:
    def __init__(self, error):
        self.error = error

    async def chat_postMessage(self, **kwargs):
        raise self.error


class FailingWebClient:
    async def chat_postMessage(self, **kwargs):
        raise SlackApiError("channel_not_found", {"ok": False, "error": "channel_not_found"})


def ctx(payload, clients=None, fragments=None):
    return SlackContext(
        tenant_id="bot-a",
        channel_ref="C1",
        payload=payload,
        fragments=fragments if fragments is not None else [],
        client=clients,
    )


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []

    async def fake_sleep(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(typing_sender.asyncio, "sleep", fake_sleep)
    return recorded


@pytest.mark.asyncio
async def test_typing_true_waits_default_delay(sleeps):
    sender = SlackTypingSender(default_delay_ms=1500)
    c = ctx({"type": "text", "text": "hi", "typing": True})
    assert sender.handles(c)
    await sender.send(c)
    assert sleeps == [1.5]


@pytest.mark.asyncio
async def test_typing_integer_is_delay_in_ms(sleeps):
    await SlackTypingSender().send(ctx({"typing": 250}))
    assert sleeps == [0.25]


def test_typing_absent_or_false_is_skipped():
    sender = SlackTypingSender()
    assert not sender.handles(ctx({"type": "text", "text": "hi"}))
    assert not sender.handles(ctx({"type": "text", "text": "hi", "typing": False}))


@pytest.mark.asyncio
async def test_common_posts_all_blocks_once(slack_clients, web):
    blocks = [{"type": "section"}, {"type": "actions"}]
    await SlackCommonSender().send(ctx({"type": "text", "text": "hi"}, slack_clients, blocks))

    assert web.posted == [{"channel": "C1", "blocks": blocks, "text": "hi"}]


@pytest.mark.asyncio
async def test_common_uses_fallback_text(slack_clients, web):
    await SlackCommonSender().send(ctx({"type": "image", "image": "x"}, slack_clients, [{"type": "image"}]))
    assert web.posted[0]["text"] == FALLBACK_TEXT


def test_common_skips_empty_fragments(slack_clients):
    assert not SlackCommonSender().handles(ctx({"type": "text", "text": "hi"}, slack_clients))


@pytest.mark.asyncio
async def test_common_without_client_is_configuration_error():
    with pytest.raises(ConfigurationError):
        await SlackCommonSender().send(ctx({"text": "hi"}, None, [{"type": "section"}]))


@pytest.mark.asyncio
async def test_platform_error_becomes_delivery_error(responder):
    clients = SlackClients(web=FailingWebClient(), responder=responder)  # type: ignore[arg-type]
    with pytest.raises(DeliveryError) as exc:
        await SlackCommonSender().send(ctx({"text": "hi"}, clients, [{"type": "section"}]))
    assert exc.value.channel == "slack"
    assert "channel_not_found" in str(exc.value)
    assert isinstance(exc.value.__cause__, SlackApiError)




@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    aiohttp.ClientConnectionError("Cannot connect to host slack.com:443"),
    asyncio.TimeoutError(),
])
async def test_transport_failure_becomes_delivery_error(responder, error):
    clients = SlackClients(web=UnreachableWebClient(error), responder=responder)  # type: ignore[arg-type]
    with pytest.raises(DeliveryError) as exc:
        await SlackCommonSender().send(ctx({"text": "hi"}, clients, [{"type": "section"}]))
    assert exc.value.channel == "slack"
    assert exc.value.__cause__ is error
