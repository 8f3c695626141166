import json

import httpx
import pytest

from core.context import WebhookConfig
from services.relay.webhook import WebhookRelay

URL = "https://discord.test/api/webhooks/1/abc"


def recording_transport(requests, status=204):
    def handler(request):
        requests.append(request)
        return httpx.Response(status)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_posts_discord_payload():
    requests = []
    relay = WebhookRelay(WebhookConfig(True, URL), transport=recording_transport(requests))

    assert await relay.forward("alice", "https://img/a.png", "hello") is True

    assert len(requests) == 1
    assert str(requests[0].url) == URL
    assert json.loads(requests[0].content) == {
        "username": "alice",
        "avatar_url": "https://img/a.png",
        "content": "hello",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "config",
    [None, WebhookConfig(False, URL), WebhookConfig(True, "")],
)
async def test_disabled_relay_is_noop(config):
    requests = []
    relay = WebhookRelay(config, transport=recording_transport(requests))

    assert relay.enabled is False
    assert await relay.forward("alice", None, "hello") is True
    assert requests == []


@pytest.mark.asyncio
async def test_http_error_is_swallowed():
    requests = []
    relay = WebhookRelay(WebhookConfig(True, URL), transport=recording_transport(requests, 500))
    assert await relay.forward("alice", None, "hello") is False


@pytest.mark.asyncio
async def test_network_error_is_swallowed():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    relay = WebhookRelay(WebhookConfig(True, URL), transport=httpx.MockTransport(handler))
    assert await relay.forward("alice", None, "hello") is False


@pytest.mark.asyncio
async def test_long_content_is_truncated():
    requests = []
    relay = WebhookRelay(WebhookConfig(True, URL), transport=recording_transport(requests))

    await relay.forward("alice", None, "x" * 5000)

    content = json.loads(requests[0].content)["content"]
    assert len(content) == WebhookRelay.MAX_CONTENT_LENGTH
