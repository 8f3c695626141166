import json
import threading
import time
from urllib.parse import parse_qs

import httpx
import pytest

from core.errors import AuthorizationError
from services.youtube.auth import YouTubeAuthSession

CLIENT_SECRET = {
    "installed": {
        "client_id": "cid",
        "client_secret": "csecret",
        "redirect_uris": ["http://localhost"],
    }
}


@pytest.fixture
def secret_path(tmp_path):
    path = tmp_path / "client_secret.json"
    path.write_text(json.dumps(CLIENT_SECRET))
    return path


def token_transport(forms, access_token="fresh"):
    def handler(request):
        forms.append({k: v[0] for k, v in parse_qs(request.content.decode()).items()})
        return httpx.Response(
            200,
            json={"access_token": access_token, "expires_in": 3600, "refresh_token": "r1"},
        )

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_missing_client_secret(tmp_path):
    session = YouTubeAuthSession(
        client_secret_path=tmp_path / "nope.json", token_path=tmp_path / "token.json"
    )
    with pytest.raises(AuthorizationError):
        await session.authorize()


@pytest.mark.asyncio
async def test_client_secret_without_installed_section(tmp_path):
    path = tmp_path / "client_secret.json"
    path.write_text(json.dumps({"web": {}}))
    session = YouTubeAuthSession(client_secret_path=path, token_path=tmp_path / "t.json")
    with pytest.raises(AuthorizationError):
        await session.authorize()


@pytest.mark.asyncio
async def test_interactive_code_exchange_saves_token(tmp_path, secret_path):
    forms = []
    token_path = tmp_path / "token.json"
    session = YouTubeAuthSession(
        client_secret_path=secret_path,
        token_path=token_path,
        prompt=lambda _: " the-code ",
        transport=token_transport(forms),
    )

    await session.authorize()

    assert forms[0]["grant_type"] == "authorization_code"
    assert forms[0]["code"] == "the-code"
    assert forms[0]["redirect_uri"] == "http://localhost"
    saved = json.loads(token_path.read_text())
    assert saved["access_token"] == "fresh"
    assert saved["expiry_date"] > time.time() * 1000
    assert await session.auth_headers() == {"Authorization": "Bearer fresh"}


@pytest.mark.asyncio
async def test_expired_token_is_refreshed(tmp_path, secret_path):
    forms = []
    token_path = tmp_path / "token.json"
    token_path.write_text(
        json.dumps({"access_token": "stale", "refresh_token": "r0", "expiry_date": 1000})
    )
    session = YouTubeAuthSession(
        client_secret_path=secret_path,
        token_path=token_path,
        transport=token_transport(forms, access_token="renewed"),
    )

    await session.authorize()
    assert await session.get_access_token() == "renewed"
    assert forms[0]["grant_type"] == "refresh_token"
    assert forms[0]["refresh_token"] == "r0"


@pytest.mark.asyncio
async def test_valid_token_is_reused(tmp_path, secret_path):
    forms = []
    token_path = tmp_path / "token.json"
    future_ms = int((time.time() + 3600) * 1000)
    token_path.write_text(json.dumps({"access_token": "ok", "expiry_date": future_ms}))
    session = YouTubeAuthSession(
        client_secret_path=secret_path,
        token_path=token_path,
        transport=token_transport(forms),
    )

    await session.authorize()
    assert await session.get_access_token() == "ok"
    assert forms == []


def test_consent_url_requests_offline_youtube_scope(tmp_path, secret_path):
    session = YouTubeAuthSession(client_secret_path=secret_path, token_path=tmp_path / "t.json")
    session._client = CLIENT_SECRET["installed"]
    url = session.consent_url()
    assert "access_type=offline" in url
    assert "youtube.force-ssl" in url


@pytest.mark.asyncio
async def test_code_prompt_runs_off_the_event_loop(tmp_path, secret_path):
    loop_thread = threading.get_ident()
    prompt_threads = []

    def prompt(_):
        prompt_threads.append(threading.get_ident())
        return "the-code"

    session = YouTubeAuthSession(
        client_secret_path=secret_path,
        token_path=tmp_path / "token.json",
        prompt=prompt,
        transport=token_transport([]),
    )

    await session.authorize()
    assert prompt_threads and prompt_threads[0] != loop_thread
