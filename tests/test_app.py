import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

import core.app as app
from core.context import BotConfig, RuntimeSettings
from core.errors import AuthorizationError, ConfigError, NoLiveBroadcast
from services.youtube.models.stream import StreamSession


def stop_immediately(loop, stop_event):
    loop.call_soon(stop_event.set)


@pytest.mark.parametrize(
    "error",
    [
        ConfigError("bad bot.yml"),
        AuthorizationError("no token"),
        NoLiveBroadcast("No active live stream found!"),
        RuntimeError("boom"),
    ],
)
def test_startup_failures_exit_with_one(monkeypatch, error):
    async def failing_main(stop_event):
        raise error

    monkeypatch.setattr(app, "main", failing_main)
    monkeypatch.setattr(app, "_install_signal_handlers", stop_immediately)

    assert app.run() == 1


def test_stop_signal_exits_with_zero(monkeypatch, tmp_path):
    settings = RuntimeSettings(
        config_path=tmp_path / "bot.yml",
        participants_path=tmp_path / "participants.json",
        client_secret_path=tmp_path / "client_secret.json",
        token_path=tmp_path / "token.json",
    )
    config = BotConfig(
        banned_words=frozenset(),
        webhook=None,
        timed_messages=(),
        commands=(),
        welcome_message="hi {user}",
        moderation_warning="@{user} stop",
    )

    auth = MagicMock()
    auth.authorize = AsyncMock()
    livestream_worker = MagicMock()
    livestream_worker.run = AsyncMock(return_value=StreamSession(live_chat_id="chat-1"))

    chat_worker = MagicMock()

    async def idle():
        await asyncio.Event().wait()

    chat_worker.run = idle

    monkeypatch.setattr(app, "load_dotenv", lambda: None)
    monkeypatch.setattr(app.RuntimeSettings, "from_env", classmethod(lambda cls: settings))
    monkeypatch.setattr(app, "load_bot_config", lambda path: config)
    monkeypatch.setattr(app, "YouTubeAuthSession", MagicMock(return_value=auth))
    monkeypatch.setattr(app, "YouTubeLivestreamWorker", MagicMock(return_value=livestream_worker))
    monkeypatch.setattr(app, "YouTubeChatWorker", MagicMock(return_value=chat_worker))
    monkeypatch.setattr(app, "_install_signal_handlers", stop_immediately)

    assert app.run() == 0
    auth.authorize.assert_awaited_once()
    livestream_worker.run.assert_awaited_once()
