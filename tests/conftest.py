"""
Shared test fixtures: fake chat sender, fake relay, sessions and messages.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.context import CommandDefinition
from services.relay.webhook import WebhookRelay
from services.triggers.commands import CommandTable
from services.triggers.moderation import ModerationFilter
from services.triggers.pipeline import ChatMessagePipeline
from services.youtube.models.message import YouTubeChatMessage
from services.youtube.models.stream import StreamSession
from shared.storage.participants import ParticipantStore


SESSION_START = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_message(text, author="alice", author_id=None, avatar="https://img/a.png"):
    return YouTubeChatMessage(
        raw={},
        live_chat_id="chat-1",
        message_id=f"msg-{author}-{text}",
        author_id=author_id or f"UC-{author}",
        author_name=author,
        text=text,
        avatar_url=avatar,
    )


@pytest.fixture
def session():
    return StreamSession(live_chat_id="chat-1", started_at=SESSION_START)


@pytest.fixture
def sender():
    return AsyncMock()


@pytest.fixture
def relay():
    mock = MagicMock(spec=WebhookRelay)
    mock.forward = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def participants(tmp_path):
    return ParticipantStore(tmp_path / "participants.json").load()


@pytest.fixture
def command_table():
    return CommandTable.from_definitions(
        [
            CommandDefinition(trigger="!help", response="Commands: !uptime", aliases=("!commands",)),
            CommandDefinition(trigger="!uptime", response="@{user} live for {uptime}"),
            CommandDefinition(trigger="!so", response="Go check out {args}!"),
            CommandDefinition(trigger="!darn", response="darn command reply"),
        ]
    )


@pytest.fixture
def pipeline(session, sender, relay, participants, command_table):
    return ChatMessagePipeline(
        session=session,
        send=sender,
        commands=command_table,
        moderation=ModerationFilter(["darn", "Heck"]),
        participants=participants,
        relay=relay,
        clock=lambda: SESSION_START + timedelta(milliseconds=3725000),
    )


def sent_texts(sender):
    return [c.args[0] for c in sender.await_args_list]
