from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Optional, Tuple
import os


DEFAULT_WELCOME_MESSAGE = "👋 Welcome @{user} to the stream, Thanks for joining!"
DEFAULT_MODERATION_WARNING = "@{user}, please avoid bad language!"


# -------------------------------------------------
# BOT CONFIGURATION (bot.yml)
# -------------------------------------------------

@dataclass(frozen=True)
class WebhookConfig:
    enabled: bool
    url: str

    @property
    def active(self) -> bool:
        return bool(self.enabled and self.url)


@dataclass(frozen=True)
class TimedMessage:
    interval_ms: int
    message: str


@dataclass(frozen=True)
class CommandDefinition:
    trigger: str
    response: str
    description: str = ""
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BotConfig:
    banned_words: FrozenSet[str] = frozenset()
    webhook: Optional[WebhookConfig] = None
    timed_messages: Tuple[TimedMessage, ...] = ()
    commands: Tuple[CommandDefinition, ...] = ()
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    moderation_warning: str = DEFAULT_MODERATION_WARNING


# -------------------------------------------------
# RUNTIME SETTINGS (environment)
# -------------------------------------------------

@dataclass(frozen=True)
class RuntimeSettings:
    config_path: Path
    participants_path: Path
    client_secret_path: Path
    token_path: Path

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        """
        Resolve file locations from the environment.

        Call after `load_dotenv()` so values from `.env` are visible.
        """
        return cls(
            config_path=Path(os.getenv("BOT_CONFIG_PATH", "bot.yml")),
            participants_path=Path(
                os.getenv("PARTICIPANTS_PATH", "participants.json")
            ),
            client_secret_path=Path(
                os.getenv("CLIENT_SECRET_PATH", "client_secret.json")
            ),
            token_path=Path(os.getenv("TOKEN_PATH", "token.json")),
        )
