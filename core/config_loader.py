"""
Bot configuration loader.

Reads bot.yml, validates it against an embedded JSON Schema and produces a
frozen BotConfig. Unlike a best-effort loader, every problem here is fatal:
the bot has no sensible behavior without a valid command/moderation setup.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml
from jsonschema import Draft7Validator

from core.context import (
    DEFAULT_MODERATION_WARNING,
    DEFAULT_WELCOME_MESSAGE,
    BotConfig,
    CommandDefinition,
    TimedMessage,
    WebhookConfig,
)
from core.errors import ConfigError
from shared.logging.logger import get_logger

log = get_logger("core.config_loader")


CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["commands", "discordWebhook"],
    "properties": {
        "bannedWords": {"type": ["array", "null"], "items": {"type": "string"}},
        "badWords": {"type": ["array", "null"], "items": {"type": "string"}},
        "discordWebhook": {
            "type": ["object", "null"],
            "properties": {
                "enable": {"type": "boolean"},
                "url": {"type": ["string", "null"]},
            },
        },
        "timedMessages": {
            "type": ["array", "null"],
            "items": {
                "type": "object",
                "required": ["interval", "message"],
                "properties": {
                    "interval": {"type": "integer", "exclusiveMinimum": 0},
                    "message": {"type": "string", "minLength": 1},
                },
            },
        },
        "commands": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["trigger", "response"],
                "properties": {
                    "trigger": {"type": "string", "minLength": 1},
                    "response": {"type": "string", "minLength": 1},
                    "description": {"type": ["string", "null"]},
                    "aliases": {"type": ["array", "null"], "items": {"type": "string"}},
                },
            },
        },
        "welcomeMessage": {"type": "string", "minLength": 1},
        "moderationWarning": {"type": "string", "minLength": 1},
    },
}


class ConfigLoader:
    """
    Loads and validates bot.yml.

    Expected shape:
      bannedWords: [str]            (legacy key: badWords)
      discordWebhook: {enable: bool, url: str}
      timedMessages: [{interval: ms, message: str}]
      commands: [{trigger, response, description?, aliases?}]
      welcomeMessage: str           (optional, supports {user})
      moderationWarning: str        (optional, supports {user})
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._validator = Draft7Validator(CONFIG_SCHEMA)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read_yaml(self) -> Dict[str, Any]:
        if not self.path.exists():
            raise ConfigError(f"Config file not found: {self.path}")

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load {self.path}: {e}") from e

        if not data:
            raise ConfigError(f"{self.path} is missing or empty")
        if not isinstance(data, dict):
            raise ConfigError(f"{self.path} root must be a mapping")

        return data

    def _validate(self, payload: Dict[str, Any]) -> None:
        errors = sorted(
            self._validator.iter_errors(payload), key=lambda e: list(e.path)
        )
        if not errors:
            return

        for err in errors:
            loc = "/".join(str(p) for p in err.path) or "<root>"
            log.error(f"{self.path.name} validation error at '{loc}': {err.message}")

        raise ConfigError(
            f"{self.path.name} failed validation ({len(errors)} error(s))"
        )

    @staticmethod
    def _build_commands(entries: List[Dict[str, Any]]) -> tuple[CommandDefinition, ...]:
        return tuple(
            CommandDefinition(
                trigger=entry["trigger"],
                response=entry["response"],
                description=entry.get("description") or "",
                aliases=tuple(entry.get("aliases") or ()),
            )
            for entry in entries
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self) -> BotConfig:
        data = self._read_yaml()
        self._validate(data)

        words = data.get("bannedWords")
        if words is None:
            words = data.get("badWords") or []
        banned_words = frozenset(w.strip().lower() for w in words if w.strip())

        webhook_raw = data.get("discordWebhook")
        webhook = None
        if webhook_raw:
            webhook = WebhookConfig(
                enabled=bool(webhook_raw.get("enable", False)),
                url=webhook_raw.get("url") or "",
            )

        timed = tuple(
            TimedMessage(interval_ms=int(tm["interval"]), message=tm["message"])
            for tm in data.get("timedMessages") or []
        )

        config = BotConfig(
            banned_words=banned_words,
            webhook=webhook,
            timed_messages=timed,
            commands=self._build_commands(data["commands"]),
            welcome_message=data.get("welcomeMessage") or DEFAULT_WELCOME_MESSAGE,
            moderation_warning=(
                data.get("moderationWarning") or DEFAULT_MODERATION_WARNING
            ),
        )

        log.info(
            f"Loaded {self.path.name}: {len(config.commands)} command(s), "
            f"{len(config.banned_words)} banned word(s), "
            f"{len(config.timed_messages)} timed message(s), "
            f"webhook={'ON' if webhook and webhook.active else 'OFF'}"
        )
        return config


def load_bot_config(path: Path | str) -> BotConfig:
    return ConfigLoader(path).load()
