from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional

from core.context import CommandDefinition
from shared.logging.logger import get_logger

log = get_logger("triggers.commands")


ARGS_PLACEHOLDER = "{args}"


@dataclass(frozen=True)
class Command:
    trigger: str
    response: str
    description: str = ""
    aliases: FrozenSet[str] = frozenset()

    @property
    def takes_args(self) -> bool:
        return ARGS_PLACEHOLDER in self.response


@dataclass(frozen=True)
class CommandMatch:
    command: Command
    key: str
    args: str = ""


def format_uptime(elapsed_ms: int) -> str:
    """Render elapsed milliseconds as "{h}h {m}m {s}s"."""
    elapsed_ms = max(0, int(elapsed_ms))
    secs = (elapsed_ms // 1000) % 60
    mins = (elapsed_ms // 60000) % 60
    hours = elapsed_ms // 3600000
    return f"{hours}h {mins}m {secs}s"


def extract_args(text: str) -> str:
    """Drop the first whitespace-delimited token and return the rest."""
    parts = text.strip().split(maxsplit=1)
    return parts[1] if len(parts) > 1 else ""


class CommandTable:
    """
    Flat lookup from lowercase trigger/alias text to a Command.

    Definitions are applied in order, each trigger before its own aliases.
    When two keys collide the definition applied last wins; collisions are
    logged so a misconfigured bot.yml is visible.
    """

    def __init__(self, commands: Optional[Dict[str, Command]] = None):
        self._commands: Dict[str, Command] = dict(commands or {})

    @classmethod
    def from_definitions(cls, definitions: Iterable[CommandDefinition]) -> "CommandTable":
        table = cls()
        for definition in definitions:
            table.register(definition)
        return table

    # ------------------------------------------------------------

    def register(self, definition: CommandDefinition) -> Command:
        trigger = definition.trigger.strip().lower()
        aliases = frozenset(
            a.strip().lower() for a in definition.aliases if a.strip()
        )
        command = Command(
            trigger=trigger,
            response=definition.response,
            description=definition.description or "",
            aliases=aliases,
        )

        for key in [trigger, *sorted(aliases - {trigger})]:
            previous = self._commands.get(key)
            if previous is not None:
                log.warning(
                    f"Command key '{key}' from '{previous.trigger}' "
                    f"overridden by '{trigger}'"
                )
            self._commands[key] = command

        return command

    # ------------------------------------------------------------

    def get(self, key: str) -> Optional[Command]:
        return self._commands.get(key.lower())

    def lookup(self, text: str) -> Optional[CommandMatch]:
        """
        Resolve a chat message to a command.

        The whole lowercased message must equal a key. A message with
        trailing words only matches through its first token, and only when
        that command's response consumes {args}.
        """
        normalized = text.strip().lower()
        if not normalized:
            return None

        command = self._commands.get(normalized)
        if command is not None:
            return CommandMatch(command=command, key=normalized, args=extract_args(text))

        first_token = normalized.split(maxsplit=1)[0]
        command = self._commands.get(first_token)
        if command is not None and command.takes_args:
            return CommandMatch(command=command, key=first_token, args=extract_args(text))

        return None

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def keys(self):
        return self._commands.keys()


_PLACEHOLDER_RE = re.compile(r"\{(user|uptime|args)\}")


def render_response(template: str, *, user: str, uptime: str, args: str = "") -> str:
    """Fill {user}, {uptime} and {args} in one pass; substituted text is never re-expanded."""
    values = {"user": user, "uptime": uptime, "args": args}
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)
