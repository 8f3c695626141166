"""
Configuration validation script.

Validates bot.yml with the same loader the runtime uses, without
authorizing or attaching to a live chat.

Usage:
    python -m scripts.validate_config [path/to/bot.yml]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from core.config_loader import ConfigLoader
from core.context import RuntimeSettings
from core.errors import ConfigError
from services.triggers.commands import CommandTable


def _error(msg: str):
    print(f"[CONFIG ERROR] {msg}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Validate bot.yml")
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=None,
        help="config file (default: $BOT_CONFIG_PATH or bot.yml)",
    )
    args = parser.parse_args(argv)

    path = args.path or RuntimeSettings.from_env().config_path

    try:
        config = ConfigLoader(path).load()
    except ConfigError as e:
        _error(str(e))
        print("Configuration validation failed.", file=sys.stderr)
        return 1

    table = CommandTable.from_definitions(config.commands)
    print(
        f"Configuration validation passed: {len(config.commands)} command(s), "
        f"{len(table)} trigger key(s), {len(config.timed_messages)} timed message(s)."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
