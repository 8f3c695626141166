"""
Startup failure taxonomy.

Anything raised from this module aborts the boot sequence and ends the
process with a nonzero exit code. Steady-state failures (poll errors, relay
errors, persistence errors) are handled where they occur and never use
these types.
"""

from __future__ import annotations


class StartupFatal(RuntimeError):
    """The bot cannot start; there is no degraded mode to fall back to."""


class ConfigError(StartupFatal):
    """bot.yml is missing, unreadable or does not match the schema."""


class AuthorizationError(StartupFatal):
    """OAuth credentials are missing or could not be exchanged/refreshed."""


class NoLiveBroadcast(StartupFatal):
    """The authorized channel has no broadcast in the "live" lifecycle state."""


__all__ = [
    "StartupFatal",
    "ConfigError",
    "AuthorizationError",
    "NoLiveBroadcast",
]
