from services.triggers.commands import Command, CommandTable, format_uptime
from services.triggers.moderation import ModerationFilter
from services.triggers.pipeline import ChatMessagePipeline

__all__ = [
    "Command",
    "CommandTable",
    "ChatMessagePipeline",
    "ModerationFilter",
    "format_uptime",
]
