from typing import Iterable, Optional

from core.context import DEFAULT_MODERATION_WARNING


class ModerationFilter:
    """
    Banned-word detection.

    Pure logic: case-insensitive substring matching, no tokenizing, no I/O.
    """

    NOTICE_USERNAME = "Bot"

    def __init__(
        self,
        banned_words: Iterable[str],
        *,
        warning_template: str = DEFAULT_MODERATION_WARNING,
    ):
        self.banned_words = tuple(
            sorted({w.strip().lower() for w in banned_words if w and w.strip()})
        )
        self.warning_template = warning_template

    def find_banned_word(self, text: str) -> Optional[str]:
        lowered = (text or "").lower()
        for word in self.banned_words:
            if word in lowered:
                return word
        return None

    def is_banned(self, text: str) -> bool:
        return self.find_banned_word(text) is not None

    def warning_for(self, user: str) -> str:
        return self.warning_template.replace("{user}", user)

    def relay_notice(self, user: str, text: str) -> str:
        return f'@{user} used a banned word: "{text}"'
