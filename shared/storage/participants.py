"""
Durable set of chat participants.

Identifiers are kept in memory and the whole set is rewritten to disk every
time a new one arrives. New participants are rare compared to message
volume, so the synchronous write is acceptable in exchange for never losing
an entry on crash.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Iterator, Set

from shared.logging.logger import get_logger

log = get_logger("shared.participants")


class ParticipantStore:
    """
    Append-only identifier set backed by a JSON array file.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._ids: Set[str] = set()

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load(self) -> "ParticipantStore":
        """
        Replace the in-memory set with the persisted one.

        A missing file is a fresh start. An unreadable or malformed file is
        logged and treated as empty rather than blocking startup.
        """
        self._ids = set()

        if not self.path.exists():
            log.info(f"No participants file at {self.path}; starting empty")
            return self

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning(f"Could not load participants file: {e}")
            return self

        if not isinstance(data, list):
            log.warning(f"{self.path} is not a JSON array; ignoring")
            return self

        self._ids = {str(entry) for entry in data}
        log.info(f"Loaded {len(self._ids)} participant(s) from {self.path}")
        return self

    def save(self) -> bool:
        """
        Atomically rewrite the participants file.

        Returns False if the write failed. The in-memory set is still
        correct in that case; only durability of the new entry is lost.
        """
        serialized = json.dumps(sorted(self._ids))
        temp_path = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", dir=self.path.parent, delete=False, encoding="utf-8"
            ) as tmp:
                temp_path = Path(tmp.name)
                tmp.write(serialized)
                tmp.flush()
                os.fsync(tmp.fileno())

            temp_path.replace(self.path)
        except OSError as e:
            log.error(f"Failed to save participants: {e}")
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            return False

        return True

    # ------------------------------------------------------------------
    # Set API
    # ------------------------------------------------------------------

    def add(self, participant_id: str) -> bool:
        """
        Record a participant and persist. Returns True if it was new.
        """
        if participant_id in self._ids:
            return False

        self._ids.add(participant_id)
        self.save()
        return True

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))
