"""GameRecorder — saves a completed game, once.

The recorder watches the live turn list. When it reaches 14 turns and no
save has been attempted yet, it strips the live-play fields from each
turn and submits the game to the write endpoint. A recorder never tries
again after a failure; a new game gets a new recorder.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Sequence

from perfectscrabble.core.auth import AuthClient
from perfectscrabble.core.errors import ScrabbleError
from perfectscrabble.core.store import DEFAULT_COLLECTION
from perfectscrabble.core.write_api import WriteClient
from perfectscrabble.turns import TURNS_PER_GAME, Turn, iso_timestamp, strip_ephemeral

logger = logging.getLogger(__name__)


class SaveStatus(Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class GameRecorder:
    """One-shot save of a completed game."""

    def __init__(
        self,
        writer: WriteClient,
        auth: AuthClient,
        collection: str = DEFAULT_COLLECTION,
    ) -> None:
        self._writer = writer
        self._auth = auth
        self._collection = collection
        self._status = SaveStatus.IDLE
        self._saved_id: str | None = None
        self._error: str | None = None

    @property
    def status(self) -> SaveStatus:
        return self._status

    @property
    def saved_id(self) -> str | None:
        return self._saved_id

    @property
    def error(self) -> str | None:
        return self._error

    def maybe_save(self, turns: Sequence[Turn]) -> bool:
        """Save if the game is complete and nothing was attempted yet.

        Returns True if a save was attempted.
        """
        if self._status is not SaveStatus.IDLE or len(turns) != TURNS_PER_GAME:
            return False
        self._save(turns)
        return True

    def _save(self, turns: Sequence[Turn]) -> None:
        self._status = SaveStatus.SAVING
        try:
            token = self._auth.current_token()
            data = {
                "turns": [strip_ephemeral(t.to_record()) for t in turns],
                "timestamp": iso_timestamp(datetime.now(timezone.utc)),
            }
            self._saved_id = self._writer.write(self._collection, data, token)
        except ScrabbleError as exc:
            logger.error("Error saving game: %s", exc)
            self._error = str(exc) or "An unknown error occurred while saving the game."
            self._status = SaveStatus.ERROR
            return

        logger.info("Saved game %s", self._saved_id)
        self._status = SaveStatus.SAVED
