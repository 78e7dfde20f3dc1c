"""Client for the hosted turn-scoring API.

Scoring rules live on the remote side; we send the turn notation and,
when blanks were played, their board coordinates, and get back a number.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

import requests

from perfectscrabble.board import word_cells
from perfectscrabble.core.errors import ExternalServiceError
from perfectscrabble.turns import Turn

logger = logging.getLogger(__name__)

DEFAULT_SCORER_URL = (
    "https://www.wolframcloud.com/obj/josephb/Scrabble/LiveAPIs/ScoreTurn"
)


@dataclass(frozen=True)
class ScoreTurnResponse:
    success: bool
    score: int | None = None
    error: str | None = None


def blank_positions(turn: Turn) -> list[dict[str, int]]:
    """Board coordinates of the blank tiles in ``turn``."""
    if turn.blanks is None:
        return []
    cells = word_cells(turn)
    return [
        {"row": cells[i][0], "col": cells[i][1]}
        for i in turn.blanks.indices
        if 0 <= i < len(cells)
    ]


class TurnScorer:
    """GET client for the scoring endpoint. No retries."""

    def __init__(
        self,
        url: str = DEFAULT_SCORER_URL,
        timeout_s: float = 30.0,
        session: requests.Session | None = None,
    ):
        self._url = url
        self._timeout_s = timeout_s
        self._session = session or requests.Session()

    def score_turn(
        self,
        turn: str,
        blank_positions: list[dict[str, int]] | None = None,
    ) -> ScoreTurnResponse:
        params = {"turn": turn}
        if blank_positions:
            params["blankPositions"] = json.dumps(blank_positions)

        try:
            response = self._session.get(self._url, params=params, timeout=self._timeout_s)
        except requests.RequestException as exc:
            raise ExternalServiceError(f"Scoring request failed: {exc}") from exc

        if not response.ok:
            raise ExternalServiceError(
                f"API request failed with status {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ExternalServiceError(f"Scoring response is not JSON: {exc}") from exc

        result = ScoreTurnResponse(
            success=bool(data.get("success")),
            score=data.get("score"),
            error=data.get("error"),
        )
        if not result.success:
            logger.warning("Scorer rejected turn %r: %s", turn, result.error)
        return result
