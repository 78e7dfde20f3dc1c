"""LiveGame — the game being played, one perfect turn at a time.

Turns must arrive in id order (1..14). Each turn is placed on the board
before it is accepted; a turn that does not fit is rejected and the game
is left unchanged. After every accepted turn the recorder, if any, gets a
chance to save.
"""

from __future__ import annotations

from perfectscrabble.board import Grid, copy_grid, empty_grid, place_word
from perfectscrabble.core.errors import TurnOrderError
from perfectscrabble.recorder import GameRecorder
from perfectscrabble.replay import board_at
from perfectscrabble.scoring import ScoreSummary, aggregate_scores
from perfectscrabble.turns import TURNS_PER_GAME, Player, Turn, player_of


class LiveGame:
    def __init__(self, recorder: GameRecorder | None = None) -> None:
        self._recorder = recorder
        self._turns: list[Turn] = []
        self._board: Grid = empty_grid()

    @property
    def turns(self) -> list[Turn]:
        return list(self._turns)

    @property
    def board(self) -> Grid:
        return copy_grid(self._board)

    @property
    def scores(self) -> ScoreSummary:
        return aggregate_scores(self._turns)

    @property
    def is_complete(self) -> bool:
        return len(self._turns) == TURNS_PER_GAME

    @property
    def current_player(self) -> Player | None:
        """Player to move next, or None once the game is complete."""
        if self.is_complete:
            return None
        return player_of(len(self._turns) + 1)

    @property
    def recorder(self) -> GameRecorder | None:
        return self._recorder

    def play(self, turn: Turn) -> Grid:
        """Accept the next turn and return the updated board."""
        if self.is_complete:
            raise TurnOrderError(f"Game already has {TURNS_PER_GAME} turns")
        expected = len(self._turns) + 1
        if turn.id != expected:
            raise TurnOrderError(f"Expected turn {expected}, got turn {turn.id}")

        self._board = place_word(self._board, turn)
        self._turns.append(turn)

        if self._recorder is not None:
            self._recorder.maybe_save(self._turns)
        return self.board

    def board_at(self, k: int) -> Grid:
        """Board after the first ``k`` turns, for stepping back through play."""
        if k > len(self._turns):
            raise ValueError(f"Only {len(self._turns)} turns played, asked for {k}")
        return board_at(self._turns, k)
