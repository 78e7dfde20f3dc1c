"""Score aggregation over a turn sequence.

Turn scores are opaque integers from the external scorer; this module only
partitions and sums them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from perfectscrabble.turns import Player, Turn, player_of


@dataclass(frozen=True)
class ScoreSummary:
    player_a: int = 0
    player_b: int = 0

    @property
    def total(self) -> int:
        return self.player_a + self.player_b

    @property
    def leader(self) -> Player | None:
        """Player with the higher score, or None on a tie."""
        if self.player_a == self.player_b:
            return None
        return Player.A if self.player_a > self.player_b else Player.B

    def for_player(self, player: Player) -> int:
        return self.player_a if player is Player.A else self.player_b


def aggregate_scores(turns: Iterable[Turn]) -> ScoreSummary:
    """Sum odd-id scores for player A and even-id scores for player B."""
    player_a = 0
    player_b = 0
    for turn in turns:
        if player_of(turn.id) is Player.A:
            player_a += turn.score
        else:
            player_b += turn.score
    return ScoreSummary(player_a=player_a, player_b=player_b)


def total_score(turns: Iterable[Turn]) -> int:
    return aggregate_scores(turns).total
