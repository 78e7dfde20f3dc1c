"""Tests for LiveGame turn sequencing."""

from unittest.mock import MagicMock

import pytest

from perfectscrabble.board import Direction, EMPTY, is_empty
from perfectscrabble.core.errors import PlacementError, TurnOrderError
from perfectscrabble.game import LiveGame
from perfectscrabble.recorder import GameRecorder
from perfectscrabble.replay import replay
from perfectscrabble.turns import Player


class TestPlay:
    def test_new_game(self):
        game = LiveGame()
        assert game.turns == []
        assert is_empty(game.board)
        assert game.current_player is Player.A
        assert not game.is_complete

    def test_play_updates_board_and_scores(self, make_turn):
        game = LiveGame()
        board = game.play(make_turn(1, bingo="CAT", score=12))
        assert board[7][7] == "C"
        assert game.scores.player_a == 12
        assert game.current_player is Player.B

    def test_board_matches_replay(self, perfect_game):
        game = LiveGame()
        turns = perfect_game()
        for turn in turns:
            game.play(turn)
        assert game.is_complete
        assert game.current_player is None
        assert game.board == replay(turns)

    def test_out_of_order_rejected(self, make_turn):
        game = LiveGame()
        with pytest.raises(TurnOrderError, match="Expected turn 1, got turn 2"):
            game.play(make_turn(2))

    def test_fifteenth_turn_rejected(self, make_turn, perfect_game):
        game = LiveGame()
        for turn in perfect_game():
            game.play(turn)
        with pytest.raises(TurnOrderError):
            game.play(make_turn(15, row=14, col=0))

    def test_bad_placement_leaves_game_unchanged(self, make_turn):
        game = LiveGame()
        game.play(make_turn(1, bingo="CAT"))
        clash = make_turn(2, row=6, col=8, direction=Direction.VERTICAL, bingo="BOD")
        with pytest.raises(PlacementError):
            game.play(clash)
        assert len(game.turns) == 1
        assert game.board[6][8] == EMPTY

    def test_board_is_a_copy(self, make_turn):
        game = LiveGame()
        game.play(make_turn(1))
        game.board[0][0] = "Z"
        assert game.board[0][0] == EMPTY


class TestBoardAt:
    def test_step_back(self, perfect_game):
        game = LiveGame()
        for turn in perfect_game()[:4]:
            game.play(turn)
        assert game.board_at(2)[1][0] == "R"
        assert game.board_at(2)[2][0] == EMPTY

    def test_beyond_played_rejected(self, make_turn):
        game = LiveGame()
        game.play(make_turn(1))
        with pytest.raises(ValueError):
            game.board_at(2)


class TestRecorderHook:
    def test_recorder_sees_every_turn(self, perfect_game):
        recorder = MagicMock(spec=GameRecorder)
        game = LiveGame(recorder=recorder)
        for turn in perfect_game():
            game.play(turn)
        assert recorder.maybe_save.call_count == 14
        assert len(recorder.maybe_save.call_args[0][0]) == 14
        assert game.recorder is recorder
