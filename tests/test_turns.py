"""Tests for turn records, player parity and record validation."""

from datetime import datetime, timedelta, timezone

import pytest

from perfectscrabble.board import Direction
from perfectscrabble.core.errors import ValidationError
from perfectscrabble.turns import (
    TURNS_PER_GAME,
    Blanks,
    Overlap,
    Player,
    Turn,
    is_complete,
    iso_timestamp,
    player_of,
    sort_turns,
    strip_ephemeral,
    validate_game_record,
)

FULL_RECORD = {
    "id": 3,
    "row": 2,
    "col": 4,
    "direction": "vertical",
    "bingo": "retains",
    "score": 74,
    "overlap": {"tile": "t", "index": 2},
    "blanks": {"tile": "s", "indices": [6]},
    "tileBag": ["A", "E"],
    "tilesLeft": 2,
}


class TestPlayerOf:
    @pytest.mark.parametrize("turn_id", [1, 3, 5, 13])
    def test_odd_is_player_a(self, turn_id):
        assert player_of(turn_id) is Player.A

    @pytest.mark.parametrize("turn_id", [2, 4, 14])
    def test_even_is_player_b(self, turn_id):
        assert player_of(turn_id) is Player.B

    def test_turn_player_property(self, make_turn):
        assert make_turn(2).player is Player.B


class TestFromRecord:
    def test_all_fields(self):
        turn = Turn.from_record(FULL_RECORD)
        assert turn.id == 3
        assert turn.direction is Direction.VERTICAL
        assert turn.bingo == "RETAINS"
        assert turn.overlap == Overlap(tile="T", index=2)
        assert turn.blanks == Blanks(tile="S", indices=(6,))
        assert turn.tile_bag == ("A", "E")
        assert turn.tiles_left == 2

    def test_optional_fields_absent(self):
        turn = Turn.from_record({
            "id": 1, "row": 7, "col": 7, "direction": "horizontal",
            "bingo": "CAT", "score": 5,
        })
        assert turn.overlap is None
        assert turn.blanks is None
        assert turn.tile_bag is None

    def test_across_alias(self):
        turn = Turn.from_record({
            "id": 1, "row": 7, "col": 7, "direction": "across",
            "bingo": "CAT", "score": 5,
        })
        assert turn.direction is Direction.HORIZONTAL

    def test_missing_field_raises_validation_error(self):
        with pytest.raises(ValidationError, match="Malformed turn record"):
            Turn.from_record({"id": 1, "row": 7})

    def test_non_dict_raises_validation_error(self):
        with pytest.raises(ValidationError):
            Turn.from_record(None)


class TestToRecord:
    def test_excludes_ephemeral_by_default(self):
        record = Turn.from_record(FULL_RECORD).to_record()
        assert "tileBag" not in record
        assert "tilesLeft" not in record
        assert record["overlap"] == {"tile": "T", "index": 2}
        assert record["blanks"] == {"tile": "S", "indices": [6]}
        assert record["direction"] == "vertical"

    def test_includes_ephemeral_on_request(self):
        record = Turn.from_record(FULL_RECORD).to_record(include_ephemeral=True)
        assert record["tileBag"] == ["A", "E"]
        assert record["tilesLeft"] == 2

    def test_record_round_trip_equality(self):
        turn = Turn.from_record(FULL_RECORD)
        assert Turn.from_record(turn.to_record()) == turn


class TestStripEphemeral:
    def test_removes_live_play_fields(self):
        stripped = strip_ephemeral(FULL_RECORD)
        assert "tileBag" not in stripped
        assert "tilesLeft" not in stripped
        assert stripped["bingo"] == "retains"

    def test_does_not_modify_input(self):
        record = dict(FULL_RECORD)
        strip_ephemeral(record)
        assert "tileBag" in record


class TestSortTurns:
    def test_sorts_by_id(self, make_turn):
        turns = [make_turn(3), make_turn(1), make_turn(2)]
        assert [t.id for t in sort_turns(turns)] == [1, 2, 3]

    def test_duplicate_ids_rejected(self, make_turn):
        with pytest.raises(ValidationError, match="Duplicate turn id 2"):
            sort_turns([make_turn(2), make_turn(1), make_turn(2)])


class TestIsComplete:
    def test_fourteen_turns(self, perfect_game):
        assert TURNS_PER_GAME == 14
        assert is_complete(perfect_game())

    def test_thirteen_turns(self, perfect_game):
        assert not is_complete(perfect_game()[:13])


class TestValidateGameRecord:
    def test_stripped_game_is_valid(self, perfect_game):
        data = {
            "turns": [t.to_record() for t in perfect_game()],
            "timestamp": "2025-03-01T12:00:00.000Z",
        }
        validate_game_record(data)

    def test_ephemeral_fields_rejected(self, perfect_game):
        data = {"turns": [t.to_record(include_ephemeral=True) for t in perfect_game()]}
        with pytest.raises(ValidationError):
            validate_game_record(data)

    def test_missing_turns_rejected(self):
        with pytest.raises(ValidationError, match="turns"):
            validate_game_record({"timestamp": "x"})

    def test_bad_direction_rejected(self, perfect_game):
        records = [t.to_record() for t in perfect_game()]
        records[0]["direction"] = "diagonal"
        with pytest.raises(ValidationError):
            validate_game_record({"turns": records})

    def test_thirteen_turns_rejected(self, perfect_game):
        records = [t.to_record() for t in perfect_game()[:13]]
        with pytest.raises(ValidationError):
            validate_game_record({"turns": records})

    def test_fifteen_turns_rejected(self, perfect_game):
        records = [t.to_record() for t in perfect_game()]
        records.append(dict(records[-1], id=15))
        with pytest.raises(ValidationError):
            validate_game_record({"turns": records})

    def test_duplicate_ids_rejected(self, perfect_game):
        records = [t.to_record() for t in perfect_game()]
        records[1]["id"] = 1
        with pytest.raises(ValidationError, match="Turn ids must run 1..14"):
            validate_game_record({"turns": records})

    def test_out_of_order_ids_rejected(self, perfect_game):
        records = [t.to_record() for t in perfect_game()]
        records[0], records[1] = records[1], records[0]
        with pytest.raises(ValidationError, match="in order"):
            validate_game_record({"turns": records})


class TestIsoTimestamp:
    def test_millisecond_utc(self):
        ts = datetime(2025, 3, 1, 18, 4, 5, 123456, tzinfo=timezone.utc)
        assert iso_timestamp(ts) == "2025-03-01T18:04:05.123Z"

    def test_converts_to_utc(self):
        ts = datetime(2025, 3, 1, 13, 0, tzinfo=timezone(timedelta(hours=1)))
        assert iso_timestamp(ts) == "2025-03-01T12:00:00.000Z"

    def test_none(self):
        assert iso_timestamp(None) is None
