"""
Tests for standings and score parsing.
"""

import pytest

from clubdraw.models.schedule import MatchResult
from clubdraw.services.draw_rules import DrawRequestError
from clubdraw.services.score_parser import parse_score, result_from_score
from clubdraw.services.standings import compute_standings


def _table(standings):
    return [(s.player_id, s.wins, s.losses, s.sets_won, s.sets_lost, s.position) for s in standings]


class TestStandings:
    def test_wins_then_set_difference_then_id(self):
        results = [
            MatchResult(1, 2, sets_a=3, sets_b=0),
            MatchResult(3, 4, sets_a=3, sets_b=2),
        ]
        standings = compute_standings([1, 2, 3, 4], results)
        assert [s.player_id for s in standings] == [1, 3, 4, 2]
        assert [s.position for s in standings] == [1, 2, 3, 4]

    def test_id_breaks_full_ties(self):
        standings = compute_standings([3, 1, 2], [])
        assert [s.player_id for s in standings] == [1, 2, 3]

    def test_forfeit_uses_one_set_proxy(self):
        results = [
            MatchResult(1, 2, sets_a=3, sets_b=1),
            MatchResult(1, 3, forfeit_b=True),
            MatchResult(2, 3, sets_a=3, sets_b=2),
        ]
        assert _table(compute_standings([1, 2, 3], results)) == [
            (1, 2, 0, 4, 1, 1),
            (2, 1, 1, 4, 5, 2),
            (3, 0, 2, 2, 4, 3),
        ]

    def test_forfeit_by_player_a(self):
        standings = compute_standings([1, 2], [MatchResult(1, 2, forfeit_a=True)])
        assert _table(standings) == [(2, 1, 0, 1, 0, 1), (1, 0, 1, 0, 1, 2)]

    def test_unplayed_result_is_ignored(self):
        standings = compute_standings([1, 2], [MatchResult(1, 2)])
        assert all(s.wins == 0 and s.losses == 0 and s.sets_won == 0 for s in standings)

    def test_set_difference_property(self):
        standings = compute_standings([1, 2], [MatchResult(1, 2, sets_a=3, sets_b=1)])
        assert standings[0].set_difference == 2
        assert standings[1].set_difference == -2

    def test_rejects_player_outside_field(self):
        with pytest.raises(DrawRequestError, match="outside the field"):
            compute_standings([1, 2], [MatchResult(1, 5, sets_a=3)])


class TestScoreParser:
    def test_multi_set_string(self):
        parsed = parse_score("11-7 9-11 11-5")
        assert parsed.sets == [(11, 7), (9, 11), (11, 5)]
        assert (parsed.player_a_sets_won, parsed.player_b_sets_won) == (2, 1)
        assert (parsed.player_a_points, parsed.player_b_points) == (31, 23)

    def test_comma_separated(self):
        parsed = parse_score("11-7, 9-11")
        assert (parsed.player_a_sets_won, parsed.player_b_sets_won) == (1, 1)

    def test_display_blob(self):
        assert parse_score({"display": "6-3"}).player_a_sets_won == 1

    def test_structured_sets(self):
        parsed = parse_score({"sets": [{"a": 11, "b": 9}, {"a": 8, "b": 11}, {"a": 12, "b": 10}]})
        assert (parsed.player_a_sets_won, parsed.player_b_sets_won) == (2, 1)

    @pytest.mark.parametrize("raw", ["", None, "abc", "11-7-3", "11:7", {"display": ""}])
    def test_unparseable_returns_none(self, raw):
        assert parse_score(raw) is None

    def test_result_from_point_scores(self):
        result = result_from_score(4, 9, "11-7 9-11 11-5")
        assert result == MatchResult(4, 9, sets_a=2, sets_b=1)
        assert result.winner() == 4

    def test_result_from_set_count(self):
        result = result_from_score(4, 9, "1-3", sets_only=True)
        assert (result.sets_a, result.sets_b) == (1, 3)
        assert result.winner() == 9

    def test_score_key_and_whitespace(self):
        parsed = parse_score({"score": "  11-9   4-11 "})
        assert parsed.sets == [(11, 9), (4, 11)]

    @pytest.mark.parametrize(
        "raw",
        [{"sets": []}, {"sets": [{"a": -1, "b": 11}]}, {"sets": [{"a": "x", "b": 1}]}, {"sets": ["11-7"]}],
    )
    def test_unreadable_structured_sets(self, raw):
        assert parse_score(raw) is None

    def test_result_from_garbage(self):
        assert result_from_score(1, 2, "walkover") is None
