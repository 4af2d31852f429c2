"""
Tests for bracket skeleton generation (pure, no database).
"""

from types import SimpleNamespace

import pytest

from robobracket.errors import InputError
from robobracket.models.match import STAGE_BRACKET, STATUS_COMPLETED, STATUS_PENDING
from robobracket.services.bracket_builder import (
    build_bracket,
    order_by_seed,
    resolve_bracket_size,
    round_name,
)


def _ids(n: int) -> list:
    """Team ids 101..100+n, ranked best first."""
    return [100 + i for i in range(1, n + 1)]


def _round(matches, round_number):
    return [m for m in matches if m.round == round_number]


class TestBracketShape:
    def test_8_teams_full_bracket(self):
        matches = build_bracket(1, "sumo", _ids(8))

        assert len(matches) == 7
        assert [len(_round(matches, r)) for r in (1, 2, 3)] == [4, 2, 1]
        assert [m.match_number for m in matches] == list(range(1, 8))
        assert all(m.stage == STAGE_BRACKET for m in matches)

        pairs = [(m.team_a_id, m.team_b_id) for m in _round(matches, 1)]
        # seed order 1v8, 4v5, 2v7, 3v6
        assert pairs == [(101, 108), (104, 105), (102, 107), (103, 106)]
        assert all(m.status == STATUS_PENDING for m in matches)

    def test_later_rounds_start_empty(self):
        matches = build_bracket(1, "sumo", _ids(8))
        for m in matches:
            if m.round > 1:
                assert m.team_a_id is None and m.team_b_id is None
                assert m.winner_id is None

    def test_same_ranking_gives_same_draw(self):
        ranked = [107, 103, 101, 105, 102]

        first = build_bracket(1, "sumo", ranked)
        second = build_bracket(1, "sumo", list(ranked))

        def layout(matches):
            return [(m.round, m.match_number, m.team_a_id, m.team_b_id, m.winner_id) for m in matches]

        assert layout(first) == layout(second)
        assert [(m.team_a_id, m.team_b_id) for m in _round(first, 1)] == [
            (107, None),
            (105, 102),
            (103, None),
            (101, None),
        ]

    def test_round_numbers_are_contiguous(self):
        matches = build_bracket(1, "sumo", _ids(16))
        rounds = sorted({m.round for m in matches})
        assert rounds == [1, 2, 3, 4]
        for r in rounds[:-1]:
            assert len(_round(matches, r)) == 2 * len(_round(matches, r + 1))

    def test_two_teams_is_a_single_final(self):
        matches = build_bracket(1, "sumo", _ids(2))
        assert len(matches) == 1
        assert (matches[0].team_a_id, matches[0].team_b_id) == (101, 102)

    def test_first_match_number_offset(self):
        matches = build_bracket(1, "sumo", _ids(4), first_match_number=11)
        assert [m.match_number for m in matches] == [11, 12, 13]

    def test_education_level_copied_to_every_match(self):
        matches = build_bracket(1, "sumo", _ids(4), education_level="secondary")
        assert {m.education_level for m in matches} == {"secondary"}


class TestByes:
    def test_5_teams(self):
        matches = build_bracket(1, "sumo", _ids(5))
        first_round = _round(matches, 1)
        assert len(matches) == 7

        byes = [m for m in first_round if m.is_bye]
        full = [m for m in first_round if m.team_a_id is not None and m.team_b_id is not None]
        assert len(full) == 1
        assert len(byes) == 3

        # Seeds 1..3 get the byes, 4v5 plays
        assert (full[0].team_a_id, full[0].team_b_id) == (104, 105)
        assert sorted(m.winner_id for m in byes) == [101, 102, 103]

    def test_7_teams_top_seed_gets_the_only_bye(self):
        matches = build_bracket(1, "sumo", _ids(7))
        first_round = _round(matches, 1)
        byes = [m for m in first_round if m.is_bye]
        assert len(byes) == 1
        assert byes[0].winner_id == 101
        assert len([m for m in first_round if not m.is_bye]) == 3

    def test_bye_match_is_completed_with_zero_scores(self):
        matches = build_bracket(1, "sumo", _ids(3))
        bye = _round(matches, 1)[0]
        assert bye.team_a_id == 101 and bye.team_b_id is None
        assert bye.status == STATUS_COMPLETED
        assert bye.winner_id == 101
        assert (bye.score_a, bye.score_b) == (0, 0)

    def test_single_team(self):
        matches = build_bracket(1, "sumo", _ids(1))
        assert len(matches) == 1
        assert matches[0].winner_id == 101
        assert matches[0].status == STATUS_COMPLETED


class TestExplicitSize:
    def test_size_cuts_to_top_teams(self):
        matches = build_bracket(1, "sumo", _ids(10), size=8)
        entrants = {t for m in _round(matches, 1) for t in (m.team_a_id, m.team_b_id)}
        assert entrants == set(_ids(8))

    def test_size_larger_than_team_count_rejected(self):
        with pytest.raises(InputError, match="need at least 8 teams"):
            build_bracket(1, "sumo", _ids(5), size=8)

    @pytest.mark.parametrize("size", [0, 1, 3, 6, 12])
    def test_size_must_be_power_of_two(self, size):
        with pytest.raises(InputError, match="power of two"):
            resolve_bracket_size(16, size)

    def test_default_size(self):
        assert resolve_bracket_size(5) == 8
        assert resolve_bracket_size(8) == 8
        assert resolve_bracket_size(1) == 2


class TestInputValidation:
    def test_empty_team_list(self):
        with pytest.raises(InputError, match="at least 1 team"):
            build_bracket(1, "sumo", [])

    def test_duplicate_team_ids(self):
        with pytest.raises(InputError, match="duplicate"):
            build_bracket(1, "sumo", [101, 102, 101])

    def test_input_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            build_bracket(1, "sumo", [])


class TestHelpers:
    def test_round_names(self):
        assert round_name(1) == "Final"
        assert round_name(2) == "Semifinal"
        assert round_name(4) == "Quarterfinal"
        assert round_name(8) == "Round of 16"

    def test_order_by_seed_puts_unseeded_last(self):
        teams = [
            SimpleNamespace(id=1, seed=None),
            SimpleNamespace(id=2, seed=3),
            SimpleNamespace(id=3, seed=1),
            SimpleNamespace(id=4, seed=None),
        ]
        assert [t.id for t in order_by_seed(teams)] == [3, 2, 1, 4]
