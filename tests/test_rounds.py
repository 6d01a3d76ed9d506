"""
Unit tests for round partitioning.
"""
import os

import pytest

from bracketflow.config import load_fixture
from bracketflow.errors import InvalidInputError, StructuralAmbiguity
from bracketflow.models import coerce_matches
from bracketflow.rounds import (
    STRATEGY_EXPLICIT,
    STRATEGY_FALLBACK,
    STRATEGY_POWER_OF_TWO,
    STRATEGY_PRESENCE,
    _presence_rounds,
    complete_round_sizes,
    is_power_of_two,
    partition_rounds,
)
from conftest import make_complete_bracket, make_match


def round_ids(rounds):
    return [[m.id for m in r] for r in rounds]


class TestHelpers:
    """Tests for partition helper functions."""

    def test_is_power_of_two(self):
        """Test power-of-two detection."""
        assert is_power_of_two(1)
        assert is_power_of_two(2)
        assert is_power_of_two(64)
        assert not is_power_of_two(0)
        assert not is_power_of_two(6)
        assert not is_power_of_two(-4)

    def test_complete_round_sizes(self):
        """Complete brackets halve every round."""
        assert complete_round_sizes(1) == [1]
        assert complete_round_sizes(3) == [2, 1]
        assert complete_round_sizes(7) == [4, 2, 1]
        assert complete_round_sizes(15) == [8, 4, 2, 1]

    def test_complete_round_sizes_incomplete(self):
        """Non-complete match counts give no plan."""
        assert complete_round_sizes(0) == []
        assert complete_round_sizes(4) == []
        assert complete_round_sizes(22) == []


class TestPowerOfTwoStrategy:
    """Tests for complete brackets."""

    @pytest.mark.parametrize('k', [1, 2, 3, 4, 5])
    def test_complete_bracket_round_sizes(self, k):
        """n = 2^k teams give k rounds of n/2, n/4, ..., 1 matches."""
        n = 2 ** k
        result = partition_rounds(make_complete_bracket(n))
        assert result['strategy'] == STRATEGY_POWER_OF_TWO
        assert [len(r) for r in result['rounds']] == [n // 2 ** (i + 1) for i in range(k)]
        assert result['warnings'] == []

    def test_slices_follow_input_order(self, eight_team_bracket):
        """Rounds are contiguous slices of the input."""
        result = partition_rounds(eight_team_bracket)
        assert round_ids(result['rounds']) == [
            ['m1', 'm2', 'm3', 'm4'],
            ['m5', 'm6'],
            ['m7'],
        ]

    def test_power_of_two_ignores_party_presence(self):
        """Complete brackets are sliced even when later parties are already known."""
        matches = [make_match('a', 'A', 'B'), make_match('b', 'C', 'D'), make_match('c', 'A', 'C')]
        result = partition_rounds(matches)
        assert round_ids(result['rounds']) == [['a', 'b'], ['c']]

    def test_three_match_bracket(self, three_match_bracket):
        """Two opening matches and a final."""
        result = partition_rounds(three_match_bracket)
        assert round_ids(result['rounds']) == [['m1', 'm2'], ['m3']]


class TestPresenceStrategy:
    """Tests for party-presence reconstruction."""

    def test_three_match_example_by_presence(self, three_match_bracket):
        """The presence heuristic reads the same structure on its own."""
        rounds, reason = _presence_rounds(three_match_bracket)
        assert reason is None
        assert round_ids(rounds) == [['m1', 'm2'], ['m3']]

    def test_uneven_first_round(self):
        """Three opening matches feed ceil(3/2) = 2 matches."""
        matches = [
            make_match('a', 'A', 'B'),
            make_match('b', 'C', 'D'),
            make_match('c', 'E', 'F'),
            make_match('d'),
            make_match('e'),
        ]
        result = partition_rounds(matches)
        assert result['strategy'] == STRATEGY_PRESENCE
        assert round_ids(result['rounds']) == [['a', 'b', 'c'], ['d', 'e']]
        assert result['warnings'] == []

    def test_twelve_team_opening(self):
        """12 opening matches, then 6, 3 and 1."""
        matches = make_complete_bracket(24)[:12] + [make_match(f'x{i}') for i in range(10)]
        result = partition_rounds(matches)
        assert result['strategy'] == STRATEGY_PRESENCE
        assert [len(r) for r in result['rounds']] == [12, 6, 3, 1]

    def test_short_last_round(self):
        """Later matches are sliced until none are left; the last slice may be short."""
        matches = [make_match(f'a{i}', 'A', 'B') for i in range(4)] + [make_match('b')]
        result = partition_rounds(matches)
        assert result['strategy'] == STRATEGY_PRESENCE
        assert round_ids(result['rounds']) == [['a0', 'a1', 'a2', 'a3'], ['b']]
        assert result['warnings'] == []

    def test_bundled_single_fixture(self, data_dir):
        """The shipped 22-match bracket reads as 12 + 6 + 3 + 1."""
        fixture = load_fixture(os.path.join(data_dir, 'single_elimination.yaml'))
        result = partition_rounds(coerce_matches(fixture['matches']))
        assert result['strategy'] == STRATEGY_PRESENCE
        assert [len(r) for r in result['rounds']] == [12, 6, 3, 1]
        assert [m.id for m in result['rounds'][-1]] == ['m22']

    def test_first_round_only(self):
        """All matches decided and no later rounds entered yet."""
        matches = [make_match(f'm{i}', 'A', 'B') for i in range(5)]
        result = partition_rounds(matches)
        assert result['strategy'] == STRATEGY_PRESENCE
        assert [len(r) for r in result['rounds']] == [5]
        assert result['warnings'] == []

    def test_partially_entered_bracket(self):
        """Later rounds may stop before the final is entered."""
        matches = [make_match(f'a{i}', 'A', 'B') for i in range(12)] + [make_match(f'b{i}') for i in range(6)]
        result = partition_rounds(matches)
        assert result['strategy'] == STRATEGY_PRESENCE
        assert [len(r) for r in result['rounds']] == [12, 6]


class TestFallbackStrategy:
    """Tests for structures the heuristics refuse to guess."""

    def _assert_fallback(self, matches):
        result = partition_rounds(matches, section='main')
        assert result['strategy'] == STRATEGY_FALLBACK
        assert round_ids(result['rounds']) == [[m.id for m in matches]]
        assert len(result['warnings']) == 1
        warning = result['warnings'][0]
        assert isinstance(warning, StructuralAmbiguity)
        assert warning.section == 'main'
        assert warning.strategy == STRATEGY_FALLBACK
        return warning

    def test_single_known_party(self):
        """A match with one known party could be a bye or a later round."""
        warning = self._assert_fallback([
            make_match('a', 'A', 'B'),
            make_match('b', 'C'),
            make_match('c'),
            make_match('d'),
        ])
        assert 'single known party are ambiguous: b)' in warning.message

    def test_interleaved_presence(self):
        """Decided matches after undecided ones are ambiguous."""
        self._assert_fallback([
            make_match('a', 'A', 'B'),
            make_match('b'),
            make_match('c', 'C', 'D'),
            make_match('d'),
        ])

    def test_no_first_round(self):
        """Nothing marks round 0."""
        self._assert_fallback([make_match(f'm{i}') for i in range(4)])

    def test_matches_after_final(self):
        """Nothing can follow a one-match round."""
        self._assert_fallback([
            make_match('a', 'A', 'B'),
            make_match('b', 'C', 'D'),
            make_match('c'),
            make_match('d'),
        ])


class TestExplicitPlan:
    """Tests for caller-supplied round sizes."""

    def test_plan_bypasses_heuristics(self):
        """The plan is used even where heuristics would fall back."""
        matches = [make_match(f'm{i}') for i in range(5)]
        result = partition_rounds(matches, round_sizes=[3, 1, 1])
        assert result['strategy'] == STRATEGY_EXPLICIT
        assert round_ids(result['rounds']) == [['m0', 'm1', 'm2'], ['m3'], ['m4']]
        assert result['warnings'] == []

    def test_plan_overrides_power_of_two(self, eight_team_bracket):
        """A plan wins over the complete-bracket split."""
        result = partition_rounds(eight_team_bracket, round_sizes=[6, 1])
        assert [len(r) for r in result['rounds']] == [6, 1]

    def test_plan_as_tuple(self, three_match_bracket):
        """Any sequence of integers is a plan."""
        result = partition_rounds(three_match_bracket, round_sizes=(2, 1))
        assert [len(r) for r in result['rounds']] == [2, 1]

    def test_sum_mismatch(self, three_match_bracket):
        """[2, 2] against three matches is invalid input."""
        with pytest.raises(InvalidInputError, match='sum to 4'):
            partition_rounds(three_match_bracket, round_sizes=[2, 2])

    @pytest.mark.parametrize('plan', [[], [0, 3], [-1, 4], ['2', 1], [2.0, 1], [True, 2], 'abc', {'main': [2, 1]}, 3])
    def test_malformed_plans(self, three_match_bracket, plan):
        """Plans must be non-empty sequences of positive integers."""
        with pytest.raises(InvalidInputError):
            partition_rounds(three_match_bracket, round_sizes=plan)


class TestValidation:
    """Tests for fatal input errors."""

    def test_empty_input(self):
        """No matches is invalid input."""
        with pytest.raises(InvalidInputError):
            partition_rounds([])

    def test_duplicate_ids(self):
        """Ids must be unique within a section."""
        with pytest.raises(InvalidInputError, match="Duplicate match id 'a'"):
            partition_rounds([make_match('a', 'A', 'B'), make_match('b', 'C', 'D'), make_match('a')])

    def test_input_not_mutated(self, eight_team_bracket):
        """Rounds hold the input objects; nothing is changed."""
        before = [(m.id, m.top_party, m.bottom_party) for m in eight_team_bracket]
        before_order = list(eight_team_bracket)
        result = partition_rounds(eight_team_bracket)
        assert eight_team_bracket == before_order
        assert [(m.id, m.top_party, m.bottom_party) for m in eight_team_bracket] == before
        flat = [m for r in result['rounds'] for m in r]
        assert all(a is b for a, b in zip(flat, eight_team_bracket))
