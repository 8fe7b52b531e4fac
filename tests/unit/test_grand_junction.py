"""
Unit tests for the Grand Junction resolver.
"""

import pytest

from counting import (
    GrandJunctionResolver,
    InvalidConfigurationError,
    MissingDataError,
    PrecedenceStore,
)
from data.ballot_set import BallotSet


@pytest.mark.unit
class TestGrandJunctionTieBreaker:
    """The tie-breaker variant."""

    def test_strict_leader_wins_round_one(self):
        ballot_set = BallotSet.from_records(
            [{"votes": ["A", "B"], "count": 3}, {"votes": ["B", "A"], "count": 1}]
        )

        result = GrandJunctionResolver(ballot_set).resolve(["A", "B"])

        assert result.winner == "A"
        assert "Round 1: A: 3, B: 1" in result.trace.verbose
        assert "Round 2" not in result.trace.verbose

    def test_second_round_decides(self, split_ballots):
        result = GrandJunctionResolver(split_ballots).resolve(["B", "A"])

        assert result.winner == "B"
        assert "Round 1: A: 3, B: 3" in result.trace.verbose
        assert "Round 2: A: 6, B: 8" in result.trace.verbose
        assert "A eliminated" in result.trace.verbose

    def test_three_way_tie(self, split_ballots):
        result = GrandJunctionResolver(split_ballots).resolve(["A", "B", "C"])

        assert result.winner == "B"
        assert "C eliminated" in result.trace.verbose

    def test_symmetric_ballots_stay_tied(self, symmetric_ballots):
        result = GrandJunctionResolver(symmetric_ballots).resolve(["A", "B"])

        assert result.is_tie
        assert result.tied == ("A", "B")
        assert "Round 2: A: 4, B: 4" in result.trace.verbose

    def test_symmetric_ballots_resolved_by_precedence(
        self, symmetric_ballots, precedence_file
    ):
        store = PrecedenceStore(
            symmetric_ballots.choices,
            symmetric_ballots.votes_cast,
            path=precedence_file(["B", "A", "C"]),
        )

        result = GrandJunctionResolver(symmetric_ballots, store).resolve(
            ["A", "B"], fallback=True
        )

        assert result.winner == "B"
        assert "precedence" in result.trace.verbose

    def test_fallback_without_store(self, symmetric_ballots):
        with pytest.raises(InvalidConfigurationError):
            GrandJunctionResolver(symmetric_ballots).resolve(["A", "B"], fallback=True)

    def test_single_choice_wins(self, split_ballots):
        assert GrandJunctionResolver(split_ballots).resolve(["D"]).winner == "D"

    def test_no_choices(self, split_ballots):
        with pytest.raises(MissingDataError):
            GrandJunctionResolver(split_ballots).resolve([])

    def test_repeat_calls_identical(self, split_ballots):
        resolver = GrandJunctionResolver(split_ballots)

        assert resolver.resolve(["A", "B"]) == resolver.resolve(["A", "B"])

    def test_routed_through_tiebreaker(
        self, symmetric_ballots, make_tiebreaker, precedence_file
    ):
        path = precedence_file(["B", "A", "C"])
        tiebreaker = make_tiebreaker(
            symmetric_ballots,
            method="grandjunction",
            fallback_precedence=True,
            precedence_file=str(path),
        )

        assert tiebreaker.break_tie("grandjunction", None, ["A", "B"]) == ["B"]


@pytest.mark.unit
class TestGrandJunctionElection:
    """The standalone count."""

    def test_majority_reached_in_second_round(self, split_ballots):
        result = GrandJunctionResolver(split_ballots).run_election()

        assert result.winner == "B"
        assert result.trace.verbose.startswith("Majority: 5")

    def test_tie_after_majority(self, symmetric_ballots):
        result = GrandJunctionResolver(symmetric_ballots).run_election()

        assert result.tied == ("A", "B")

    def test_restricted_to_active(self, split_ballots):
        result = GrandJunctionResolver(split_ballots).run_election(["C", "D"])

        assert result.winner == "C"

    def test_active_mapping_skips_falsy_entries(self, split_ballots):
        active = {"A": False, "B": 0, "C": True, "D": 1}

        result = GrandJunctionResolver(split_ballots).run_election(active)

        assert result.winner == "C"
        assert "| A" not in result.trace.verbose
        assert "| B" not in result.trace.verbose
