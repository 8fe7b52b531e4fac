"""
Shared pytest configuration and fixtures for ranked-elections-tiebreak.

This module provides common test fixtures and utilities used across
all test modules.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from counting import BallotCounter, TieBreakConfig, TieBreaker  # noqa: E402
from data.ballot_set import BallotSet  # noqa: E402
from data.database import BallotDatabase  # noqa: E402


@pytest.fixture
def split_ballots():
    """
    Four choices where A and B split first choices but B has more depth.

    First choices: A=3, B=3, C=2, D=1 (9 ballots cast).
    """
    return BallotSet.from_records(
        [
            {"votes": ["A", "B"], "count": 3},
            {"votes": ["B", "A"], "count": 3},
            {"votes": ["C", "B"], "count": 2},
            {"votes": ["D"], "count": 1},
        ]
    )


@pytest.fixture
def symmetric_ballots():
    """A and B mirror each other at every depth; C has one bullet vote."""
    return BallotSet.from_records(
        [
            {"votes": ["A", "B"], "count": 2},
            {"votes": ["B", "A"], "count": 2},
            {"votes": ["C"], "count": 1},
        ]
    )


@pytest.fixture
def precedence_file(tmp_path):
    """Write a precedence file and return its path."""

    def _write(order):
        path = tmp_path / "precedence.txt"
        path.write_text("\n".join(order) + "\n")
        return path

    return _write


@pytest.fixture
def make_tiebreaker(tmp_path):
    """Build a TieBreaker whose generated precedence lands in tmp_path."""

    def _make(ballot_set, **config):
        counter = BallotCounter(ballot_set)
        return TieBreaker(
            counter,
            TieBreakConfig(**config),
            default_precedence_path=tmp_path / "generated_precedence.txt",
        )

    return _make


@pytest.fixture
def ballot_db():
    """In-memory DuckDB with the ballot tables created."""
    db = BallotDatabase(":memory:", read_only=False)
    db.create_ballot_tables()
    yield db
    db.close()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (medium speed, database required)",
    )
    config.addinivalue_line(
        "markers",
        "golden: marks tests as golden dataset validation (hand-computed results)",
    )
    config.addinivalue_line(
        "markers", "invariant: marks tests as mathematical invariant validation"
    )
    config.addinivalue_line(
        "markers", "smoke: marks tests as smoke tests (basic functionality check)"
    )
