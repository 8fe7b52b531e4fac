"""
Test basic imports and module structure.

These tests ensure all core modules can be imported without errors
and basic functionality is available.
"""

import pytest


@pytest.mark.unit
@pytest.mark.smoke
def test_database_import():
    """Test that database module imports successfully."""
    from data.database import BallotDatabase

    assert BallotDatabase is not None


@pytest.mark.unit
@pytest.mark.smoke
def test_ballot_set_import():
    """Test that ballot set module imports successfully."""
    from data.ballot_set import BallotSet

    assert BallotSet is not None


@pytest.mark.unit
@pytest.mark.smoke
def test_rank_count_import():
    """Test that rank engine module imports successfully."""
    from counting.rank_count import RankCount

    assert RankCount is not None


@pytest.mark.unit
@pytest.mark.smoke
def test_tiebreaker_import():
    """Test that tie breaker module imports successfully."""
    from counting.tiebreaker import TieBreaker

    assert TieBreaker is not None


@pytest.mark.unit
@pytest.mark.smoke
def test_package_exports():
    """Test that the counting package exposes its public API."""
    import counting

    for name in counting.__all__:
        assert hasattr(counting, name), f"counting.{name} missing"
