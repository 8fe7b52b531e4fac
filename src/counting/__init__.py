"""
Rank counting and tie resolution for ranked-choice elections.

This module provides:
- RankCount: orders raw vote totals into rank groups
- TieBreaker: resolves ties with a configurable strategy
- GrandJunctionResolver: Grand Junction (Bucklin) tie breaker and count
- PrecedenceStore: reproducible tie-break of last resort
- ListUntier: orders whole lists of choices

Ties must be resolved consistently and reproducibly, so every resolution
returns a TieBreakResult carrying the trace of how it was reached.
"""

from .ballot_counts import BallotCounter
from .config import TieBreakConfig, TieBreakMethod, load_config
from .exceptions import (
    EmptyCountError,
    InternalInvariantError,
    InvalidConfigurationError,
    MissingChoiceError,
    MissingDataError,
    TieBreakError,
)
from .grand_junction import GrandJunctionResolver
from .precedence import PrecedenceStore, generate_precedence
from .rank_count import RankCount
from .results import TieBreakResult, TieBreakTrace
from .tiebreaker import TieBreaker
from .untie import ListUntier

__all__ = [
    "BallotCounter",
    "EmptyCountError",
    "GrandJunctionResolver",
    "InternalInvariantError",
    "InvalidConfigurationError",
    "ListUntier",
    "MissingChoiceError",
    "MissingDataError",
    "PrecedenceStore",
    "RankCount",
    "TieBreakConfig",
    "TieBreakError",
    "TieBreakMethod",
    "TieBreakResult",
    "TieBreakTrace",
    "TieBreaker",
    "generate_precedence",
    "load_config",
]
