"""
Ranking functions over a ballot set.

These are the counts an election method consults when breaking ties:
first-choice (top count), approval and Borda. Each returns a RankCount
restricted to an active set of choices.
"""

import logging
from typing import FrozenSet, Iterable, List, Mapping, Optional, Union

try:
    from ..data.ballot_set import BallotSet
    from .exceptions import MissingChoiceError
    from .rank_count import RankCount
except ImportError:
    from counting.exceptions import MissingChoiceError
    from counting.rank_count import RankCount
    from data.ballot_set import BallotSet

logger = logging.getLogger(__name__)

ActiveSet = Union[Mapping[str, object], Iterable[str]]


def as_choice_set(active: ActiveSet) -> FrozenSet[str]:
    """Normalize an active set given as choice -> truthy mapping or iterable."""
    if isinstance(active, Mapping):
        return frozenset(c for c, flag in active.items() if flag)
    return frozenset(active)


class BallotCounter:
    """Counts a BallotSet against the currently active choices."""

    def __init__(self, ballot_set: BallotSet, active: Optional[ActiveSet] = None):
        self.ballot_set = ballot_set
        self._active = frozenset(ballot_set.choices)
        if active is not None:
            self.set_active(active)

    @property
    def choices(self) -> FrozenSet[str]:
        """Full choice universe of the election."""
        return self.ballot_set.choices

    @property
    def active(self) -> FrozenSet[str]:
        return self._active

    def set_active(self, active: ActiveSet):
        choices = as_choice_set(active)
        unknown = choices - self.ballot_set.choices
        if unknown:
            raise MissingChoiceError(
                f"Unknown choices in active set: {sorted(unknown)}"
            )
        self._active = choices
        logger.debug(f"Active set now {sorted(choices)}")

    def get_active_list(self) -> List[str]:
        return sorted(self._active)

    def _resolve_active(self, active: Optional[ActiveSet]) -> FrozenSet[str]:
        if active is None:
            return self._active
        return as_choice_set(active)

    def top_count(self, active: Optional[ActiveSet] = None) -> RankCount:
        """Rank choices by ballots on which they are the highest active choice."""
        active = self._resolve_active(active)
        counts = {choice: 0 for choice in active}
        for ballot in self.ballot_set.ballots.values():
            for choice in ballot.votes:
                if choice in active:
                    counts[choice] += ballot.count
                    break
        return RankCount.rank(counts)

    def approval(self, active: Optional[ActiveSet] = None) -> RankCount:
        """Rank choices by ballots that rank them at all."""
        active = self._resolve_active(active)
        counts = {choice: 0 for choice in active}
        for ballot in self.ballot_set.ballots.values():
            for choice in ballot.votes:
                if choice in active:
                    counts[choice] += ballot.count
        return RankCount.rank(counts)

    def borda(self, active: Optional[ActiveSet] = None) -> RankCount:
        """
        Rank choices by Borda score.

        Ballots are first reduced to their active choices. On a ballot
        ranking k of them, the choice at position i scores k + 1 - i;
        unranked choices score nothing.
        """
        active = self._resolve_active(active)
        counts = {choice: 0 for choice in active}
        for ballot in self.ballot_set.ballots.values():
            ranked = [c for c in ballot.votes if c in active]
            depth = len(ranked)
            for position, choice in enumerate(ranked, 1):
                counts[choice] += (depth + 1 - position) * ballot.count
        return RankCount.rank(counts)
