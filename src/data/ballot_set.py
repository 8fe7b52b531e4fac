import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

try:
    from ..counting.exceptions import MissingChoiceError
    from ..counting.rank_count import to_native_number
    from .database import BallotDatabase
except ImportError:
    from counting.exceptions import MissingChoiceError
    from counting.rank_count import to_native_number
    from data.database import BallotDatabase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ballot:
    """One preference list and the number of identical ballots carrying it."""

    votes: Tuple[str, ...]
    count: float = 1

    @property
    def depth(self) -> int:
        return len(self.votes)

    def choice_at(self, rank: int) -> Optional[str]:
        """The choice at 1-indexed `rank`, or None past the end of the ballot."""
        if 1 <= rank <= len(self.votes):
            return self.votes[rank - 1]
        return None


@dataclass(frozen=True)
class BallotSet:
    """
    Read-only ballot data for one election.

    Attributes:
        choices: Every choice in the election (the precedence universe)
        ballots: Ranking -> Ballot; identical rankings share one entry
        votes_cast: Number of physical ballots cast
    """

    choices: FrozenSet[str]
    ballots: Mapping[Tuple[str, ...], Ballot] = field(default_factory=dict)
    votes_cast: int = 0

    @property
    def max_depth(self) -> int:
        """Deepest ranking on any ballot."""
        return max((b.depth for b in self.ballots.values()), default=0)

    @classmethod
    def from_rankings(
        cls,
        rankings: Iterable[Tuple[Tuple[str, ...], float]],
        choices: Optional[Iterable[str]] = None,
        votes_cast: Optional[int] = None,
    ) -> "BallotSet":
        """
        Collapse (ranking, count) pairs into a BallotSet.

        Args:
            rankings: Pairs of ordered choices and ballot count
            choices: Full choice universe; defaults to every ranked choice
            votes_cast: Physical ballot total; defaults to the sum of counts
        """
        tally: Counter = Counter()
        for votes, count in rankings:
            tally[tuple(dict.fromkeys(votes))] += to_native_number(count)

        ranked = {c for votes in tally for c in votes}
        universe = frozenset(choices) if choices is not None else frozenset(ranked)
        unknown = ranked - universe
        if unknown:
            raise MissingChoiceError(
                f"Ballots rank choices outside the election: {sorted(unknown)}"
            )

        ballots: Dict[Tuple[str, ...], Ballot] = {}
        for votes, count in tally.items():
            ballots[votes] = Ballot(votes=votes, count=count)

        if votes_cast is None:
            votes_cast = int(sum(tally.values()))

        logger.debug(
            f"Built ballot set: {len(universe)} choices, "
            f"{len(ballots)} distinct rankings, "
            f"{votes_cast} ballots cast"
        )
        return cls(choices=universe, ballots=ballots, votes_cast=votes_cast)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping],
        choices: Optional[Iterable[str]] = None,
        votes_cast: Optional[int] = None,
    ) -> "BallotSet":
        """
        Build a BallotSet from dicts shaped like {"votes": [...], "count": n}.

        `count` defaults to 1.
        """
        rankings = ((tuple(r["votes"]), r.get("count", 1)) for r in records)
        return cls.from_rankings(rankings, choices=choices, votes_cast=votes_cast)

    @classmethod
    def from_database(cls, db: BallotDatabase) -> "BallotSet":
        """
        Read the normalized ballots_long table into a BallotSet.

        The choice universe comes from the candidates table when present,
        so candidates nobody ranked still take part in precedence.
        """
        prefs = db.query(
            """
            SELECT
                BallotID,
                candidate_name,
                rank_position
            FROM ballots_long
            ORDER BY BallotID, rank_position
        """
        )

        choices = None
        if db.table_exists("candidates"):
            candidates = db.query(
                "SELECT candidate_name FROM candidates ORDER BY candidate_id"
            )
            choices = candidates["candidate_name"].tolist()

        rankings = []
        for _, group in prefs.groupby("BallotID"):
            votes = tuple(group.sort_values("rank_position")["candidate_name"])
            rankings.append((votes, 1))

        logger.info(f"Loaded {len(rankings)} ballots from {db.db_path}")
        return cls.from_rankings(rankings, choices=choices, votes_cast=len(rankings))
