"""
Grand Junction (Bucklin) counting.

Grand Junction is simple to hand count and resolves nearly every tie, so
it works well as a tie breaker. The tie-breaker variant adds each
ballot's next ranking to the tied choices every round and drops any
choice trailing the leader, until one remains or ballots run out.
"""

import logging
from typing import Iterable, List, Optional

try:
    from ..data.ballot_set import BallotSet
    from .ballot_counts import ActiveSet, as_choice_set
    from .exceptions import InvalidConfigurationError, MissingDataError
    from .precedence import PrecedenceStore
    from .rank_count import RankCount, safe_rank_table
    from .results import TieBreakResult, TieBreakTrace
except ImportError:
    from counting.ballot_counts import ActiveSet, as_choice_set
    from counting.exceptions import InvalidConfigurationError, MissingDataError
    from counting.precedence import PrecedenceStore
    from counting.rank_count import RankCount, safe_rank_table
    from counting.results import TieBreakResult, TieBreakTrace
    from data.ballot_set import BallotSet

logger = logging.getLogger(__name__)


class GrandJunctionResolver:
    """Grand Junction tie breaker and standalone count over a ballot set."""

    def __init__(
        self, ballot_set: BallotSet, precedence: Optional[PrecedenceStore] = None
    ):
        self.ballot_set = ballot_set
        self.precedence = precedence

    def resolve(
        self, tied_choices: Iterable[str], fallback: bool = False
    ) -> TieBreakResult:
        """
        Break a tie among `tied_choices`.

        Args:
            tied_choices: Choices to separate
            fallback: Resolve a tie surviving every round by precedence

        Returns:
            TieBreakResult with the winner, or the choices still tied
        """
        tied = sorted(dict.fromkeys(tied_choices))
        if not tied:
            raise MissingDataError("Grand Junction needs at least one tied choice")

        log: List[str] = [f"Grand Junction tie breaker: {', '.join(tied)}"]
        if len(tied) == 1:
            return TieBreakResult(winner=tied[0], trace=TieBreakTrace(log[0], ""))

        current = {choice: 0 for choice in tied}
        ballots = self.ballot_set.ballots.values()
        for round_number in range(1, self.ballot_set.max_depth + 1):
            for ballot in ballots:
                pick = ballot.choice_at(round_number)
                if pick in current:
                    current[pick] += ballot.count

            best = max(current.values())
            round_log = [
                f"Round {round_number}: "
                + ", ".join(f"{c}: {current[c]}" for c in sorted(current))
            ]
            for choice in sorted(current):
                if current[choice] < best:
                    del current[choice]
                    round_log.append(f"  {choice} eliminated")
            logger.debug("\n".join(round_log))
            log.extend(round_log)

            if len(current) == 1:
                winner = next(iter(current))
                log.append(f"Tie breaker won by: {winner}")
                logger.info(
                    f"Grand Junction resolved tie in round {round_number}: {winner}"
                )
                return TieBreakResult(
                    winner=winner,
                    trace=TieBreakTrace(
                        f"Grand Junction winner: {winner}", "\n".join(log)
                    ),
                )

        remaining = tuple(sorted(current))
        if fallback:
            if self.precedence is None:
                raise InvalidConfigurationError(
                    "Precedence fallback requested without a precedence store"
                )
            winner = self.precedence.resolve(remaining)
            log.append(
                f"Applying precedence fallback to {', '.join(remaining)}: {winner}"
            )
            logger.info(
                f"Grand Junction tie {remaining} resolved by precedence: {winner}"
            )
            return TieBreakResult(
                winner=winner,
                trace=TieBreakTrace(
                    f"Grand Junction winner (precedence): {winner}", "\n".join(log)
                ),
            )

        log.append(f"Still tied: {', '.join(remaining)}")
        logger.info(f"Grand Junction left tie unresolved: {remaining}")
        return TieBreakResult(
            tied=remaining,
            trace=TieBreakTrace(
                f"Grand Junction tie: {', '.join(remaining)}", "\n".join(log)
            ),
        )

    def run_election(self, active: Optional[ActiveSet] = None) -> TieBreakResult:
        """
        Standard Grand Junction count over the active choices.

        Each round adds the next active ranking of every ballot to the
        totals. The first round in which any choice holds a majority of
        the ballots ranking an active choice elects the top total. When
        rankings run out, the top total wins, or the top group is
        returned as a tie.
        """
        if active is None:
            active_set = self.ballot_set.choices
        else:
            active_set = as_choice_set(active)
        if not active_set:
            raise MissingDataError("Grand Junction needs at least one active choice")

        reduced = []
        for ballot in self.ballot_set.ballots.values():
            ranked = [c for c in ballot.votes if c in active_set]
            if ranked:
                reduced.append((ranked, ballot.count))

        voting = sum(count for _, count in reduced)
        majority = int(voting // 2) + 1
        depth = max((len(ranked) for ranked, _ in reduced), default=0)
        logger.info(f"Grand Junction count: {voting} ballots, majority {majority}")

        totals = {choice: 0 for choice in active_set}
        ranking = RankCount.rank(totals)
        log: List[str] = [f"Majority: {majority}"]
        for round_number in range(1, depth + 1):
            for ranked, count in reduced:
                if len(ranked) >= round_number:
                    totals[ranked[round_number - 1]] += count
            ranking = RankCount.rank(totals)
            log.append(f"Round {round_number}")
            log.append(safe_rank_table(ranking))
            leading_total = totals[ranking.top[0]]
            if leading_total >= majority:
                logger.info(f"Majority reached in round {round_number}")
                break

        leader = ranking.leader()
        summary = (
            f"Grand Junction winner: {leader.winner}"
            if leader.winner is not None
            else f"Grand Junction tie: {', '.join(leader.tied)}"
        )
        return TieBreakResult(
            winner=leader.winner,
            tied=leader.tied,
            trace=TieBreakTrace(summary, "\n".join(log)),
        )
