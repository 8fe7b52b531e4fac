"""
Tie-break strategy routing.

A TieBreaker owns the tie-break configuration and the precedence store
for one election run, and dispatches each tie to the configured strategy:

    approval       approval count among the tied choices
    topcount       first-choice count among the tied choices
    borda          Borda count over the active set
    borda_all      Borda count over every choice in the election
    grandjunction  Grand Junction rounds over the ballots
    precedence     the precedence order; always resolves
    all            eliminate every tied choice
    none           eliminate none of them
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional, Union

try:
    from .ballot_counts import ActiveSet, BallotCounter, as_choice_set
    from .config import TieBreakConfig, TieBreakMethod
    from .exceptions import InvalidConfigurationError, MissingDataError
    from .grand_junction import GrandJunctionResolver
    from .precedence import DEFAULT_PRECEDENCE_FILE, PrecedenceStore
    from .rank_count import RankCount, safe_rank_table
    from .results import TieBreakResult, TieBreakTrace
except ImportError:
    from counting.ballot_counts import ActiveSet, BallotCounter, as_choice_set
    from counting.config import TieBreakConfig, TieBreakMethod
    from counting.exceptions import InvalidConfigurationError, MissingDataError
    from counting.grand_junction import GrandJunctionResolver
    from counting.precedence import DEFAULT_PRECEDENCE_FILE, PrecedenceStore
    from counting.rank_count import RankCount, safe_rank_table
    from counting.results import TieBreakResult, TieBreakTrace

logger = logging.getLogger(__name__)

MethodName = Union[str, TieBreakMethod]


class TieBreaker:
    """Resolves ties among choices for one election run."""

    def __init__(
        self,
        counter: BallotCounter,
        config: Optional[TieBreakConfig] = None,
        default_precedence_path: Union[str, Path] = DEFAULT_PRECEDENCE_FILE,
    ):
        """
        Args:
            counter: Ranking functions over the election's ballots
            config: Tie-break settings; defaults to method 'none' without fallback
            default_precedence_path: Where to generate a precedence file
                when the config names none
        """
        self.counter = counter
        self.config = config or TieBreakConfig()
        self.precedence = PrecedenceStore(
            counter.choices,
            counter.ballot_set.votes_cast,
            path=self.config.precedence_file,
            default_path=default_precedence_path,
        )
        self.grand_junction = GrandJunctionResolver(counter.ballot_set, self.precedence)
        logger.info(
            f"Tie breaker configured: method={self.config.method.value}, "
            f"fallback_precedence={self.config.fallback_precedence}"
        )

    def reconfigure(self, **changes):
        """
        Replace configuration fields.

        Changing the precedence file or the fallback flag invalidates the
        memoized precedence order.
        """
        new_config = replace(self.config, **changes)
        if new_config.precedence_file != self.config.precedence_file:
            self.precedence.set_path(new_config.precedence_file)
        elif new_config.fallback_precedence != self.config.fallback_precedence:
            self.precedence.invalidate()
        self.config = new_config
        logger.info(f"Tie breaker reconfigured: {changes}")

    def ranking(
        self, method: MethodName, active: Optional[ActiveSet] = None
    ) -> RankCount:
        """
        The ranking a method consults, restricted to `active`.

        borda_all ignores `active` and counts every choice in the election.
        """
        method = TieBreakMethod.parse(method)
        if method is TieBreakMethod.APPROVAL:
            return self.counter.approval(active)
        if method is TieBreakMethod.TOPCOUNT:
            return self.counter.top_count(active)
        if method is TieBreakMethod.BORDA:
            return self.counter.borda(active)
        if method is TieBreakMethod.BORDA_ALL:
            return self.counter.borda(self.counter.choices)
        if method is TieBreakMethod.PRECEDENCE:
            choices = self.counter.active if active is None else as_choice_set(active)
            return self.precedence.ranking(choices)
        raise InvalidConfigurationError(f"{method.value} does not produce a ranking")

    def break_tie(
        self,
        method: Optional[MethodName],
        active: Optional[ActiveSet],
        tied_choices: Iterable[str],
    ) -> List[str]:
        """
        Reduce a tie with the named method (the configured one when None).

        Returns:
            [] for 'all', the tied choices for 'none', a single winner, or
            the choices still tied
        """
        if method is None:
            method = self.config.method
        method = TieBreakMethod.parse(method)
        tied = list(dict.fromkeys(tied_choices))
        if method is TieBreakMethod.NONE:
            return tied
        if method is TieBreakMethod.ALL:
            return []
        return self.resolve_tie(method, active, tied).choices

    def resolve_tie(
        self,
        method: MethodName,
        active: Optional[ActiveSet],
        tied_choices: Iterable[str],
    ) -> TieBreakResult:
        """
        Resolve a tie and keep the trace of how it was done.

        Among the tied choices, those with the highest score under the
        method's ranking survive. If more than one survives and the
        precedence fallback is enabled, precedence picks among them.
        """
        method = TieBreakMethod.parse(method)
        tied = list(dict.fromkeys(tied_choices))
        if not tied:
            raise MissingDataError("No tied choices given")

        if method in (TieBreakMethod.ALL, TieBreakMethod.NONE):
            raise InvalidConfigurationError(
                f"Tie break method {method.value} eliminates rather than resolves"
            )

        if method is TieBreakMethod.GRANDJUNCTION:
            return self.grand_junction.resolve(
                tied, fallback=self.config.fallback_precedence
            )

        if method is TieBreakMethod.PRECEDENCE:
            winner = self.precedence.resolve(tied)
            logger.info(f"Tie {tied} resolved by precedence: {winner}")
            return TieBreakResult(
                winner=winner,
                trace=TieBreakTrace(
                    f"Tie Breaker precedence: {', '.join(tied)}\nwinner(s): {winner}"
                ),
            )

        if method in (TieBreakMethod.APPROVAL, TieBreakMethod.TOPCOUNT):
            ranked = self.ranking(method, tied)
        else:
            ranked = self.ranking(method, active)

        counted = ranked.raw_count
        highest = max(counted.get(c, 0) for c in tied)
        leaders = [c for c in tied if counted.get(c, 0) == highest]
        terse = (
            f"Tie Breaker {method.value}: {', '.join(tied)}\n"
            f"winner(s): {', '.join(leaders)}"
        )
        verbose = safe_rank_table(ranked)
        logger.debug(f"{terse}\n{verbose}")

        if len(leaders) == 1:
            return TieBreakResult(
                winner=leaders[0], trace=TieBreakTrace(terse, verbose)
            )

        if self.config.fallback_precedence:
            winner = self.precedence.resolve(leaders)
            logger.info(
                f"Tie {leaders} after {method.value} resolved by precedence: {winner}"
            )
            return TieBreakResult(
                winner=winner,
                trace=TieBreakTrace(f"{terse}\nprecedence fallback: {winner}", verbose),
            )

        logger.info(f"Tie break {method.value} left {leaders} tied")
        return TieBreakResult(tied=tuple(leaders), trace=TieBreakTrace(terse, verbose))
