import logging
from typing import Dict, Iterable, List, Optional

try:
    from .config import TieBreakMethod
    from .exceptions import InvalidConfigurationError
    from .tiebreaker import MethodName, TieBreaker
except ImportError:
    from counting.config import TieBreakMethod
    from counting.exceptions import InvalidConfigurationError
    from counting.tiebreaker import MethodName, TieBreaker

logger = logging.getLogger(__name__)


class ListUntier:
    """
    Orders a whole list of choices, strongest first.

    The primary ranking groups the choices; groups of more than one are
    ordered by the secondary ranking, and anything still level by
    precedence. Precedence must therefore be available: either the
    fallback is enabled, the configured method is precedence, or the
    primary ranking is precedence itself.
    """

    def __init__(self, tiebreaker: TieBreaker):
        self.tiebreaker = tiebreaker

    def _check_precedence_available(self, primary: TieBreakMethod):
        if primary is TieBreakMethod.PRECEDENCE:
            return
        if self.tiebreaker.config.precedence_enabled:
            return
        raise InvalidConfigurationError(
            "TieBreakerFallBackPrecedence must be enabled or TieBreakMethod must be "
            "precedence to untie a list"
        )

    def untie_list(
        self,
        ranking1: MethodName,
        tied: Iterable[str],
        ranking2: Optional[MethodName] = TieBreakMethod.PRECEDENCE,
    ) -> List[str]:
        """
        Order `tied` by `ranking1`, then `ranking2`, then precedence.

        Args:
            ranking1: approval, topcount, borda, borda_all or precedence
            tied: Choices to order
            ranking2: Secondary ranking for groups level under ranking1

        Returns:
            Every choice in `tied`, strongest first
        """
        primary = TieBreakMethod.parse(ranking1)
        secondary = TieBreakMethod.parse(ranking2 or TieBreakMethod.PRECEDENCE)
        self._check_precedence_available(primary)
        for method in (primary, secondary):
            if not method.is_ranking:
                raise InvalidConfigurationError(
                    f"{method.value} cannot order a list; use approval, topcount, "
                    "borda, borda_all or precedence"
                )

        choices = list(dict.fromkeys(tied))
        if not choices:
            return []

        precedence = self.tiebreaker.precedence
        if primary is TieBreakMethod.PRECEDENCE:
            return precedence.sort(choices)

        members = set(choices)
        # Both rankings are computed once, over the whole list.
        groups = self.tiebreaker.ranking(primary, choices).by_rank
        positions = None
        if secondary is not TieBreakMethod.PRECEDENCE:
            positions = self.tiebreaker.ranking(secondary, choices).ordered

        ordered: List[str] = []
        for level in sorted(groups):
            group = [c for c in groups[level] if c in members]
            if len(group) <= 1:
                ordered.extend(group)
            elif positions is None:
                ordered.extend(precedence.sort(group))
            else:
                ordered.extend(self._suborder(positions, group))

        logger.debug(
            f"Untied {len(ordered)} choices by {primary.value}/{secondary.value}"
        )
        return ordered

    def _suborder(self, positions: Dict[str, int], group: List[str]) -> List[str]:
        remaining = {c: positions[c] for c in group}
        order: List[str] = []
        while remaining:
            best = min(remaining.values())
            leaders = [c for c, position in remaining.items() if position == best]
            order.extend(self.tiebreaker.precedence.sort(leaders))
            for choice in leaders:
                del remaining[choice]
        return order

    def untie_active(
        self,
        ranking1: MethodName,
        ranking2: Optional[MethodName] = TieBreakMethod.PRECEDENCE,
    ) -> List[str]:
        """Order every currently active choice."""
        active = self.tiebreaker.counter.get_active_list()
        return self.untie_list(ranking1, active, ranking2)
