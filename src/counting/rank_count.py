import logging
from typing import Dict, Iterable, List, Mapping

import numpy as np
import pandas as pd

try:
    from .exceptions import EmptyCountError, InternalInvariantError
    from .results import TieBreakResult
except ImportError:
    from counting.exceptions import EmptyCountError, InternalInvariantError
    from counting.results import TieBreakResult

logger = logging.getLogger(__name__)

TABLE_COLUMNS = ["Rank", "Choice", "Votes"]


def to_native_number(value):
    """Convert numpy scalars (as returned by DuckDB/pandas) to Python numbers."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def _markdown_table(rows: List[List[str]]) -> str:
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = []
    for index, row in enumerate(rows):
        cells = [cell.ljust(width) for cell, width in zip(row, widths)]
        lines.append("| " + " | ".join(cells) + " |")
        if index == 0:
            lines.append("|" + "|".join(":" + "-" * (w + 1) for w in widths) + "|")
    return "\n".join(lines) + "\n"


class RankCount:
    """
    Ordered rank view over a raw count (choice -> vote total).

    Choices with exactly equal totals share a rank; ranks are contiguous
    starting at 1 for the most votes. Equality is exact, no tolerance is
    applied, so callers scaling vote values should prefer Fraction or
    Decimal weights over floats.
    """

    def __init__(self, raw_count: Mapping[str, float]):
        if not raw_count:
            raise EmptyCountError("Cannot rank an empty count")

        self._raw_count = {c: to_native_number(v) for c, v in raw_count.items()}
        self._ordered: Dict[str, int] = {}
        self._by_rank: Dict[int, List[str]] = {}

        remaining = dict(self._raw_count)
        max_position = len(remaining)
        position = 0
        while remaining:
            position += 1
            if position > max_position:
                raise InternalInvariantError(
                    f"Rank assignment exceeded {max_position} positions"
                )
            best = max(remaining.values())
            group = sorted(c for c, v in remaining.items() if v == best)
            for choice in group:
                self._ordered[choice] = position
                del remaining[choice]
            if group:
                self._by_rank[position] = group

        last = max(self._by_rank)
        self._top = list(self._by_rank[1])
        self._bottom = list(self._by_rank[last])

    @classmethod
    def rank(cls, raw_count: Mapping[str, float]) -> "RankCount":
        return cls(raw_count)

    @classmethod
    def from_list(cls, choices: Iterable[str]) -> "RankCount":
        """
        Build a ranking whose order is the order of `choices`, first strongest.

        Args:
            choices: Choices in descending strength; duplicates are ignored

        Returns:
            RankCount with no ties
        """
        ordered = list(dict.fromkeys(choices))
        size = len(ordered)
        return cls({choice: size - index for index, choice in enumerate(ordered)})

    @property
    def raw_count(self) -> Dict[str, float]:
        return dict(self._raw_count)

    @property
    def ordered(self) -> Dict[str, int]:
        """Choice -> rank position."""
        return dict(self._ordered)

    @property
    def by_rank(self) -> Dict[int, List[str]]:
        """Rank position -> choices at that position."""
        return {rank: list(group) for rank, group in self._by_rank.items()}

    @property
    def top(self) -> List[str]:
        return list(self._top)

    @property
    def bottom(self) -> List[str]:
        return list(self._bottom)

    @property
    def tie(self) -> bool:
        return len(self._top) > 1

    def count_votes(self):
        """Total vote mass across all choices."""
        return sum(self._raw_count.values())

    def leader(self) -> TieBreakResult:
        """The single top choice, or the tied top group."""
        if len(self._top) == 1:
            return TieBreakResult(winner=self._top[0])
        return TieBreakResult(tied=tuple(self._top))

    def to_frame(self) -> pd.DataFrame:
        """Rank, choice and votes as a DataFrame sorted by rank then choice."""
        rows = [
            {"rank": rank, "choice": choice, "votes": self._raw_count[choice]}
            for rank in sorted(self._by_rank)
            for choice in sorted(self._by_rank[rank])
        ]
        return pd.DataFrame(rows, columns=["rank", "choice", "votes"])

    def rank_table(self) -> str:
        """Markdown table of Rank | Choice | Votes for audit logs."""
        rows = [list(TABLE_COLUMNS)]
        for record in self.to_frame().itertuples(index=False):
            rows.append([str(record.rank), str(record.choice), str(record.votes)])
        return _markdown_table(rows)

    def __len__(self) -> int:
        return len(self._ordered)

    def __repr__(self) -> str:
        return f"RankCount(top={self._top}, positions={len(self._by_rank)})"


def safe_rank_table(ranking: RankCount) -> str:
    """Render a rank table for a trace; a rendering failure must not fail the count."""
    try:
        return ranking.rank_table()
    except Exception as e:
        logger.warning(f"Could not render rank table for trace: {e}")
        return "(rank table unavailable)"
