"""
Precedence: the tie-break of last resort.

A precedence order is a total order over every choice in the election,
stored as a plain text file with one choice per line, highest precedence
first. Administrators may supply one; otherwise it is generated from the
ballot data so any auditor can reproduce it.
"""

import logging
import tempfile
from collections import deque
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import numpy as np

try:
    from .exceptions import (
        InvalidConfigurationError,
        MissingChoiceError,
        MissingDataError,
    )
    from .rank_count import RankCount
except ImportError:
    from counting.exceptions import (
        InvalidConfigurationError,
        MissingChoiceError,
        MissingDataError,
    )
    from counting.rank_count import RankCount

logger = logging.getLogger(__name__)

DEFAULT_PRECEDENCE_FILE = Path(tempfile.gettempdir()) / "precedence.txt"
DRAW_RANGE = 1_000_000

PathLike = Union[str, Path]


def read_precedence_file(path: PathLike) -> List[str]:
    """
    Read a precedence file.

    Surrounding whitespace is stripped from each line and blank lines are
    skipped. A choice listed twice is rejected.
    """
    precedence_path = Path(path)
    if not precedence_path.exists():
        raise FileNotFoundError(f"Precedence file not found: {precedence_path}")

    order: List[str] = []
    seen = set()
    with open(precedence_path, "r") as f:
        for line_number, line in enumerate(f, 1):
            choice = line.strip()
            if not choice:
                continue
            if choice in seen:
                raise InvalidConfigurationError(
                    f"Choice {choice} appears twice in {precedence_path} "
                    f"(line {line_number})"
                )
            seen.add(choice)
            order.append(choice)
    return order


def write_precedence_file(order: Iterable[str], path: PathLike) -> Path:
    """Write choices one per line with a trailing newline."""
    precedence_path = Path(path)
    precedence_path.parent.mkdir(parents=True, exist_ok=True)
    with open(precedence_path, "w") as f:
        f.write("\n".join(order) + "\n")
    return precedence_path


def generate_precedence(
    choices: Iterable[str], votes_cast: int, out_path: PathLike
) -> List[str]:
    """
    Create a predictable pseudo-random precedence order and persist it.

    The generator is seeded with the number of ballots cast, so the same
    ballot set always yields the same order. Choices are taken in sorted
    order and each draws an integer in [0, 1_000_000); a choice whose draw
    collides with an earlier one goes back to the front of the queue and
    draws again. The order is the choices sorted by their draws.

    numpy's legacy RandomState (MT19937) is used because its stream is
    frozen across numpy releases.

    Args:
        choices: The full choice universe
        votes_cast: Total ballots cast, used as the seed
        out_path: Where to write the precedence file

    Returns:
        The precedence order, highest first
    """
    rng = np.random.RandomState(int(votes_cast))
    queue = deque(sorted(set(choices)))
    drawn: Dict[int, str] = {}
    while queue:
        choice = queue.popleft()
        draw = int(rng.randint(0, DRAW_RANGE))
        if draw in drawn:
            queue.appendleft(choice)
        else:
            drawn[draw] = choice

    precedence = [drawn[draw] for draw in sorted(drawn)]
    write_precedence_file(precedence, out_path)
    logger.info(f"Wrote precedence order for {len(precedence)} choices to {out_path}")
    return precedence


class PrecedenceStore:
    """
    Memoized precedence order for one election run.

    The order is loaded from `path` when one is set, otherwise generated
    into `default_path` on first use; a generated file is written for
    audit but never read back. Changing the path through
    set_path() or calling invalidate() drops the memo.
    """

    def __init__(
        self,
        choices: Iterable[str],
        votes_cast: int,
        path: Optional[PathLike] = None,
        default_path: PathLike = DEFAULT_PRECEDENCE_FILE,
    ):
        self.choices = frozenset(choices)
        self.votes_cast = votes_cast
        self.default_path = Path(default_path)
        self._path = Path(path) if path is not None else None
        self._order: Optional[List[str]] = None
        self._ranks: Optional[Dict[str, int]] = None
        self.generated_path: Optional[Path] = None

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def is_cached(self) -> bool:
        return self._order is not None

    def set_path(self, path: Optional[PathLike]):
        self._path = Path(path) if path is not None else None
        self.invalidate()

    def invalidate(self):
        """Drop the memoized order; the next query reloads or regenerates it."""
        if self._order is not None:
            logger.debug("Cleared cached precedence order")
        self._order = None
        self._ranks = None

    def _remember(self, order: List[str]) -> List[str]:
        self._order = list(order)
        self._ranks = {choice: rank for rank, choice in enumerate(order, 1)}
        return list(order)

    def load(self, path: Optional[PathLike] = None) -> List[str]:
        """
        Load and memoize the precedence order from a file.

        Every choice in the election must appear, not only the active ones.
        """
        if path is not None and Path(path) != self._path:
            self.set_path(path)
        if self._path is None:
            raise InvalidConfigurationError("No precedence file set")

        order = read_precedence_file(self._path)
        listed = set(order)
        for choice in sorted(self.choices):
            if choice not in listed:
                raise MissingChoiceError(
                    f"Choice {choice} missing from precedence file {self._path}"
                )
        logger.debug(f"Loaded precedence order from {self._path}")
        return self._remember(order)

    def generate(self, out_path: Optional[PathLike] = None) -> List[str]:
        """
        Generate the order from the ballot count and write it out.

        The written file is a record for auditors, never a load source:
        after invalidate() the order is generated again, which yields the
        same order for the same ballots even if another run has since
        overwritten the file.
        """
        target = Path(out_path) if out_path is not None else self.default_path
        order = generate_precedence(self.choices, self.votes_cast, target)
        self.generated_path = target
        logger.info(
            f"Generated fallback tie-breaker precedence order: {', '.join(order)}"
        )
        return self._remember(order)

    def order(self) -> List[str]:
        """The precedence order, highest first."""
        if self._order is not None:
            return list(self._order)
        if self._path is not None:
            return self.load()
        return self.generate()

    def sort(self, choices: Iterable[str]) -> List[str]:
        """Return `choices` in precedence order, highest first."""
        if self._ranks is None:
            self.order()
        ranks = self._ranks
        unique = list(dict.fromkeys(choices))
        unknown = [c for c in unique if c not in ranks]
        if unknown:
            raise MissingChoiceError(
                f"Choices missing from precedence: {sorted(unknown)}"
            )
        return sorted(unique, key=ranks.__getitem__)

    def resolve(self, tied: Iterable[str]) -> str:
        """The highest-precedence member of `tied`; precedence never ties."""
        ordered = self.sort(tied)
        if not ordered:
            raise MissingDataError("No choices given to resolve by precedence")
        return ordered[0]

    def ranking(self, active: Iterable[str]) -> RankCount:
        """Precedence over `active` expressed as a RankCount."""
        return RankCount.from_list(self.sort(active))
