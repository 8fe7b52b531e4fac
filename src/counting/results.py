from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class TieBreakTrace:
    """Audit trail of a tie resolution: a one-line summary and the detail table."""

    terse: str = ""
    verbose: str = ""

    def __str__(self) -> str:
        if self.verbose:
            return f"{self.terse}\n{self.verbose}"
        return self.terse


@dataclass(frozen=True)
class TieBreakResult:
    """
    Outcome of a tie resolution.

    Exactly one of `winner` or `tied` is populated: a resolved tie names
    its winner, an unresolved one lists the choices still tied.
    """

    winner: Optional[str] = None
    tied: Tuple[str, ...] = ()
    trace: TieBreakTrace = field(default_factory=TieBreakTrace, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "tied", tuple(self.tied))
        if (self.winner is None) == (not self.tied):
            raise ValueError(
                "TieBreakResult needs exactly one of winner or tied, "
                f"got winner={self.winner!r}, tied={self.tied!r}"
            )

    @property
    def is_tie(self) -> bool:
        return self.winner is None

    @property
    def choices(self) -> List[str]:
        """The surviving choices: the winner alone, or everything still tied."""
        if self.winner is not None:
            return [self.winner]
        return list(self.tied)
