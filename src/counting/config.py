import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

try:
    from .exceptions import InvalidConfigurationError
except ImportError:
    from counting.exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)


class TieBreakMethod(str, Enum):
    """Named tie-break strategies."""

    APPROVAL = "approval"
    TOPCOUNT = "topcount"
    BORDA = "borda"
    BORDA_ALL = "borda_all"
    GRANDJUNCTION = "grandjunction"
    PRECEDENCE = "precedence"
    ALL = "all"
    NONE = "none"

    @classmethod
    def parse(cls, name: Union[str, "TieBreakMethod"]) -> "TieBreakMethod":
        """
        Resolve a method name, case-insensitively.

        Args:
            name: Method name such as 'approval' or 'TopCount', or a member

        Returns:
            The matching TieBreakMethod
        """
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise InvalidConfigurationError(f"undefined tiebreak method {name!r}")
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise InvalidConfigurationError(
                f"undefined tiebreak method {name!r}"
            ) from None

    @property
    def is_ranking(self) -> bool:
        """True for methods that produce a full ranking usable by untie_list."""
        return self in _RANKING_METHODS


_RANKING_METHODS = frozenset(
    {
        TieBreakMethod.APPROVAL,
        TieBreakMethod.TOPCOUNT,
        TieBreakMethod.BORDA,
        TieBreakMethod.BORDA_ALL,
        TieBreakMethod.PRECEDENCE,
    }
)

# External names first, then the snake_case aliases.
_KEY_ALIASES = {
    "TieBreakMethod": "method",
    "TieBreakerFallBackPrecedence": "fallback_precedence",
    "PrecedenceFile": "precedence_file",
    "method": "method",
    "fallback_precedence": "fallback_precedence",
    "precedence_file": "precedence_file",
}


@dataclass(frozen=True)
class TieBreakConfig:
    """Tie-break settings for one election run."""

    method: TieBreakMethod = TieBreakMethod.NONE
    fallback_precedence: bool = False
    precedence_file: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "method", TieBreakMethod.parse(self.method))
        object.__setattr__(self, "fallback_precedence", bool(self.fallback_precedence))
        if self.precedence_file is not None:
            object.__setattr__(self, "precedence_file", str(self.precedence_file))

    @property
    def precedence_enabled(self) -> bool:
        """Whether precedence can serve as the resolver of last resort."""
        return self.fallback_precedence or self.method is TieBreakMethod.PRECEDENCE

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "TieBreakConfig":
        """
        Build a config from a mapping using either the external
        (TieBreakMethod, TieBreakerFallBackPrecedence, PrecedenceFile)
        or snake_case keys.
        """
        if not isinstance(payload, Mapping):
            raise InvalidConfigurationError("tie-break config must be a mapping")

        fields = {}
        for key, value in payload.items():
            field = _KEY_ALIASES.get(key)
            if field is None:
                raise InvalidConfigurationError(f"unknown tie-break config key: {key}")
            if field in fields:
                raise InvalidConfigurationError(
                    f"tie-break config key given twice: {field}"
                )
            fields[field] = value
        return cls(**fields)


def load_config(path: Union[str, Path]) -> TieBreakConfig:
    """
    Load a tie-break configuration from a JSON file.

    Args:
        path: Path to a JSON object with the tie-break keys

    Returns:
        Validated TieBreakConfig
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        payload = json.load(f)

    config = TieBreakConfig.from_mapping(payload)
    logger.info(
        f"Loaded tie-break config from {config_path}: method={config.method.value}, "
        f"fallback_precedence={config.fallback_precedence}"
    )
    return config
