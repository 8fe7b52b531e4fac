"""Errors raised by the counting engine.

Every error is raised synchronously to the caller. Nothing in the engine
retries, and a tie is never resolved from partial data.
"""


class TieBreakError(Exception):
    """Base class for all counting engine errors."""


class InvalidConfigurationError(TieBreakError, ValueError):
    """Unknown tie-break method, or a request that needs precedence without it."""


class MissingDataError(TieBreakError, LookupError):
    """Input data needed to produce a result is absent."""


class EmptyCountError(MissingDataError):
    """A raw count with no choices was handed to the rank engine."""


class MissingChoiceError(MissingDataError):
    """A choice is missing from the precedence order."""


class InternalInvariantError(TieBreakError, RuntimeError):
    """An internal bound was exceeded; indicates a bug, not bad input."""
