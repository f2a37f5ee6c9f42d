"""Base exceptions and utilities for fretlab.

Every failure the engine can report is a subclass of ``FretlabError`` and
carries the offending input as attributes, so callers can decide how to surface
it (for example, falling back to a fretboard with no highlight).
"""

from __future__ import annotations

from typing import Any, Optional


class MatchException(Exception):
    """Exception raised when pattern matching fails."""

    def __init__(self, value: Any) -> None:
        """Initialize a MatchException with the unmatched value.

        Args:
            value: The value that failed to match any pattern.
        """
        super().__init__(f"Failed to match value: {value}")


class FretlabError(Exception):
    """Base class for all structured engine errors."""

    pass


class InvalidPitch(FretlabError):
    """A chromatic position or octave was outside its valid range."""

    def __init__(self, value: int, field: str = "chromatic position") -> None:
        self.value = value
        self.field = field
        super().__init__(f"Invalid {field}: {value}")


class InvalidScaleDefinition(FretlabError):
    """A scale step pattern was malformed or did not span an octave."""

    def __init__(self, pattern: Any, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid scale pattern {pattern}: {reason}")


class UnknownTuning(FretlabError):
    """A tuning name did not match any registered tuning."""

    def __init__(self, name: Any) -> None:
        self.name = name
        super().__init__(f"Unknown tuning: {name}")


class OutOfRange(FretlabError):
    """A fret range was inverted, negative, or past the configured maximum."""

    def __init__(self, start_fret: int, end_fret: int, max_fret: int) -> None:
        self.start_fret = start_fret
        self.end_fret = end_fret
        self.max_fret = max_fret
        super().__init__(
            f"Invalid fret range [{start_fret}, {end_fret}] (max fret {max_fret})"
        )


class NoFingeringFound(FretlabError):
    """The fingering search exhausted its candidates.

    This is recoverable: callers may retry with a wider span or a different
    starting fret.
    """

    def __init__(self, chord_name: str, start_fret: int, max_span: int) -> None:
        self.chord_name = chord_name
        self.start_fret = start_fret
        self.max_span = max_span
        super().__init__(
            f"No fingering for {chord_name} in frets "
            f"[{start_fret}, {start_fret + max_span}]"
        )


class InvalidSymbol(FretlabError):
    """Note or chord notation text could not be parsed."""

    def __init__(self, text: str, detail: Optional[str] = None) -> None:
        self.text = text
        self.detail = detail
        message = f"Invalid symbol: {text!r}"
        if detail is not None:
            message += f" ({detail})"
        super().__init__(message)
