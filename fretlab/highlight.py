"""Highlight precedence for fretboard cells.

A fret's pitch can qualify for several highlight categories at once (the
chord root is usually also a scale tone). Exactly one label is shown, chosen
by a fixed total order:

    Root > ChordTone > ScaleNote > Interval > Off
"""

from __future__ import annotations

from enum import Enum, unique
from typing import AbstractSet, Dict, FrozenSet, Iterable, Optional, Set


@unique
class HighlightType(Enum):
    """Highlight category of a fret.

    Values are the labels used by the presentation layer.
    """

    Root = "root"
    ChordTone = "chordTone"
    ScaleNote = "scaleNote"
    Interval = "interval"
    Off = "none"

    @property
    def precedence(self) -> int:
        """Rank of this category; higher wins."""
        return _PRECEDENCE[self]


_PRECEDENCE: Dict[HighlightType, int] = {
    HighlightType.Root: 4,
    HighlightType.ChordTone: 3,
    HighlightType.ScaleNote: 2,
    HighlightType.Interval: 1,
    HighlightType.Off: 0,
}


def resolve_highlight(candidates: Iterable[HighlightType]) -> HighlightType:
    """Pick the single label to show from every category a fret qualifies for.

    Args:
        candidates: Applicable highlight categories, in any order.

    Returns:
        The highest-precedence candidate, or Off if there are none.
    """
    return max(candidates, key=lambda h: h.precedence, default=HighlightType.Off)


def classify_pitch(
    pitch_class: int,
    root_pc: Optional[int],
    chord_pcs: Optional[AbstractSet[int]] = None,
    scale_pcs: Optional[AbstractSet[int]] = None,
) -> FrozenSet[HighlightType]:
    """Collect the highlight categories a pitch class qualifies for.

    Interval only applies when a root is set with neither a chord nor a scale
    active, and the pitch differs from the root.

    Args:
        pitch_class: Chromatic position of the fret's note.
        root_pc: Chromatic position of the active root, if any.
        chord_pcs: Pitch classes of the active chord, if one is active.
        scale_pcs: Pitch classes of the active scale, if one is active.

    Returns:
        The set of applicable categories (possibly empty).
    """
    found: Set[HighlightType] = set()
    if root_pc is not None and pitch_class == root_pc:
        found.add(HighlightType.Root)
    if chord_pcs is not None and pitch_class in chord_pcs:
        found.add(HighlightType.ChordTone)
    if scale_pcs is not None and pitch_class in scale_pcs:
        found.add(HighlightType.ScaleNote)
    if (
        root_pc is not None
        and chord_pcs is None
        and scale_pcs is None
        and pitch_class != root_pc
    ):
        found.add(HighlightType.Interval)
    return frozenset(found)
