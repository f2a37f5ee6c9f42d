"""Chord fingering search for fretlab.

Finds playable voicings of a set of chord tones in a tuning by a bounded
depth-first search over per-string choices (a fret inside a window, or
muted). Partial assignments that already need an impossible hand shape are
pruned, and enumeration stops once a result cap is reached, so the search
always terminates quickly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto, unique
from typing import FrozenSet, List, Optional, Sequence, Tuple, Union

from fretlab import constants
from fretlab.base import NoFingeringFound, OutOfRange
from fretlab.chord import ChordFunction, ChordTone, Difficulty
from fretlab.note import Note, add_interval
from fretlab.tuning import Tuning, TuningName, get_tuning

Assignment = Tuple[Optional[int], ...]
"""Per-string fret choice, lowest string first; None means muted."""


@unique
class VoicingType(Enum):
    """Sound characteristics of a voicing."""

    Open = auto()  # Uses at least one open string
    Closed = auto()  # Sounding notes within an octave
    Spread = auto()  # Sounding notes span more than an octave
    Cluster = auto()  # Within an octave, with a semitone clash


@dataclass(frozen=True)
class ChordPosition:
    """A specific fingering of a chord on the neck.

    Per-string tuples run from the lowest string to the highest, matching
    the order of ``Tuning.string_notes``.
    """

    name: str
    """Identifier such as "Open", "Barre 3rd fret" or "Position 5"."""
    start_fret: int
    """Lowest sounding fret (0 if an open string sounds)."""
    finger_positions: Assignment
    """Fret per string; 0 is open, None is muted."""
    finger_numbers: Tuple[Optional[int], ...]
    """Finger per string: 1-4 index to pinky, 0 open, None muted."""
    voicing_type: VoicingType
    barre_position: Optional[int] = None
    """Fret held by a first-finger barre, if any."""

    @property
    def muted_strings(self) -> Tuple[bool, ...]:
        return tuple(f is None for f in self.finger_positions)

    @property
    def muted_count(self) -> int:
        return sum(1 for f in self.finger_positions if f is None)

    @property
    def is_barre(self) -> bool:
        return self.barre_position is not None

    @property
    def span(self) -> int:
        """Distance between the lowest and highest fretted (non-open) frets."""
        fretted = [f for f in self.finger_positions if f is not None and f > 0]
        return max(fretted) - min(fretted) if fretted else 0

    def sounding_notes(self, tuning: Tuning) -> Tuple[Optional[Note], ...]:
        """Notes produced on each string, or None for muted strings."""
        return tuple(
            None if fret is None else add_interval(open_note, fret)
            for open_note, fret in zip(tuning.string_notes, self.finger_positions)
        )

    @property
    def fret_range(self) -> Optional[Tuple[int, int]]:
        """Lowest and highest sounding frets, or None if every string is muted."""
        sounding = [f for f in self.finger_positions if f is not None]
        if not sounding:
            return None
        return (min(sounding), max(sounding))

    @property
    def difficulty(self) -> Difficulty:
        """Rough playing difficulty.

        Barres and shapes needing every finger are advanced. Open shapes that
        stay within the first few frets and need few fingers are for beginners.
        """
        fingers = {f for f in self.finger_numbers if f is not None and f > 0}
        if self.is_barre or len(fingers) > constants.BEGINNER_MAX_FINGERS:
            return Difficulty.Advanced
        frets = self.fret_range
        if (
            frets is not None
            and frets[1] <= constants.BEGINNER_MAX_FRET
            and 0 in self.finger_positions
        ):
            return Difficulty.Beginner
        else:
            return Difficulty.Intermediate


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _barre_fret(assignment: Assignment) -> Optional[int]:
    """Fret held by a first-finger barre, if the shape needs one.

    A barre is only assumed when there are more fretted notes than fingers,
    and then lies across the lowest fret if two or more strings share it.
    """
    fretted = [f for f in assignment if f is not None and f > 0]
    if len(fretted) <= constants.MAX_FINGERS:
        return None
    low = min(fretted)
    return low if fretted.count(low) >= 2 else None


def _fingers_needed(assignment: Assignment) -> int:
    fretted = [f for f in assignment if f is not None and f > 0]
    barre = _barre_fret(assignment)
    if barre is None:
        return len(fretted)
    else:
        return 1 + sum(1 for f in fretted if f != barre)


def _has_conflict(assignment: Assignment, max_span: int) -> bool:
    """Check whether the strings chosen so far cannot be held at once.

    A conflict is a fretted span wider than ``max_span`` frets or more
    fretted notes than fingers. Both only grow as strings are added, so a
    conflicting partial assignment can be pruned.
    """
    fretted = [f for f in assignment if f is not None and f > 0]
    if not fretted:
        return False
    if max(fretted) - min(fretted) > max(max_span - 1, 0):
        return True
    return _fingers_needed(assignment) > constants.MAX_FINGERS


def _open_under_barre(assignment: Assignment) -> bool:
    """Check for an open string between the outer strings of a barre."""
    barre = _barre_fret(assignment)
    if barre is None:
        return False
    covered = [i for i, f in enumerate(assignment) if f == barre]
    return any(assignment[i] == 0 for i in range(covered[0], covered[-1] + 1))


def _finger_numbers(assignment: Assignment) -> Tuple[Optional[int], ...]:
    """Assign fingers: barre on the first finger, then low fret to high."""
    barre = _barre_fret(assignment)
    numbers: List[Optional[int]] = [None if f is None else 0 for f in assignment]
    next_finger = 1
    if barre is not None:
        for i, f in enumerate(assignment):
            if f == barre:
                numbers[i] = 1
        next_finger = 2
    others = sorted(
        (f, i)
        for i, f in enumerate(assignment)
        if f is not None and f > 0 and f != barre
    )
    for _, i in others:
        numbers[i] = next_finger
        next_finger += 1
    return tuple(numbers)


def _voicing_type(assignment: Assignment, open_notes: Sequence[Note]) -> VoicingType:
    if any(f == 0 for f in assignment):
        return VoicingType.Open
    pitches = sorted(
        open_note.midi + f
        for open_note, f in zip(open_notes, assignment)
        if f is not None
    )
    if pitches[-1] - pitches[0] > constants.MAX_NOTES:
        return VoicingType.Spread
    elif any(b - a <= 1 for a, b in zip(pitches, pitches[1:])):
        return VoicingType.Cluster
    else:
        return VoicingType.Closed


def _make_position(assignment: Assignment, open_notes: Sequence[Note]) -> ChordPosition:
    sounding = [f for f in assignment if f is not None]
    start = min(sounding)
    fretted = [f for f in sounding if f > 0]
    barre = _barre_fret(assignment)
    if 0 in sounding and (not fretted or max(fretted) <= constants.DEFAULT_MAX_SPAN):
        name = "Open"
    elif barre is not None:
        name = f"Barre {_ordinal(barre)} fret"
    else:
        name = f"Position {start}"
    return ChordPosition(
        name=name,
        start_fret=start,
        finger_positions=assignment,
        finger_numbers=_finger_numbers(assignment),
        voicing_type=_voicing_type(assignment, open_notes),
        barre_position=barre,
    )


def _rank_key(
    assignment: Assignment, open_notes: Sequence[Note], root_pc: int
) -> Tuple[int, int, int, int, Tuple[int, ...]]:
    """Fewest muted strings, lowest start, root in the bass, narrowest span."""
    sounding = [(i, f) for i, f in enumerate(assignment) if f is not None]
    muted = len(assignment) - len(sounding)
    start = min(f for _, f in sounding)
    bass_index, bass_fret = sounding[0]
    bass_pc = (open_notes[bass_index].chromatic_position + bass_fret) % 12
    fretted = [f for _, f in sounding if f > 0]
    span = max(fretted) - min(fretted) if fretted else 0
    frets = tuple(-1 if f is None else f for f in assignment)
    return (muted, start, 0 if bass_pc == root_pc else 1, span, frets)


def _chord_label(chord_tones: Sequence[ChordTone]) -> str:
    return "-".join(t.note.name.value for t in chord_tones)


def find_fingerings(
    chord_tones: Sequence[ChordTone],
    tuning: Union[Tuning, TuningName, str],
    max_span: int = constants.DEFAULT_MAX_SPAN,
    start_fret: int = 0,
    result_cap: int = constants.DEFAULT_RESULT_CAP,
    limit: int = constants.DEFAULT_FINGERING_LIMIT,
) -> Tuple[ChordPosition, ...]:
    """Search for playable positions of a chord.

    Each string is either muted or fretted within
    ``[start_fret, start_fret + max_span]`` (fret 0 counts as the open
    string). A position is valid when every chord tone pitch class sounds on
    some string, every sounding note is a chord tone, enough strings sound,
    and the fretted notes can be held by one hand.

    Args:
        chord_tones: Tones of the chord; all must sound.
        tuning: The tuning to search in.
        max_span: Width of the fret window above ``start_fret``.
        start_fret: Lowest fret of the window.
        result_cap: Stop enumerating after this many valid positions.
        limit: Maximum number of ranked positions to return.

    Returns:
        Positions ranked by fewest muted strings, then lowest starting fret,
        then root in the bass, then narrowest span.

    Raises:
        OutOfRange: If the window is negative or starts past the last fret.
        UnknownTuning: If the tuning name is not recognized.
        NoFingeringFound: If no valid position exists in the window.
    """
    label = _chord_label(chord_tones)
    if start_fret < 0 or max_span < 0 or start_fret > constants.MAX_FRET:
        raise OutOfRange(start_fret, start_fret + max_span, constants.MAX_FRET)
    if not isinstance(tuning, Tuning):
        tuning = get_tuning(tuning)
    if len(chord_tones) == 0:
        raise NoFingeringFound(label, start_fret, max_span)
    open_notes = tuning.string_notes
    string_count = len(open_notes)
    required: FrozenSet[int] = frozenset(
        t.note.chromatic_position for t in chord_tones
    )
    roots = [t for t in chord_tones if t.function == ChordFunction.Root]
    root_pc = (roots[0] if roots else chord_tones[0]).note.chromatic_position
    min_sounding = min(constants.MIN_SOUNDING_STRINGS, string_count)
    end_fret = min(start_fret + max_span, constants.MAX_FRET)

    choices: List[List[Optional[int]]] = []
    for open_note in open_notes:
        frets: List[Optional[int]] = [
            f
            for f in range(start_fret, end_fret + 1)
            if (open_note.chromatic_position + f) % 12 in required
        ]
        choices.append(frets + [None])

    found: List[Assignment] = []
    visited = 0
    stack: List[Assignment] = [()]
    while stack and len(found) < result_cap:
        partial = stack.pop()
        visited += 1
        if len(partial) == string_count:
            sounding = [
                (open_notes[i].chromatic_position + f) % 12
                for i, f in enumerate(partial)
                if f is not None
            ]
            if (
                len(sounding) >= min_sounding
                and required.issubset(sounding)
                and not _open_under_barre(partial)
            ):
                found.append(partial)
            continue
        for choice in reversed(choices[len(partial)]):
            candidate = partial + (choice,)
            if not _has_conflict(candidate, max_span):
                stack.append(candidate)

    logging.debug(
        "fingering search for %s in %s from fret %d: %d visited, %d found",
        label,
        tuning.name.value,
        start_fret,
        visited,
        len(found),
    )
    if not found:
        raise NoFingeringFound(label, start_fret, max_span)
    found.sort(key=lambda a: _rank_key(a, open_notes, root_pc))
    return tuple(_make_position(a, open_notes) for a in found[:limit])
