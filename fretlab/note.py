"""Note names, spelling and pitch arithmetic for fretlab.

This module provides the note calculus every other part of the engine builds
on: canonical note spellings, enharmonic equivalence, transposition by
semitones with octave carry, and interval naming relative to a root.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto, unique
from typing import Dict, FrozenSet, List, Tuple

from fretlab import constants
from fretlab.base import InvalidPitch, MatchException


@unique
class DisplayMode(Enum):
    """How a note name is spelled: with a sharp, a flat, or no accidental."""

    Sharp = auto()
    Flat = auto()
    Natural = auto()


@unique
class NoteName(Enum):
    """Enumeration of the seventeen canonical note spellings.

    Values are the conventional text spellings. The five black-key pitch
    classes each have a sharp and a flat spelling.
    """

    C = "C"
    Cs = "C#"
    Db = "Db"
    D = "D"
    Ds = "D#"
    Eb = "Eb"
    E = "E"
    F = "F"
    Fs = "F#"
    Gb = "Gb"
    G = "G"
    Gs = "G#"
    Ab = "Ab"
    A = "A"
    As = "A#"
    Bb = "Bb"
    B = "B"

    @property
    def chromatic(self) -> int:
        """Get the pitch class of this spelling.

        Returns:
            The chromatic position (0-11, C=0).
        """
        return _CHROMATIC_LOOKUP[self]

    @property
    def display_mode(self) -> DisplayMode:
        """Get the accidental used by this spelling.

        Returns:
            Sharp, Flat or Natural depending on the spelling.
        """
        if self.value.endswith("#"):
            return DisplayMode.Sharp
        elif self.value.endswith("b"):
            return DisplayMode.Flat
        else:
            return DisplayMode.Natural

    @property
    def letter(self) -> str:
        """The natural letter this spelling is based on."""
        return self.value[0]


_NATURALS: Dict[str, int] = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}


def _build_chromatic_lookup() -> Dict[NoteName, int]:
    d: Dict[NoteName, int] = {}
    for n in NoteName:
        offset = _NATURALS[n.value[0]]
        if n.value.endswith("#"):
            offset += 1
        elif n.value.endswith("b"):
            offset -= 1
        d[n] = offset % constants.MAX_NOTES
    return d


_CHROMATIC_LOOKUP = _build_chromatic_lookup()

NAME_LOOKUP: Dict[str, NoteName] = {n.value: n for n in NoteName}
"""Lookup from text spelling (e.g. "C#") to note name."""


def _build_spelling_lookup() -> Dict[int, Tuple[NoteName, ...]]:
    """Build a lookup table from pitch class to all canonical spellings.

    Returns:
        Dictionary mapping integers (0-11) to spellings in enum order.
    """
    d: Dict[int, List[NoteName]] = {}
    for n in NoteName:
        d.setdefault(_CHROMATIC_LOOKUP[n], []).append(n)
    assert len(d) == constants.MAX_NOTES
    return {k: tuple(v) for k, v in d.items()}


SPELLING_LOOKUP = _build_spelling_lookup()
"""Lookup table from pitch class (0-11) to its canonical spellings."""


def name_for_chromatic(position: int, preference: DisplayMode) -> NoteName:
    """Choose the spelling of a pitch class.

    Natural pitch classes always use their natural spelling; black keys use
    the flat spelling when ``preference`` is Flat and the sharp one otherwise.

    Args:
        position: Pitch class (0-11).
        preference: Preferred accidental for black keys.

    Returns:
        The chosen note name.

    Raises:
        InvalidPitch: If the position is outside 0-11.
    """
    if position < 0 or position >= constants.MAX_NOTES:
        raise InvalidPitch(position)
    spellings = SPELLING_LOOKUP[position]
    if len(spellings) == 1:
        return spellings[0]
    for name in spellings:
        if preference == DisplayMode.Flat and name.display_mode == DisplayMode.Flat:
            return name
        elif preference != DisplayMode.Flat and name.display_mode == DisplayMode.Sharp:
            return name
    raise MatchException(preference)


@dataclass(frozen=True)
class Note:
    """A spelled pitch: a note name in a specific octave.

    Equality and hashing follow the spelling, so ``C#4`` and ``Db4`` are
    different values; use ``pitch_equals`` or ``pitch_key`` to compare sound.
    """

    name: NoteName
    """The spelling of this note."""
    octave: int
    """Scientific pitch octave (middle C is C4)."""

    @property
    def chromatic_position(self) -> int:
        """Pitch class of this note (0-11, C=0)."""
        return self.name.chromatic

    @property
    def display_mode(self) -> DisplayMode:
        """Accidental used by this note's spelling."""
        return self.name.display_mode

    @property
    def enharmonic_names(self) -> Tuple[NoteName, ...]:
        """All canonical spellings of this pitch class, including this one."""
        return SPELLING_LOOKUP[self.chromatic_position]

    @property
    def midi(self) -> int:
        """MIDI note number of this pitch (C4 = 60)."""
        return (self.octave + 1) * constants.MAX_NOTES + self.chromatic_position

    @property
    def pitch_key(self) -> Tuple[int, int]:
        """Spelling-independent identity: (octave, pitch class)."""
        return (self.octave, self.chromatic_position)

    def pitch_equals(self, other: Note) -> bool:
        """Check if two notes sound the same regardless of spelling.

        Args:
            other: The note to compare with.

        Returns:
            True if both notes share octave and chromatic position.
        """
        return self.pitch_key == other.pitch_key

    def __str__(self) -> str:
        return f"{self.name.value}{self.octave}"


def make_note(name: NoteName, octave: int = constants.DEFAULT_OCTAVE) -> Note:
    """Construct a note, checking the octave range.

    Args:
        name: The spelling of the note.
        octave: Octave between 0 and 10 inclusive.

    Returns:
        The new note.

    Raises:
        InvalidPitch: If the octave is out of range.
    """
    if octave < constants.MIN_OCTAVE or octave > constants.MAX_OCTAVE:
        raise InvalidPitch(octave, field="octave")
    return Note(name, octave)


def note_from_chromatic(
    position: int,
    preference: DisplayMode = DisplayMode.Sharp,
    octave: int = constants.DEFAULT_OCTAVE,
) -> Note:
    """Create a note from a pitch class.

    Args:
        position: Pitch class (0-11).
        preference: Accidental to use for black keys.
        octave: Octave of the resulting note.

    Returns:
        The spelled note.

    Raises:
        InvalidPitch: If the position is outside 0-11 or the octave is
            outside 0-10.
    """
    return make_note(name_for_chromatic(position, preference), octave)


def note_from_midi(value: int, preference: DisplayMode = DisplayMode.Sharp) -> Note:
    """Create a note from a MIDI note number (C4 = 60)."""
    octave, position = divmod(value, constants.MAX_NOTES)
    return Note(name_for_chromatic(position, preference), octave - 1)


def _accidental_preference(note: Note) -> DisplayMode:
    if note.display_mode == DisplayMode.Flat:
        return DisplayMode.Flat
    else:
        return DisplayMode.Sharp


def add_interval(note: Note, semitones: int) -> Note:
    """Transpose a note by a number of semitones.

    The octave carries across C, in either direction. Black-key results keep
    the accidental style of the input note (flat stays flat, anything else
    becomes sharp). Defined for every integer input.

    Args:
        note: The note to transpose.
        semitones: Semitones to add (negative transposes down).

    Returns:
        The transposed note.
    """
    octave_shift, position = divmod(
        note.chromatic_position + semitones, constants.MAX_NOTES
    )
    return Note(
        name_for_chromatic(position, _accidental_preference(note)),
        note.octave + octave_shift,
    )


def respell(note: Note, preference: DisplayMode) -> Note:
    """Spell the same pitch with a different accidental preference."""
    return Note(name_for_chromatic(note.chromatic_position, preference), note.octave)


_LETTERS = "CDEFGAB"


def spell_on_letter(note: Note, root: Note, letter_steps: int) -> Note:
    """Spell a note on the letter ``letter_steps`` above the root's letter.

    The third of C is spelled on E and the seventh on B, so a minor third is
    Eb rather than D#. Pitches that would need a spelling outside the
    canonical seventeen (E#, Cb, double accidentals) fall back to the root's
    accidental preference.

    Args:
        note: The pitch to spell; its pitch class and octave are kept.
        root: The reference note, e.g. a scale or chord root.
        letter_steps: Letters above the root (degree minus one).

    Returns:
        The respelled note.
    """
    letter = _LETTERS[(_LETTERS.index(root.name.letter) + letter_steps) % 7]
    natural = NAME_LOOKUP[letter]
    diff = (note.chromatic_position - natural.chromatic) % constants.MAX_NOTES
    if diff == 0:
        return Note(natural, note.octave)
    suffix = {1: "#", constants.MAX_NOTES - 1: "b"}.get(diff)
    spelled = NAME_LOOKUP.get(letter + suffix) if suffix is not None else None
    if spelled is not None:
        return Note(spelled, note.octave)
    else:
        return respell(note, root.display_mode)


def enharmonic_equivalents(note: Note) -> FrozenSet[NoteName]:
    """Get every canonical spelling of a note's pitch class.

    Args:
        note: The note to inspect.

    Returns:
        A set of note names including the note's own spelling. Black keys
        yield both the sharp and the flat spelling.
    """
    return frozenset(SPELLING_LOOKUP[note.chromatic_position])


def interval_between(a: Note, b: Note) -> int:
    """Get the upward semitone distance from ``a`` to ``b`` modulo the octave.

    Args:
        a: The lower reference note (typically a root).
        b: The other note.

    Returns:
        A value in 0-11.
    """
    return (b.chromatic_position - a.chromatic_position) % constants.MAX_NOTES


# Semitones from root -> (name, abbreviation)
_INTERVAL_NAMES: Dict[int, Tuple[str, str]] = {
    0: ("root", "R"),
    1: ("minor second", "b2"),
    2: ("major second", "2"),
    3: ("minor third", "b3"),
    4: ("major third", "3"),
    5: ("perfect fourth", "4"),
    6: ("tritone", "b5"),
    7: ("perfect fifth", "5"),
    8: ("minor sixth", "b6"),
    9: ("major sixth", "6"),
    10: ("minor seventh", "b7"),
    11: ("major seventh", "7"),
}


def interval_name(semitones: int) -> str:
    """Name a simple interval, reducing compound intervals into the octave."""
    return _INTERVAL_NAMES[semitones % constants.MAX_NOTES][0]


def interval_abbreviation(semitones: int) -> str:
    """Short label for a simple interval, e.g. ``"b3"``."""
    return _INTERVAL_NAMES[semitones % constants.MAX_NOTES][1]
