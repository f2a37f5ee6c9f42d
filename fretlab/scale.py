"""Musical scale definitions and scale generation for fretlab.

Scales are defined by step patterns (semitone gaps between consecutive
degrees) that span exactly one octave. Generating a scale from a root yields
spelled notes and labelled degrees; membership is tested by pitch class, so a
generated scale covers every octave of the fretboard.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from fretlab import constants
from fretlab.base import InvalidScaleDefinition, InvalidSymbol, MatchException
from fretlab.chord import Chord, ChordQuality, build_chord
from fretlab.note import (
    Note,
    add_interval,
    interval_abbreviation,
    interval_between,
    interval_name,
    spell_on_letter,
)


@unique
class ScaleType(Enum):
    """Closed set of named scales and modes."""

    Major = "major"
    NaturalMinor = "natural minor"
    HarmonicMinor = "harmonic minor"
    MelodicMinor = "melodic minor"
    Dorian = "dorian"
    Phrygian = "phrygian"
    Lydian = "lydian"
    Mixolydian = "mixolydian"
    Locrian = "locrian"
    PentatonicMajor = "pentatonic major"
    PentatonicMinor = "pentatonic minor"
    Blues = "blues"
    WholeTone = "whole tone"
    Chromatic = "chromatic"


@dataclass(frozen=True)
class ModeInfo:
    """Relationship of a mode to the scale it is derived from."""

    parent_scale: ScaleType
    mode_number: int
    """1-based mode number within the parent scale."""

    @property
    def starting_degree(self) -> int:
        """Degree of the parent scale the mode starts on."""
        return self.mode_number


@dataclass(frozen=True)
class ScaleDefinition:
    """Static description of a named scale."""

    scale_type: ScaleType
    """The scale this definition describes."""
    steps: Tuple[int, ...]
    """Semitone gaps between consecutive degrees, summing to an octave."""
    aliases: Tuple[str, ...] = ()
    """Alternative names, e.g. "Ionian" for the major scale."""
    mode: Optional[ModeInfo] = None
    """Mode information for scales that are rotations of another scale."""
    characteristic_intervals: Tuple[str, ...] = ()
    """Intervals that give the scale its colour."""
    genres: Tuple[str, ...] = ()
    """Styles the scale is commonly heard in."""
    common_progressions: Tuple[Tuple[str, ...], ...] = ()
    """Progressions of diatonic triads as Roman numerals, e.g. ("ii", "V", "I")."""


@dataclass(frozen=True)
class ScaleDegree:
    """A labelled degree of a generated scale."""

    degree: int
    """1-based position of the degree in the scale."""
    name: str
    """Interval name relative to the root, e.g. "minor third"."""
    abbreviation: str
    """Short label, e.g. "R", "b3" or "#4"."""
    interval_from_root: int
    """Semitones from the root (0-11)."""


@dataclass(frozen=True)
class Scale:
    """A scale generated from a root and a step pattern."""

    scale_type: Optional[ScaleType]
    """The named scale, or None for a custom step pattern."""
    root: Note
    steps: Tuple[int, ...]
    degrees: Tuple[ScaleDegree, ...]
    notes: Tuple[Note, ...]

    @property
    def name(self) -> str:
        """Human-readable name such as "C major"."""
        kind = self.scale_type.value if self.scale_type is not None else "custom"
        return f"{self.root.name.value} {kind}"

    @property
    def pitch_classes(self) -> FrozenSet[int]:
        """Chromatic positions of every note in the scale."""
        return frozenset(n.chromatic_position for n in self.notes)

    @property
    def definition(self) -> Optional[ScaleDefinition]:
        """The named definition, or None for a custom step pattern."""
        if self.scale_type is None:
            return None
        return SCALE_LOOKUP[self.scale_type]

    @property
    def genres(self) -> Tuple[str, ...]:
        definition = self.definition
        return definition.genres if definition is not None else ()

    @property
    def common_progressions(self) -> Tuple[Tuple[str, ...], ...]:
        definition = self.definition
        return definition.common_progressions if definition is not None else ()


_MAJOR_OFFSETS = (0, 2, 4, 5, 7, 9, 11)

SCALES: List[ScaleDefinition] = [
    ScaleDefinition(
        ScaleType.Major,
        (2, 2, 1, 2, 2, 2, 1),
        aliases=("Ionian",),
        mode=ModeInfo(ScaleType.Major, 1),
        characteristic_intervals=("major third", "major seventh"),
        genres=("pop", "rock", "country", "classical"),
        common_progressions=(
            ("I", "IV", "V"),
            ("I", "V", "vi", "IV"),
            ("ii", "V", "I"),
            ("I", "vi", "IV", "V"),
        ),
    ),
    ScaleDefinition(
        ScaleType.NaturalMinor,
        (2, 1, 2, 2, 1, 2, 2),
        aliases=("Aeolian", "Minor"),
        mode=ModeInfo(ScaleType.Major, 6),
        characteristic_intervals=("minor third", "minor sixth"),
        genres=("rock", "metal", "pop", "classical"),
        common_progressions=(
            ("i", "iv", "v"),
            ("i", "VI", "III", "VII"),
            ("i", "VII", "VI"),
        ),
    ),
    ScaleDefinition(
        ScaleType.HarmonicMinor,
        (2, 1, 2, 2, 1, 3, 1),
        characteristic_intervals=("minor sixth", "major seventh"),
        genres=("classical", "metal", "flamenco"),
        common_progressions=(("i", "iv", "V"), ("ii°", "V", "i"), ("i", "VI", "V")),
    ),
    ScaleDefinition(
        ScaleType.MelodicMinor,
        (2, 1, 2, 2, 2, 2, 1),
        aliases=("Jazz Minor",),
        characteristic_intervals=("minor third", "major sixth"),
        genres=("jazz", "classical"),
        common_progressions=(("i", "IV", "V"), ("ii", "V", "i")),
    ),
    ScaleDefinition(
        ScaleType.Dorian,
        (2, 1, 2, 2, 2, 1, 2),
        mode=ModeInfo(ScaleType.Major, 2),
        characteristic_intervals=("major sixth",),
        genres=("jazz", "funk", "rock"),
        common_progressions=(("i", "IV"), ("i", "VII", "IV")),
    ),
    ScaleDefinition(
        ScaleType.Phrygian,
        (1, 2, 2, 2, 1, 2, 2),
        mode=ModeInfo(ScaleType.Major, 3),
        characteristic_intervals=("minor second",),
        genres=("flamenco", "metal"),
        common_progressions=(("i", "II"), ("i", "II", "III")),
    ),
    ScaleDefinition(
        ScaleType.Lydian,
        (2, 2, 2, 1, 2, 2, 1),
        mode=ModeInfo(ScaleType.Major, 4),
        characteristic_intervals=("tritone", "major seventh"),
        genres=("jazz", "film"),
        common_progressions=(("I", "II"), ("I", "II", "iii")),
    ),
    ScaleDefinition(
        ScaleType.Mixolydian,
        (2, 2, 1, 2, 2, 1, 2),
        aliases=("Dominant",),
        mode=ModeInfo(ScaleType.Major, 5),
        characteristic_intervals=("minor seventh",),
        genres=("blues", "rock", "folk"),
        common_progressions=(("I", "VII", "IV"), ("I", "v", "IV")),
    ),
    ScaleDefinition(
        ScaleType.Locrian,
        (1, 2, 2, 1, 2, 2, 2),
        mode=ModeInfo(ScaleType.Major, 7),
        characteristic_intervals=("minor second", "tritone"),
        genres=("metal", "jazz"),
        common_progressions=(("i°", "II"), ("i°", "iv", "II")),
    ),
    ScaleDefinition(
        ScaleType.PentatonicMajor,
        (2, 2, 3, 2, 3),
        aliases=("Major Pentatonic",),
        genres=("country", "folk", "pop"),
    ),
    ScaleDefinition(
        ScaleType.PentatonicMinor,
        (3, 2, 2, 3, 2),
        aliases=("Minor Pentatonic",),
        genres=("blues", "rock"),
    ),
    ScaleDefinition(
        ScaleType.Blues,
        (3, 2, 1, 1, 3, 2),
        aliases=("Minor Blues",),
        characteristic_intervals=("tritone",),
        genres=("blues", "rock", "jazz"),
    ),
    ScaleDefinition(ScaleType.WholeTone, (2, 2, 2, 2, 2, 2), genres=("jazz",)),
    ScaleDefinition(ScaleType.Chromatic, (1,) * 12),
]
"""Every named scale, in display order."""

SCALE_LOOKUP: Dict[ScaleType, ScaleDefinition] = {s.scale_type: s for s in SCALES}
"""Lookup from scale type to its definition."""


def _build_name_lookup() -> Dict[str, ScaleType]:
    d: Dict[str, ScaleType] = {}
    for s in SCALES:
        d[s.scale_type.value] = s.scale_type
        for alias in s.aliases:
            d[alias.lower()] = s.scale_type
    return d


_NAME_LOOKUP = _build_name_lookup()
assert len(SCALE_LOOKUP) == len(ScaleType)


def get_scale_definition(scale_type: ScaleType) -> ScaleDefinition:
    """Get the static definition of a named scale."""
    return SCALE_LOOKUP[scale_type]


def find_scale_type(name: str) -> Optional[ScaleType]:
    """Resolve a scale name or alias (case-insensitive).

    Args:
        name: A name such as "major", "Ionian" or "Minor Pentatonic".

    Returns:
        The scale type if found, None otherwise.
    """
    return _NAME_LOOKUP.get(name.strip().lower())


def _validate_steps(pattern: Sequence[int]) -> Tuple[int, ...]:
    steps = tuple(pattern)
    if len(steps) == 0:
        raise InvalidScaleDefinition(steps, "pattern is empty")
    for step in steps:
        if not isinstance(step, int) or isinstance(step, bool) or step <= 0:
            raise InvalidScaleDefinition(steps, f"step {step!r} is not positive")
    total = sum(steps)
    if total != constants.MAX_NOTES:
        raise InvalidScaleDefinition(
            steps, f"steps sum to {total}, not {constants.MAX_NOTES}"
        )
    return steps


def _degree_label(degree: int, offset: int, heptatonic: bool) -> Tuple[str, str]:
    if degree == 1:
        return ("root", "R")
    elif heptatonic:
        diff = offset - _MAJOR_OFFSETS[degree - 1]
        if abs(diff) <= 1:
            accidental = {-1: "b", 0: "", 1: "#"}[diff]
            return (interval_name(offset), f"{accidental}{degree}")
    return (interval_name(offset), interval_abbreviation(offset))


def _spell_degree(root: Note, degree_index: int, note: Note, heptatonic: bool) -> Note:
    """Spell a heptatonic degree on its own letter where a canonical name exists."""
    if not heptatonic:
        return note
    return spell_on_letter(note, root, degree_index)


def generate_scale(root: Note, pattern: Union[ScaleType, Sequence[int]]) -> Scale:
    """Generate a scale from a root.

    Notes are produced by transposing the root by the cumulative step offsets
    (starting at 0), so the last note is one step short of the octave.
    Seven-note scales are spelled one letter per degree where a canonical
    spelling exists (F major contains Bb, not A#).

    Args:
        root: The root note; its octave is the octave of degree 1.
        pattern: A named scale, or a sequence of positive semitone steps.

    Returns:
        The generated scale with degrees labelled 1..N.

    Raises:
        InvalidScaleDefinition: If the steps are not positive integers or do
            not sum to exactly 12.
    """
    if isinstance(pattern, ScaleType):
        scale_type: Optional[ScaleType] = pattern
        steps = get_scale_definition(pattern).steps
    else:
        scale_type = None
        steps = _validate_steps(pattern)
    heptatonic = len(steps) == 7
    notes: List[Note] = []
    degrees: List[ScaleDegree] = []
    offset = 0
    for index, step in enumerate(steps):
        note = _spell_degree(root, index, add_interval(root, offset), heptatonic)
        name, abbreviation = _degree_label(index + 1, offset, heptatonic)
        notes.append(note)
        degrees.append(ScaleDegree(index + 1, name, abbreviation, offset))
        offset += step
    return Scale(scale_type, root, steps, tuple(degrees), tuple(notes))


def contains_pitch(scale: Scale, note: Note) -> bool:
    """Test scale membership by pitch class, ignoring octave and spelling."""
    return note.chromatic_position in scale.pitch_classes


def degree_of(scale: Scale, note: Note) -> Optional[ScaleDegree]:
    """Find the degree a note occupies in a scale, if any."""
    for degree, member in zip(scale.degrees, scale.notes):
        if member.chromatic_position == note.chromatic_position:
            return degree
    return None


_NUMERALS = ("I", "II", "III", "IV", "V", "VI", "VII")

# (third, fifth) in semitones above the triad root
_TRIAD_QUALITIES: Dict[Tuple[int, int], ChordQuality] = {
    (4, 7): ChordQuality.Major,
    (3, 7): ChordQuality.Minor,
    (3, 6): ChordQuality.Diminished,
    (4, 8): ChordQuality.Augmented,
}


def roman_numeral(degree: int, quality: ChordQuality) -> str:
    """Roman numeral for a triad on a scale degree, e.g. "ii" or "vii°"."""
    numeral = _NUMERALS[degree - 1]
    if quality == ChordQuality.Major:
        return numeral
    elif quality == ChordQuality.Minor:
        return numeral.lower()
    elif quality == ChordQuality.Diminished:
        return numeral.lower() + "°"
    elif quality == ChordQuality.Augmented:
        return numeral + "+"
    else:
        raise MatchException(quality)


def diatonic_triads(scale: Scale) -> Tuple[Chord, ...]:
    """Stack thirds from the scale on each of its seven degrees.

    Args:
        scale: A seven-note scale.

    Returns:
        One triad per degree, in degree order, rooted on the scale's notes.

    Raises:
        InvalidScaleDefinition: If the scale does not have seven degrees, or a
            stacked triad is not major, minor, diminished or augmented.
    """
    count = len(scale.notes)
    if count != 7:
        raise InvalidScaleDefinition(scale.steps, "triads need seven degrees")
    triads: List[Chord] = []
    for index, note in enumerate(scale.notes):
        third = interval_between(note, scale.notes[(index + 2) % count])
        fifth = interval_between(note, scale.notes[(index + 4) % count])
        quality = _TRIAD_QUALITIES.get((third, fifth))
        if quality is None:
            raise InvalidScaleDefinition(
                scale.steps, f"degree {index + 1} does not form a triad"
            )
        triads.append(build_chord(note, quality))
    return tuple(triads)


def progression_chords(scale: Scale, numerals: Sequence[str]) -> Tuple[Chord, ...]:
    """Resolve a progression of Roman numerals to the scale's triads.

    Args:
        scale: A seven-note scale.
        numerals: Numerals such as ("ii", "V", "I"); case marks the quality.

    Returns:
        The chords of the progression, in order.

    Raises:
        InvalidScaleDefinition: If the scale does not have seven degrees.
        InvalidSymbol: If a numeral is not a triad of the scale.
    """
    triads = diatonic_triads(scale)
    lookup = {
        roman_numeral(index + 1, chord.quality): chord
        for index, chord in enumerate(triads)
    }
    chords: List[Chord] = []
    for numeral in numerals:
        chord = lookup.get(numeral)
        if chord is None:
            raise InvalidSymbol(numeral, f"not a triad of {scale.name}")
        chords.append(chord)
    return tuple(chords)
