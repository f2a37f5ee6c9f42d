"""Chord definitions and chord tone derivation for fretlab."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum, auto, unique
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, Optional, Tuple

from fretlab.base import MatchException, NoFingeringFound
from fretlab.note import Note, add_interval, interval_name, spell_on_letter

if TYPE_CHECKING:
    from fretlab.fingering import ChordPosition
    from fretlab.tuning import Tuning


@unique
class ChordQuality(Enum):
    """Closed set of chord qualities."""

    Major = "major"
    Minor = "minor"
    Diminished = "diminished"
    Augmented = "augmented"
    Dominant = "dominant"
    Major7 = "major7"
    Minor7 = "minor7"
    HalfDiminished = "half-diminished"
    Diminished7 = "diminished7"
    MinorMajor7 = "minor-major7"
    Major6 = "major6"
    Minor6 = "minor6"
    Sus2 = "sus2"
    Sus4 = "sus4"
    Power = "power"


@unique
class Extension(Enum):
    """Natural tones stacked on top of a quality's formula."""

    Sixth = "6"
    Ninth = "9"
    Eleventh = "11"
    Thirteenth = "13"


@unique
class Alteration(Enum):
    """Chromatically altered tones that replace or add a degree."""

    Flat5 = "b5"
    Sharp5 = "#5"
    Flat9 = "b9"
    Sharp9 = "#9"
    Sharp11 = "#11"
    Flat13 = "b13"


@unique
class Suspension(Enum):
    """A suspended tone that takes the place of the third."""

    Sus2 = "sus2"
    Sus4 = "sus4"


@unique
class Difficulty(Enum):
    """How hard a chord is to play, easiest first."""

    Beginner = "beginner"
    Intermediate = "intermediate"
    Advanced = "advanced"


@unique
class ChordFunction(Enum):
    """Harmonic role of a chord tone."""

    Root = auto()
    Third = auto()
    Fifth = auto()
    Seventh = auto()
    Extension = auto()
    Tension = auto()


# Chord formulas as (degree, semitones from root)
_QUALITY_FORMULAS: Dict[ChordQuality, Tuple[Tuple[int, int], ...]] = {
    ChordQuality.Major: ((1, 0), (3, 4), (5, 7)),
    ChordQuality.Minor: ((1, 0), (3, 3), (5, 7)),
    ChordQuality.Diminished: ((1, 0), (3, 3), (5, 6)),
    ChordQuality.Augmented: ((1, 0), (3, 4), (5, 8)),
    ChordQuality.Dominant: ((1, 0), (3, 4), (5, 7), (7, 10)),
    ChordQuality.Major7: ((1, 0), (3, 4), (5, 7), (7, 11)),
    ChordQuality.Minor7: ((1, 0), (3, 3), (5, 7), (7, 10)),
    ChordQuality.HalfDiminished: ((1, 0), (3, 3), (5, 6), (7, 10)),
    ChordQuality.Diminished7: ((1, 0), (3, 3), (5, 6), (7, 9)),
    ChordQuality.MinorMajor7: ((1, 0), (3, 3), (5, 7), (7, 11)),
    ChordQuality.Major6: ((1, 0), (3, 4), (5, 7), (6, 9)),
    ChordQuality.Minor6: ((1, 0), (3, 3), (5, 7), (6, 9)),
    ChordQuality.Sus2: ((1, 0), (2, 2), (5, 7)),
    ChordQuality.Sus4: ((1, 0), (4, 5), (5, 7)),
    ChordQuality.Power: ((1, 0), (5, 7)),
}

_EXTENSION_TONES: Dict[Extension, Tuple[int, int]] = {
    Extension.Sixth: (6, 9),
    Extension.Ninth: (9, 14),
    Extension.Eleventh: (11, 17),
    Extension.Thirteenth: (13, 21),
}

_ALTERATION_TONES: Dict[Alteration, Tuple[int, int]] = {
    Alteration.Flat5: (5, 6),
    Alteration.Sharp5: (5, 8),
    Alteration.Flat9: (9, 13),
    Alteration.Sharp9: (9, 15),
    Alteration.Sharp11: (11, 18),
    Alteration.Flat13: (13, 20),
}

_SUSPENSION_TONES: Dict[Suspension, Tuple[int, int]] = {
    Suspension.Sus2: (2, 2),
    Suspension.Sus4: (4, 5),
}

# Symbol suffix and long name per quality
_QUALITY_NAMES: Dict[ChordQuality, Tuple[str, str]] = {
    ChordQuality.Major: ("", "Major"),
    ChordQuality.Minor: ("m", "Minor"),
    ChordQuality.Diminished: ("dim", "Diminished"),
    ChordQuality.Augmented: ("aug", "Augmented"),
    ChordQuality.Dominant: ("7", "Dominant 7th"),
    ChordQuality.Major7: ("maj7", "Major 7th"),
    ChordQuality.Minor7: ("m7", "Minor 7th"),
    ChordQuality.HalfDiminished: ("m7b5", "Half-Diminished 7th"),
    ChordQuality.Diminished7: ("dim7", "Diminished 7th"),
    ChordQuality.MinorMajor7: ("mMaj7", "Minor-Major 7th"),
    ChordQuality.Major6: ("6", "Major 6th"),
    ChordQuality.Minor6: ("m6", "Minor 6th"),
    ChordQuality.Sus2: ("sus2", "Suspended 2nd"),
    ChordQuality.Sus4: ("sus4", "Suspended 4th"),
    ChordQuality.Power: ("5", "Power"),
}

assert len(_QUALITY_FORMULAS) == len(ChordQuality)
assert len(_QUALITY_NAMES) == len(ChordQuality)

_SEVENTH_QUALITIES: FrozenSet[ChordQuality] = frozenset(
    q for q, formula in _QUALITY_FORMULAS.items() if any(d == 7 for d, _ in formula)
)


def _symbol_suffix(
    quality: ChordQuality,
    extensions: Tuple[Extension, ...],
    alterations: Tuple[Alteration, ...],
    suspension: Optional[Suspension] = None,
) -> str:
    suffix, _ = _QUALITY_NAMES[quality]
    naturals = [e for e in extensions if e != Extension.Sixth]
    mods = ["6" for e in extensions if e == Extension.Sixth]
    if quality in _SEVENTH_QUALITIES and naturals:
        # The highest natural extension takes the place of the 7: C9, Cmaj13
        top = max(naturals, key=lambda e: _EXTENSION_TONES[e][0])
        suffix = suffix.replace("7", top.value, 1)
        mods.extend(e.value for e in naturals if e != top)
    else:
        mods.extend("add" + e.value for e in naturals)
    if suspension is not None:
        suffix += suspension.value
    mods.extend(a.value for a in alterations)
    if not mods:
        return suffix
    elif len(mods) == 1 and not (suffix[-1:].isdigit() and mods[0][0].isdigit()):
        return suffix + mods[0]
    else:
        return suffix + "(" + ",".join(mods) + ")"


@dataclass(frozen=True)
class ChordTone:
    """A single chord tone and its function within the chord."""

    note: Note
    degree: int
    """Chord degree number: 1, 3, 5, 7, 9, 11 or 13 (2, 4, 6 for sus/six)."""
    semitones: int
    """Semitones above the root; compound intervals exceed 12."""
    interval_from_root: str
    """Interval name reduced into the octave, e.g. "perfect fifth"."""
    function: ChordFunction
    altered: bool = False
    """True if the tone came from an alteration."""


@dataclass(frozen=True)
class Chord:
    """A chord: its spelling inputs, derived tones and fingering positions."""

    root: Note
    quality: ChordQuality
    extensions: Tuple[Extension, ...]
    alterations: Tuple[Alteration, ...]
    chord_tones: Tuple[ChordTone, ...]
    positions: Tuple[ChordPosition, ...] = field(default=())
    """Fingerings, best first; empty if none were searched for or found."""
    suspension: Optional[Suspension] = None
    """Suspended tone replacing the third of a seventh chord, as in "C7sus4"."""

    @property
    def symbol(self) -> str:
        """Compact chord symbol such as "Cm7b5", "Cmaj9" or "G7(b9,#11)"."""
        return self.root.name.value + _symbol_suffix(
            self.quality, self.extensions, self.alterations, self.suspension
        )

    @property
    def full_name(self) -> str:
        """Long form such as "A Minor 7th"."""
        _, long_name = _QUALITY_NAMES[self.quality]
        text = f"{self.root.name.value} {long_name}"
        if self.suspension is not None:
            text += " " + self.suspension.value
        mods = [e.value for e in self.extensions] + [a.value for a in self.alterations]
        if mods:
            text += " (" + ", ".join(mods) + ")"
        return text

    @property
    def pitch_classes(self) -> FrozenSet[int]:
        """Chromatic positions of every chord tone."""
        return frozenset(t.note.chromatic_position for t in self.chord_tones)

    @property
    def notes(self) -> Tuple[Note, ...]:
        return tuple(t.note for t in self.chord_tones)

    @property
    def difficulty(self) -> Optional[Difficulty]:
        """Difficulty of the easiest position, or None without positions."""
        if not self.positions:
            return None
        order = list(Difficulty)
        return min((p.difficulty for p in self.positions), key=order.index)

    @property
    def is_barre_chord(self) -> bool:
        """Whether the best-ranked position needs a barre."""
        return len(self.positions) > 0 and self.positions[0].is_barre

    @property
    def barre_position(self) -> Optional[int]:
        return self.positions[0].barre_position if self.positions else None

    def tone_for(self, note: Note) -> Optional[ChordTone]:
        """Find the chord tone sharing a note's pitch class, if any."""
        for tone in self.chord_tones:
            if tone.note.chromatic_position == note.chromatic_position:
                return tone
        return None


def function_for_degree(degree: int, altered: bool) -> ChordFunction:
    """Classify a chord degree by its number, not its exact semitone offset.

    Args:
        degree: The chord degree (1-13).
        altered: Whether the tone was chromatically altered.

    Returns:
        The harmonic function of the degree.
    """
    if degree == 1:
        return ChordFunction.Root
    elif degree == 3:
        return ChordFunction.Third
    elif degree == 5:
        return ChordFunction.Fifth
    elif degree == 7:
        return ChordFunction.Seventh
    elif degree in (9, 11, 13):
        return ChordFunction.Tension if altered else ChordFunction.Extension
    elif degree in (2, 4, 6):
        return ChordFunction.Extension
    else:
        raise MatchException(degree)


def build_chord_tones(
    root: Note,
    quality: ChordQuality,
    extensions: Iterable[Extension] = (),
    alterations: Iterable[Alteration] = (),
    suspension: Optional[Suspension] = None,
) -> Tuple[ChordTone, ...]:
    """Derive the tones of a chord, ordered by degree.

    A suspension replaces the third. Extensions add their degree (replacing a
    tone of the same degree if the quality already has one). Alterations
    replace the tone of their degree, or add it if absent, so Cb5 keeps a
    fifth and C7#9 gains a ninth.

    Each tone is spelled on the letter of its degree where a canonical
    spelling exists, so Cm7 is C, Eb, G, Bb.

    Args:
        root: The chord root.
        quality: Base chord quality.
        extensions: Natural extensions to add.
        alterations: Alterations to apply after the extensions.
        suspension: Suspended tone to put in place of the third.

    Returns:
        Chord tones ordered by degree, one per degree.
    """
    tones: Dict[int, Tuple[int, bool]] = {}
    for degree, semitones in _QUALITY_FORMULAS[quality]:
        tones[degree] = (semitones, False)
    if suspension is not None:
        tones.pop(3, None)
        degree, semitones = _SUSPENSION_TONES[suspension]
        tones[degree] = (semitones, False)
    for ext in extensions:
        degree, semitones = _EXTENSION_TONES[ext]
        tones[degree] = (semitones, False)
    for alt in alterations:
        degree, semitones = _ALTERATION_TONES[alt]
        tones[degree] = (semitones, True)
    result = []
    for degree in sorted(tones):
        semitones, altered = tones[degree]
        result.append(
            ChordTone(
                note=spell_on_letter(add_interval(root, semitones), root, degree - 1),
                degree=degree,
                semitones=semitones,
                interval_from_root=interval_name(semitones),
                function=function_for_degree(degree, altered),
                altered=altered,
            )
        )
    return tuple(result)


def build_chord(
    root: Note,
    quality: ChordQuality,
    extensions: Iterable[Extension] = (),
    alterations: Iterable[Alteration] = (),
    tuning: Optional[Tuning] = None,
    start_fret: int = 0,
    suspension: Optional[Suspension] = None,
) -> Chord:
    """Build a chord value, optionally with fingering positions.

    Fingering is best-effort: if no position exists for the given tuning and
    starting fret, the chord is returned with no positions.

    Args:
        root: The chord root.
        quality: Base chord quality.
        extensions: Natural extensions to add.
        alterations: Alterations to apply.
        tuning: If given, search for fingerings in this tuning.
        start_fret: Lowest fret of the fingering search window.
        suspension: Suspended tone to put in place of the third.

    Returns:
        The chord.
    """
    exts = tuple(extensions)
    alts = tuple(alterations)
    tones = build_chord_tones(root, quality, exts, alts, suspension)
    chord = Chord(root, quality, exts, alts, tones, suspension=suspension)
    if tuning is None:
        return chord
    # Local import: fingering depends on this module
    from fretlab.fingering import find_fingerings

    try:
        positions = find_fingerings(chord.chord_tones, tuning, start_fret=start_fret)
    except NoFingeringFound as e:
        logging.debug("no fingering for %s: %s", chord.symbol, e)
        return chord
    return replace(chord, positions=positions)
