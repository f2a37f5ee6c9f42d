"""Guitar tunings and open-string note generation for fretlab.

Tunings are stored as a low-string root plus the semitone gaps between
adjacent strings; open-string notes are derived from that by repeated
transposition, lowest string first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto, unique
from typing import Dict, List, Optional, Tuple, Union

from fretlab.base import UnknownTuning
from fretlab.note import Note, NoteName, add_interval


@unique
class TuningName(Enum):
    """Standard and popular alternate guitar tunings."""

    Standard = "Standard"
    DropD = "Drop D"
    DADGAD = "DADGAD"
    OpenG = "Open G"
    OpenD = "Open D"
    OpenE = "Open E"
    OpenA = "Open A"
    OpenC = "Open C"
    OpenF = "Open F"


@unique
class TuneDirection(Enum):
    """Which way a string is retuned."""

    Up = auto()
    Down = auto()
    Unchanged = auto()


@dataclass(frozen=True)
class FamousUse:
    """A recording that uses a tuning."""

    artist: str
    song: str


@dataclass(frozen=True)
class Tuning:
    """Configuration for a tuning, from the lowest string upward."""

    name: TuningName
    low_root: NoteName
    """Open note name of the lowest string."""
    reference_octave: int
    """Octave of the lowest string."""
    string_intervals: Tuple[int, ...]
    """Semitone gaps between adjacent strings (one fewer than strings)."""
    aliases: Tuple[str, ...] = ()
    genres: Tuple[str, ...] = ()
    famous_uses: Tuple[FamousUse, ...] = ()

    @property
    def string_count(self) -> int:
        return len(self.string_intervals) + 1

    @property
    def string_notes(self) -> Tuple[Note, ...]:
        """Open-string notes, lowest string first."""
        return _string_notes(self, self.reference_octave)


@dataclass(frozen=True)
class TuningStep:
    """How to retune one string from standard tuning."""

    string_number: int
    """1-based string number (1 is the highest string)."""
    direction: TuneDirection
    semitones: int
    """Absolute number of semitones to move."""
    target_note: Note


TUNINGS: List[Tuning] = [
    Tuning(
        TuningName.Standard,
        NoteName.E,
        2,
        (5, 5, 5, 4, 5),
        aliases=("E Standard", "EADGBE"),
        genres=("rock", "pop", "jazz", "classical"),
        famous_uses=(
            FamousUse("Led Zeppelin", "Stairway to Heaven"),
            FamousUse("The Beatles", "Here Comes the Sun"),
        ),
    ),
    Tuning(
        TuningName.DropD,
        NoteName.D,
        2,
        (7, 5, 5, 4, 5),
        aliases=("DADGBE",),
        genres=("rock", "metal", "grunge"),
        famous_uses=(
            FamousUse("Foo Fighters", "Everlong"),
            FamousUse("Soundgarden", "Outshined"),
        ),
    ),
    Tuning(
        TuningName.DADGAD,
        NoteName.D,
        2,
        (7, 5, 5, 2, 5),
        aliases=("D Modal",),
        genres=("folk", "celtic"),
        famous_uses=(FamousUse("Led Zeppelin", "Kashmir"),),
    ),
    Tuning(
        TuningName.OpenG,
        NoteName.D,
        2,
        (5, 7, 5, 4, 3),
        aliases=("DGDGBD",),
        genres=("blues", "rock", "slide"),
        famous_uses=(
            FamousUse("The Rolling Stones", "Brown Sugar"),
            FamousUse("The Rolling Stones", "Honky Tonk Women"),
        ),
    ),
    Tuning(
        TuningName.OpenD,
        NoteName.D,
        2,
        (7, 5, 4, 3, 5),
        aliases=("DADF#AD",),
        genres=("folk", "blues", "slide"),
        famous_uses=(FamousUse("The Allman Brothers Band", "Little Martha"),),
    ),
    Tuning(
        TuningName.OpenE,
        NoteName.E,
        2,
        (7, 5, 4, 3, 5),
        aliases=("EBEG#BE",),
        genres=("blues", "slide"),
        famous_uses=(FamousUse("The Allman Brothers Band", "Statesboro Blues"),),
    ),
    Tuning(
        TuningName.OpenA,
        NoteName.E,
        2,
        (5, 7, 5, 4, 3),
        aliases=("EAEAC#E",),
        genres=("blues", "slide"),
    ),
    Tuning(
        TuningName.OpenC,
        NoteName.C,
        2,
        (7, 5, 7, 5, 4),
        aliases=("CGCGCE",),
        genres=("folk", "ambient"),
    ),
    Tuning(
        TuningName.OpenF,
        NoteName.C,
        2,
        (5, 7, 5, 4, 8),
        aliases=("CFCFAF",),
        genres=("folk",),
    ),
]
"""Every registered tuning."""

TUNING_LOOKUP: Dict[TuningName, Tuning] = {t.name: t for t in TUNINGS}
"""Lookup from tuning name to its definition."""

assert len(TUNING_LOOKUP) == len(TuningName)


def _build_name_lookup() -> Dict[str, TuningName]:
    d: Dict[str, TuningName] = {}
    for t in TUNINGS:
        d[t.name.value.lower()] = t.name
        for alias in t.aliases:
            d[alias.lower()] = t.name
    return d


_NAME_LOOKUP = _build_name_lookup()


def _string_notes(tuning: Tuning, reference_octave: int) -> Tuple[Note, ...]:
    note = Note(tuning.low_root, reference_octave)
    notes = [note]
    for interval in tuning.string_intervals:
        note = add_interval(note, interval)
        notes.append(note)
    return tuple(notes)


def get_tuning(name: Union[TuningName, str]) -> Tuning:
    """Look up a tuning by enum member, name or alias.

    String names are matched case-insensitively against tuning names and
    aliases, so "drop d", "E Standard" and "DADGBE" all resolve.

    Args:
        name: The tuning to look up.

    Returns:
        The tuning definition.

    Raises:
        UnknownTuning: If no tuning matches.
    """
    if isinstance(name, TuningName):
        return TUNING_LOOKUP[name]
    tuning_name = _NAME_LOOKUP.get(str(name).strip().lower())
    if tuning_name is None:
        raise UnknownTuning(name)
    return TUNING_LOOKUP[tuning_name]


def generate_string_notes(
    tuning_name: Union[TuningName, str], reference_octave: Optional[int] = None
) -> Tuple[Note, ...]:
    """Generate the open-string notes of a tuning, lowest string first.

    Args:
        tuning_name: The tuning to use.
        reference_octave: Octave of the lowest string; defaults to the
            tuning's own (octave 2 for guitar tunings).

    Returns:
        One note per string, low to high.

    Raises:
        UnknownTuning: If the tuning name is not recognized.
    """
    tuning = get_tuning(tuning_name)
    octave = tuning.reference_octave if reference_octave is None else reference_octave
    return _string_notes(tuning, octave)


def tuning_steps(tuning_name: Union[TuningName, str]) -> Tuple[TuningStep, ...]:
    """Describe how to reach a tuning from standard tuning.

    Args:
        tuning_name: The target tuning.

    Returns:
        One step per string, ordered by string number (highest string first).

    Raises:
        UnknownTuning: If the tuning name is not recognized.
    """
    target = get_tuning(tuning_name).string_notes
    standard = TUNING_LOOKUP[TuningName.Standard].string_notes
    assert len(target) == len(standard)
    steps: List[TuningStep] = []
    count = len(target)
    for index in reversed(range(count)):
        delta = target[index].midi - standard[index].midi
        if delta > 0:
            direction = TuneDirection.Up
        elif delta < 0:
            direction = TuneDirection.Down
        else:
            direction = TuneDirection.Unchanged
        steps.append(TuningStep(count - index, direction, abs(delta), target[index]))
    return tuple(steps)
