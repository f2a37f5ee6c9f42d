"""Fretboard grid computation for fretlab.

This module turns a fretboard configuration (tuning, displayed fret range,
highlight source and caller-owned interaction state) into a fully annotated,
immutable grid of strings and frets. It is the bridge between the music
theory engines and whatever presentation layer renders the neck.
"""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto, unique
from functools import lru_cache
from typing import (
    Dict,
    FrozenSet,
    Generator,
    List,
    Optional,
    Set,
    Tuple,
    Union,
)

from typing_extensions import override

from fretlab import constants
from fretlab.base import MatchException, OutOfRange
from fretlab.chord import Chord
from fretlab.fingering import ChordPosition
from fretlab.highlight import HighlightType, classify_pitch, resolve_highlight
from fretlab.note import (
    DisplayMode,
    Note,
    NoteName,
    add_interval,
    interval_abbreviation,
    interval_between,
    respell,
)
from fretlab.scale import Scale, degree_of
from fretlab.tuning import Tuning, TuningName, generate_string_notes, get_tuning


class HighlightSource(metaclass=ABCMeta):
    """What the fretboard is currently highlighting.

    Exactly one of: nothing, a scale, or a chord. Modelling this as a closed
    set of variants rules out having a scale and a chord active at once.
    """

    @abstractmethod
    def root_note(self) -> Optional[Note]:
        """Get the root the source highlights, if it has one.

        Returns:
            The scale or chord root, or None when nothing is active.
        """
        raise NotImplementedError()

    @staticmethod
    def none() -> NoHighlight:
        return NO_HIGHLIGHT

    @staticmethod
    def scale(scale: Scale) -> ScaleHighlight:
        return ScaleHighlight(scale)

    @staticmethod
    def chord(chord: Chord, position: Optional[ChordPosition] = None) -> ChordHighlight:
        return ChordHighlight(chord, position)


@dataclass(frozen=True)
class NoHighlight(HighlightSource):
    """No scale or chord is active."""

    @override
    def root_note(self) -> Optional[Note]:
        return None


@dataclass(frozen=True)
class ScaleHighlight(HighlightSource):
    """Highlight the members of a scale."""

    scale: Scale

    @override
    def root_note(self) -> Optional[Note]:
        return self.scale.root


@dataclass(frozen=True)
class ChordHighlight(HighlightSource):
    """Highlight the tones of a chord, optionally with one of its voicings."""

    chord: Chord
    position: Optional[ChordPosition] = None
    """Voicing whose muted strings and finger numbers annotate the grid."""

    @override
    def root_note(self) -> Optional[Note]:
        return self.chord.root


NO_HIGHLIGHT = NoHighlight()
"""Shared instance of the empty highlight source."""


@unique
class NamingConvention(Enum):
    """How black-key fret notes are spelled."""

    Sharps = auto()  # Always C#, D#, ...
    Flats = auto()  # Always Db, Eb, ...
    Mixed = auto()  # Follow the active scale or chord spelling


@dataclass(frozen=True)
class DisplayOptions:
    """Display preferences carried through to the renderer."""

    show_note_names: bool = True
    show_intervals: bool = False
    show_finger_numbers: bool = False
    show_fret_numbers: bool = True
    show_string_numbers: bool = True
    naming: NamingConvention = NamingConvention.Mixed


@dataclass(frozen=True)
class FretCoord:
    """A fret on the board, addressed by string number and fret number."""

    string_number: int
    """1-based string number (1 is the highest string)."""
    fret_number: int


@dataclass(frozen=True)
class FretboardConfig:
    """Everything ``compute_fretboard`` needs to produce a grid.

    Interaction state (selection, hover, pressed frets) is owned by the
    caller and passed in; vary a config with ``dataclasses.replace``.
    """

    tuning: Union[TuningName, str] = TuningName.Standard
    start_fret: int = 0
    end_fret: int = constants.DEFAULT_END_FRET
    highlight_source: HighlightSource = NO_HIGHLIGHT
    root_note: Optional[Note] = None
    """Root for interval mode; ignored when a scale or chord is active."""
    selected_notes: FrozenSet[Note] = frozenset()
    """Selected pitches; matched by pitch, not spelling."""
    hovered_fret: Optional[FretCoord] = None
    pressed_frets: FrozenSet[FretCoord] = frozenset()
    display: DisplayOptions = field(default_factory=DisplayOptions)
    reference_octave: Optional[int] = None
    """Octave of the lowest string; defaults to the tuning's own."""
    max_fret: int = constants.MAX_FRET


@dataclass(frozen=True)
class Fret:
    """A single fret cell on one string."""

    position: int
    """Fret number (0 is the open string)."""
    note: Note
    highlight_type: HighlightType
    is_muted: bool = False
    is_pressed: bool = False
    is_hovered: bool = False
    is_selected: bool = False
    finger_number: Optional[int] = None
    """Finger from the active voicing: 1-4, 0 for open, None if unused."""
    interval_label: Optional[str] = None
    """Interval from the active root, e.g. "b3"; None without a root."""

    @property
    def is_highlighted(self) -> bool:
        return self.highlight_type != HighlightType.Off or self.is_selected


@dataclass(frozen=True)
class GuitarString:
    """One string: its open note and the frets in the displayed range."""

    string_number: int
    """1-based string number (1 is the highest string)."""
    open_note: Note
    frets: Tuple[Fret, ...]

    def fret_at(self, position: int) -> Optional[Fret]:
        for fret in self.frets:
            if fret.position == position:
                return fret
        return None


@dataclass(frozen=True)
class FretPosition:
    """A note located on the board."""

    string_number: int
    fret_number: int
    note: Note


@dataclass(frozen=True)
class Fretboard:
    """A fully computed fretboard.

    Strings are ordered from the lowest-pitched string to the highest, the
    same order as ``Tuning.string_notes``.
    """

    strings: Tuple[GuitarString, ...]
    tuning: Tuning
    start_fret: int
    end_fret: int
    highlight_source: HighlightSource
    root_note: Optional[Note]
    """The root used for highlighting, from the source or the config."""
    selected_notes: FrozenSet[Note]
    hovered_fret: Optional[FretCoord]
    display: DisplayOptions

    def __iter__(self) -> Generator[FretPosition, None, None]:
        """Iterate over every displayed fret, lowest string first."""
        for string in self.strings:
            for fret in string.frets:
                yield FretPosition(string.string_number, fret.position, fret.note)

    def string(self, string_number: int) -> Optional[GuitarString]:
        """Get a string by its 1-based number, or None if there is no such string."""
        for string in self.strings:
            if string.string_number == string_number:
                return string
        return None

    def fret_at(self, coord: FretCoord) -> Optional[Fret]:
        """Get the fret at a coordinate, or None if it is not displayed."""
        for string in self.strings:
            if string.string_number == coord.string_number:
                return string.fret_at(coord.fret_number)
        return None

    def find_positions(
        self, note: Note, match_octave: bool = True
    ) -> List[FretPosition]:
        """Find every displayed fret that sounds a note.

        Args:
            note: The note to look for; spelling is ignored.
            match_octave: If False, match the pitch class in any octave.

        Returns:
            Matching positions, lowest string first.
        """
        if match_octave:
            return [pos for pos in self if pos.note.pitch_equals(note)]
        else:
            pc = note.chromatic_position
            return [pos for pos in self if pos.note.chromatic_position == pc]

    def positions_with(self, highlight_type: HighlightType) -> List[FretPosition]:
        """Find every displayed fret carrying a highlight label."""
        result = []
        for string in self.strings:
            for fret in string.frets:
                if fret.highlight_type == highlight_type:
                    result.append(
                        FretPosition(string.string_number, fret.position, fret.note)
                    )
        return result


def check_fret_range(start_fret: int, end_fret: int, max_fret: int) -> None:
    """Validate a displayed fret range.

    Raises:
        OutOfRange: If the range is inverted, negative, or past ``max_fret``.
    """
    if (
        start_fret < 0
        or end_fret < 0
        or start_fret > end_fret
        or start_fret > max_fret
        or end_fret > max_fret
    ):
        raise OutOfRange(start_fret, end_fret, max_fret)


def _preference(naming: NamingConvention, root: Optional[Note]) -> DisplayMode:
    if naming == NamingConvention.Sharps:
        return DisplayMode.Sharp
    elif naming == NamingConvention.Flats:
        return DisplayMode.Flat
    elif naming == NamingConvention.Mixed:
        if root is not None and root.display_mode == DisplayMode.Flat:
            return DisplayMode.Flat
        else:
            return DisplayMode.Sharp
    else:
        raise MatchException(naming)


def _source_spellings(source: HighlightSource) -> Dict[int, NoteName]:
    """Spellings the active source uses, by pitch class."""
    if isinstance(source, NoHighlight):
        return {}
    elif isinstance(source, ScaleHighlight):
        return {n.chromatic_position: n.name for n in source.scale.notes}
    elif isinstance(source, ChordHighlight):
        tones = source.chord.chord_tones
        return {t.note.chromatic_position: t.note.name for t in tones}
    else:
        raise MatchException(source)


def _member_sets(
    source: HighlightSource,
) -> Tuple[Optional[FrozenSet[int]], Optional[FrozenSet[int]]]:
    """Pitch classes of the active (chord, scale), None where inactive."""
    if isinstance(source, NoHighlight):
        return (None, None)
    elif isinstance(source, ScaleHighlight):
        return (None, source.scale.pitch_classes)
    elif isinstance(source, ChordHighlight):
        return (source.chord.pitch_classes, None)
    else:
        raise MatchException(source)


def _spell(
    pitch: Note, spellings: Dict[int, NoteName], preference: DisplayMode
) -> Note:
    name = spellings.get(pitch.chromatic_position)
    if name is not None:
        return Note(name, pitch.octave)
    else:
        return respell(pitch, preference)


def _interval_label(
    source: HighlightSource, root: Optional[Note], note: Note
) -> Optional[str]:
    if root is None:
        return None
    if isinstance(source, ScaleHighlight):
        degree = degree_of(source.scale, note)
        if degree is not None:
            return degree.abbreviation
    return interval_abbreviation(interval_between(root, note))


@lru_cache(maxsize=constants.FRETBOARD_CACHE_SIZE)
def compute_fretboard(config: FretboardConfig) -> Fretboard:
    """Compute the annotated fretboard for a configuration.

    For every string and every fret in ``[start_fret, end_fret]`` the note is
    the open note transposed by the fret number. Its highlight label comes
    from the active source's membership sets resolved by highlight
    precedence. Frets are muted only where an active chord voicing mutes the
    string, within that voicing's fret range. Hover, press and selection flags
    are copied from the config and never inferred.

    The function is pure, and results are memoized by config.

    Args:
        config: The fretboard configuration.

    Returns:
        The computed fretboard.

    Raises:
        OutOfRange: If the fret range is invalid.
        UnknownTuning: If the tuning name is not recognized.
    """
    check_fret_range(config.start_fret, config.end_fret, config.max_fret)
    tuning = get_tuning(config.tuning)
    source = config.highlight_source
    root = source.root_note()
    if isinstance(source, NoHighlight):
        root = config.root_note
    root_pc = root.chromatic_position if root is not None else None
    chord_pcs, scale_pcs = _member_sets(source)
    preference = _preference(config.display.naming, root)
    spellings = (
        _source_spellings(source)
        if config.display.naming == NamingConvention.Mixed
        else {}
    )
    selected: Set[Tuple[int, int]] = {n.pitch_key for n in config.selected_notes}
    voicing = source.position if isinstance(source, ChordHighlight) else None

    logging.debug(
        "computing fretboard: %s frets %d-%d, source %s",
        tuning.name.value,
        config.start_fret,
        config.end_fret,
        type(source).__name__,
    )

    open_notes = generate_string_notes(tuning.name, config.reference_octave)
    string_count = len(open_notes)
    strings: List[GuitarString] = []
    for index, open_note in enumerate(open_notes):
        string_number = string_count - index
        voicing_fret: Optional[int] = None
        muted_range: Optional[Tuple[int, int]] = None
        if voicing is not None and index < len(voicing.finger_positions):
            voicing_fret = voicing.finger_positions[index]
            if voicing_fret is None:
                muted_range = voicing.fret_range
        frets: List[Fret] = []
        for position in range(config.start_fret, config.end_fret + 1):
            note = _spell(add_interval(open_note, position), spellings, preference)
            candidates = classify_pitch(
                note.chromatic_position, root_pc, chord_pcs, scale_pcs
            )
            highlight = resolve_highlight(candidates)
            coord = FretCoord(string_number, position)
            finger: Optional[int] = None
            if voicing is not None and voicing_fret == position:
                finger = voicing.finger_numbers[index]
            frets.append(
                Fret(
                    position=position,
                    note=note,
                    highlight_type=highlight,
                    is_muted=(
                        muted_range is not None
                        and muted_range[0] <= position <= muted_range[1]
                    ),
                    is_pressed=coord in config.pressed_frets,
                    is_hovered=coord == config.hovered_fret,
                    is_selected=note.pitch_key in selected,
                    finger_number=finger,
                    interval_label=_interval_label(source, root, note),
                )
            )
        strings.append(
            GuitarString(
                string_number, _spell(open_note, spellings, preference), tuple(frets)
            )
        )

    return Fretboard(
        strings=tuple(strings),
        tuning=tuning,
        start_fret=config.start_fret,
        end_fret=config.end_fret,
        highlight_source=source,
        root_note=root,
        selected_notes=config.selected_notes,
        hovered_fret=config.hovered_fret,
        display=config.display,
    )
