"""Fretlab: music theory and fretboard computation for guitar."""

from fretlab.base import (
    FretlabError,
    InvalidPitch,
    InvalidScaleDefinition,
    InvalidSymbol,
    NoFingeringFound,
    OutOfRange,
    UnknownTuning,
)
from fretlab.chord import (
    Alteration,
    Chord,
    ChordQuality,
    Difficulty,
    Extension,
    Suspension,
    build_chord,
)
from fretlab.fingering import ChordPosition, find_fingerings
from fretlab.fretboard import (
    DisplayOptions,
    Fretboard,
    FretboardConfig,
    HighlightSource,
    compute_fretboard,
)
from fretlab.highlight import HighlightType
from fretlab.midi import chord_position_msgs, fret_note_msg, note_to_midi
from fretlab.note import DisplayMode, Note, NoteName, add_interval, make_note
from fretlab.parser import parse_chord, parse_note
from fretlab.scale import (
    Scale,
    ScaleType,
    diatonic_triads,
    generate_scale,
    progression_chords,
)
from fretlab.tuning import TuningName, generate_string_notes, get_tuning

__all__ = [
    "compute_fretboard",
    "generate_scale",
    "diatonic_triads",
    "progression_chords",
    "build_chord",
    "generate_string_notes",
    "find_fingerings",
    "get_tuning",
    "add_interval",
    "make_note",
    "parse_note",
    "parse_chord",
    "note_to_midi",
    "fret_note_msg",
    "chord_position_msgs",
    "Note",
    "NoteName",
    "DisplayMode",
    "Scale",
    "ScaleType",
    "Chord",
    "ChordQuality",
    "Extension",
    "Alteration",
    "Suspension",
    "Difficulty",
    "ChordPosition",
    "TuningName",
    "HighlightType",
    "HighlightSource",
    "DisplayOptions",
    "FretboardConfig",
    "Fretboard",
    "FretlabError",
    "InvalidPitch",
    "InvalidScaleDefinition",
    "UnknownTuning",
    "OutOfRange",
    "NoFingeringFound",
    "InvalidSymbol",
]
