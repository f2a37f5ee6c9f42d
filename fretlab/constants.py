"""Static limits and defaults for the fretlab engine."""

MAX_NOTES = 12
"""Number of distinct pitch classes in the chromatic scale."""

MIN_OCTAVE = 0
"""Lowest octave accepted when constructing notes directly."""

MAX_OCTAVE = 10
"""Highest octave accepted when constructing notes directly."""

DEFAULT_OCTAVE = 4
"""Octave used when notation omits one (middle C is C4)."""

MAX_FRET = 24
"""Highest fret the fretboard mapper accepts unless configured otherwise."""

DEFAULT_END_FRET = 12
"""Default last fret of the displayed range."""

DEFAULT_MAX_SPAN = 4
"""Default number of frets a fingering may cover beyond its starting fret."""

MAX_FINGERS = 4
"""Fretting fingers available (index through pinky)."""

MIN_SOUNDING_STRINGS = 3
"""Fewest sounding strings a fingering may have (capped by the string count)."""

BEGINNER_MAX_FINGERS = 3
"""Most fretting fingers a beginner shape may use."""

BEGINNER_MAX_FRET = 3
"""Highest fret a beginner (open) shape may reach."""

DEFAULT_RESULT_CAP = 512
"""Most valid fingerings the search collects before it stops enumerating."""

DEFAULT_FINGERING_LIMIT = 8
"""Most ranked fingerings returned to the caller."""

FRETBOARD_CACHE_SIZE = 128
"""Number of computed fretboards kept by the memoizing mapper."""

DEFAULT_VELOCITY = 100
"""MIDI velocity used for previewed notes."""

DEFAULT_CHANNEL = 0
"""Zero-based MIDI channel used for previewed notes (mido numbering)."""
