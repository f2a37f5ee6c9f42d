"""Parser for note names and chord symbols using Lark."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError

from fretlab import constants
from fretlab.base import InvalidSymbol
from fretlab.chord import (
    Alteration,
    Chord,
    ChordQuality,
    Extension,
    Suspension,
    build_chord,
)
from fretlab.note import NAME_LOOKUP, Note, NoteName, make_note
from fretlab.tuning import Tuning, TuningName, get_tuning

_QUALITY_TOKENS: Dict[str, ChordQuality] = {
    "": ChordQuality.Major,
    "M": ChordQuality.Major,
    "maj": ChordQuality.Major,
    "m": ChordQuality.Minor,
    "min": ChordQuality.Minor,
    "dim": ChordQuality.Diminished,
    "°": ChordQuality.Diminished,
    "aug": ChordQuality.Augmented,
    "+": ChordQuality.Augmented,
    "7": ChordQuality.Dominant,
    "maj7": ChordQuality.Major7,
    "M7": ChordQuality.Major7,
    "m7": ChordQuality.Minor7,
    "min7": ChordQuality.Minor7,
    "m7b5": ChordQuality.HalfDiminished,
    "ø": ChordQuality.HalfDiminished,
    "ø7": ChordQuality.HalfDiminished,
    "dim7": ChordQuality.Diminished7,
    "°7": ChordQuality.Diminished7,
    "mMaj7": ChordQuality.MinorMajor7,
    "mM7": ChordQuality.MinorMajor7,
    "6": ChordQuality.Major6,
    "maj6": ChordQuality.Major6,
    "m6": ChordQuality.Minor6,
    "5": ChordQuality.Power,
}

# A suspension on a plain triad is the sus quality itself
_SUS_TOKENS: Dict[str, Suspension] = {
    "sus2": Suspension.Sus2,
    "sus4": Suspension.Sus4,
    "sus": Suspension.Sus4,
}

_SUS_QUALITIES: Dict[Suspension, ChordQuality] = {
    Suspension.Sus2: ChordQuality.Sus2,
    Suspension.Sus4: ChordQuality.Sus4,
}

# No third to suspend
_UNSUSPENDABLE: FrozenSet[ChordQuality] = frozenset(
    [ChordQuality.Sus2, ChordQuality.Sus4, ChordQuality.Power]
)

# A bare 9, 11 or 13 on a triad implies the matching seventh chord
_IMPLIED_SEVENTHS: Dict[ChordQuality, ChordQuality] = {
    ChordQuality.Major: ChordQuality.Major7,
    ChordQuality.Minor: ChordQuality.Minor7,
}

_BARE_EXTENSIONS: Dict[str, Extension] = {
    "9": Extension.Ninth,
    "11": Extension.Eleventh,
    "13": Extension.Thirteenth,
}

_MODIFIER_TOKENS: List[str] = (
    ["add" + e.value for e in Extension]
    + list(_BARE_EXTENSIONS)
    + [a.value for a in Alteration]
)


def _alternatives(tokens: Iterable[str]) -> str:
    # Longest first, since regex alternation takes the first match
    ordered = sorted((t for t in tokens if t), key=len, reverse=True)
    return "|".join(re.escape(t) for t in ordered)


# Lark grammar for note names ("C#4") and chord symbols ("Cm7b5", "G7(b9,#11)").
# Roots are limited to the spellings NoteName knows, so "Cb5" reads as C with a
# flat fifth while "Bb5" is a B-flat power chord.
SYMBOL_GRAMMAR = f"""
%import common.WS_INLINE
%ignore WS_INLINE

ROOT: /[CDFGA]#|[DEGAB]b|[A-G]/
OCTAVE: /\\d+/
QUALITY: /{_alternatives(_QUALITY_TOKENS)}/
MODIFIER: /{_alternatives(_MODIFIER_TOKENS)}/
SUS: /{_alternatives(_SUS_TOKENS)}/

note: ROOT OCTAVE?

chord_symbol: ROOT QUALITY? (MODIFIER | SUS | group)*
group: "(" MODIFIER ("," MODIFIER)* ")"
"""


@dataclass(frozen=True)
class ChordSymbol:
    """The parsed parts of a chord symbol."""

    root: Note
    quality: ChordQuality
    extensions: Tuple[Extension, ...]
    alterations: Tuple[Alteration, ...]
    suspension: Optional[Suspension] = None
    """Suspended tone of a seventh or extended chord ("C7sus4")."""


@dataclass(frozen=True)
class _RawChord:
    root: str
    quality: Optional[str]
    modifiers: Tuple[str, ...]
    suspensions: Tuple[str, ...]


class SymbolTransformer(Transformer):
    """Transform parse trees into plain tuples of token text.

    Validation happens after transformation, since errors raised here would be
    wrapped by Lark.
    """

    def note(self, items):
        root = str(items[0])
        octave = int(items[1]) if len(items) > 1 else None
        return (root, octave)

    def group(self, items):
        return [str(item) for item in items]

    def chord_symbol(self, items):
        quality: Optional[str] = None
        modifiers: List[str] = []
        suspensions: List[str] = []
        for item in items[1:]:
            if isinstance(item, list):
                modifiers.extend(item)
            elif isinstance(item, Token) and item.type == "QUALITY":
                quality = str(item)
            elif isinstance(item, Token) and item.type == "SUS":
                suspensions.append(str(item))
            else:
                modifiers.append(str(item))
        return _RawChord(str(items[0]), quality, tuple(modifiers), tuple(suspensions))


_PARSER = Lark(SYMBOL_GRAMMAR, start=["note", "chord_symbol"], parser="lalr")


def _parse(text: str, start: str):
    try:
        tree = _PARSER.parse(text.strip(), start=start)
    except LarkError as e:
        raise InvalidSymbol(text, type(e).__name__) from e
    return SymbolTransformer().transform(tree)


def _note_name(text: str, root: str) -> NoteName:
    name = NAME_LOOKUP.get(root)
    if name is None:
        raise InvalidSymbol(text, f"unknown root {root}")
    return name


def parse_note(text: str) -> Note:
    """Parse a note name with an optional octave.

    Args:
        text: Note text such as "C", "F#3" or "Bb2".

    Returns:
        The note; the octave defaults to 4.

    Raises:
        InvalidSymbol: If the text is not a note name.
        InvalidPitch: If the octave is out of range.
    """
    root, octave = _parse(text, "note")
    name = _note_name(text, root)
    return make_note(name, constants.DEFAULT_OCTAVE if octave is None else octave)


def parse_chord_symbol(text: str) -> ChordSymbol:
    """Parse a chord symbol into its root, quality and modifiers.

    Extensions may be written bare ("C9") or as "addN" ("Cadd9"). A bare 9, 11
    or 13 on a major or minor triad implies the seventh, so "C9" is a dominant
    ninth and "Cm11" a minor seventh with an eleventh; "addN" never does.
    Modifiers may be grouped in parentheses: "G7(b9,#11)".

    A trailing "sus2", "sus4" or "sus" replaces the third. On a plain major
    triad it gives the sus2 or sus4 quality; on a seventh or extended chord
    it is kept as the symbol's suspension, as in "C7sus4" or "G9sus4".

    Args:
        text: The chord symbol.

    Returns:
        The parsed symbol with the root in octave 4.

    Raises:
        InvalidSymbol: If the text is not a chord symbol, repeats a modifier,
            or suspends a chord that has no third.
    """
    raw: _RawChord = _parse(text, "chord_symbol")
    root = make_note(_note_name(text, raw.root))
    quality = _QUALITY_TOKENS[raw.quality or ""]
    if len(set(raw.modifiers)) != len(raw.modifiers):
        raise InvalidSymbol(text, "repeated modifier")
    extensions: List[Extension] = []
    alterations: List[Alteration] = []
    for mod in raw.modifiers:
        if mod.startswith("add"):
            extensions.append(Extension(mod[3:]))
        elif mod in _BARE_EXTENSIONS:
            extensions.append(_BARE_EXTENSIONS[mod])
            if raw.quality is None:
                quality = ChordQuality.Dominant
            else:
                quality = _IMPLIED_SEVENTHS.get(quality, quality)
        else:
            alterations.append(Alteration(mod))
    if len(set(extensions)) != len(extensions):
        raise InvalidSymbol(text, "repeated extension")
    suspension: Optional[Suspension] = None
    if len(raw.suspensions) > 1:
        raise InvalidSymbol(text, "repeated suspension")
    elif raw.suspensions:
        suspension = _SUS_TOKENS[raw.suspensions[0]]
        if quality in _UNSUSPENDABLE:
            raise InvalidSymbol(text, "no third to suspend")
        elif quality == ChordQuality.Major:
            quality = _SUS_QUALITIES[suspension]
            suspension = None
    return ChordSymbol(root, quality, tuple(extensions), tuple(alterations), suspension)


def parse_chord(
    text: str, tuning: Optional[Union[Tuning, TuningName, str]] = None
) -> Chord:
    """Parse a chord symbol and build the chord.

    Args:
        text: The chord symbol.
        tuning: If given, also search for fingerings in this tuning.

    Returns:
        The chord.

    Raises:
        InvalidSymbol: If the text is not a chord symbol.
        UnknownTuning: If the tuning name is not recognized.
    """
    symbol = parse_chord_symbol(text)
    if tuning is not None and not isinstance(tuning, Tuning):
        tuning = get_tuning(tuning)
    return build_chord(
        symbol.root,
        symbol.quality,
        symbol.extensions,
        symbol.alterations,
        tuning=tuning,
        suspension=symbol.suspension,
    )
