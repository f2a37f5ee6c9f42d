"""Tests for scale generation."""

from typing import List

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fretlab.base import InvalidScaleDefinition, InvalidSymbol
from fretlab.chord import ChordQuality
from fretlab.note import Note, NoteName
from fretlab.scale import (
    SCALES,
    ScaleType,
    contains_pitch,
    degree_of,
    diatonic_triads,
    find_scale_type,
    generate_scale,
    get_scale_definition,
    progression_chords,
    roman_numeral,
)
from tests.fretlab.hypo import configure_hypo

configure_hypo()

C4 = Note(NoteName.C, 4)


def test_scale_definitions_span_octave() -> None:
    for definition in SCALES:
        assert sum(definition.steps) == 12
        assert all(step > 0 for step in definition.steps)


def test_c_major_from_pattern() -> None:
    scale = generate_scale(C4, [2, 2, 1, 2, 2, 2, 1])
    assert scale.scale_type is None
    assert [n.chromatic_position for n in scale.notes] == [0, 2, 4, 5, 7, 9, 11]
    assert [d.abbreviation for d in scale.degrees] == [
        "R",
        "2",
        "3",
        "4",
        "5",
        "6",
        "7",
    ]
    assert scale.name == "C custom"


@pytest.mark.parametrize(
    "root, scale_type, expected",
    [
        (C4, ScaleType.Major, ["C", "D", "E", "F", "G", "A", "B"]),
        (Note(NoteName.F, 4), ScaleType.Major, ["F", "G", "A", "Bb", "C", "D", "E"]),
        (Note(NoteName.D, 4), ScaleType.Major, ["D", "E", "F#", "G", "A", "B", "C#"]),
        (
            Note(NoteName.A, 3),
            ScaleType.NaturalMinor,
            ["A", "B", "C", "D", "E", "F", "G"],
        ),
        (
            Note(NoteName.Eb, 4),
            ScaleType.Major,
            ["Eb", "F", "G", "Ab", "Bb", "C", "D"],
        ),
        (C4, ScaleType.Dorian, ["C", "D", "Eb", "F", "G", "A", "Bb"]),
        (Note(NoteName.A, 3), ScaleType.PentatonicMinor, ["A", "C", "D", "E", "G"]),
    ],
)
def test_scale_spelling(root: Note, scale_type: ScaleType, expected: List[str]) -> None:
    scale = generate_scale(root, scale_type)
    assert [n.name.value for n in scale.notes] == expected


def test_scale_octaves() -> None:
    scale = generate_scale(Note(NoteName.A, 3), ScaleType.NaturalMinor)
    assert [n.octave for n in scale.notes] == [3, 3, 4, 4, 4, 4, 4]


@pytest.mark.parametrize(
    "scale_type, expected",
    [
        (ScaleType.NaturalMinor, ["R", "2", "b3", "4", "5", "b6", "b7"]),
        (ScaleType.Lydian, ["R", "2", "3", "#4", "5", "6", "7"]),
        (ScaleType.Locrian, ["R", "b2", "b3", "4", "b5", "b6", "b7"]),
        (ScaleType.PentatonicMinor, ["R", "b3", "4", "5", "b7"]),
        (ScaleType.Blues, ["R", "b3", "4", "b5", "5", "b7"]),
    ],
)
def test_degree_labels(scale_type: ScaleType, expected: List[str]) -> None:
    scale = generate_scale(C4, scale_type)
    assert [d.abbreviation for d in scale.degrees] == expected
    assert [d.degree for d in scale.degrees] == list(range(1, len(expected) + 1))


def test_degree_names() -> None:
    scale = generate_scale(C4, ScaleType.HarmonicMinor)
    assert scale.degrees[2].name == "minor third"
    assert scale.degrees[6].name == "major seventh"
    assert scale.degrees[6].interval_from_root == 11


@pytest.mark.parametrize(
    "pattern",
    [
        [2, 2, 1, 2, 2, 2],
        [2, 2, 1, 2, 2, 2, 2],
        [],
        [0, 12],
        [-1, 13],
        [6.0, 6.0],
    ],
)
def test_invalid_pattern(pattern: List[int]) -> None:
    with pytest.raises(InvalidScaleDefinition) as info:
        generate_scale(C4, pattern)
    assert info.value.pattern == tuple(pattern)


def test_pattern_summing_to_eleven() -> None:
    with pytest.raises(InvalidScaleDefinition) as info:
        generate_scale(C4, [2, 2, 1, 2, 2, 1, 1])
    assert "11" in info.value.reason


@given(
    st.sampled_from(list(NoteName)),
    st.sampled_from(list(ScaleType)),
    st.sampled_from(list(NoteName)),
    st.integers(min_value=0, max_value=8),
)
def test_membership_ignores_octave_and_spelling(
    root_name: NoteName, scale_type: ScaleType, other_name: NoteName, octave: int
) -> None:
    """Membership depends only on pitch class."""
    scale = generate_scale(Note(root_name, 4), scale_type)
    other = Note(other_name, octave)
    expected = any(
        n.chromatic_position == other.chromatic_position for n in scale.notes
    )
    assert contains_pitch(scale, other) == expected


@given(st.sampled_from(list(NoteName)), st.sampled_from(list(ScaleType)))
def test_scale_shape(root_name: NoteName, scale_type: ScaleType) -> None:
    root = Note(root_name, 4)
    scale = generate_scale(root, scale_type)
    steps = get_scale_definition(scale_type).steps
    assert len(scale.notes) == len(steps)
    assert scale.notes[0].pitch_equals(root)
    assert len(scale.pitch_classes) == len(steps)
    offsets = [d.interval_from_root for d in scale.degrees]
    assert offsets == sorted(offsets)
    for note, degree in zip(scale.notes, scale.degrees):
        assert (note.midi - root.midi) == degree.interval_from_root


def test_degree_of() -> None:
    scale = generate_scale(C4, ScaleType.Major)
    degree = degree_of(scale, Note(NoteName.G, 2))
    assert degree is not None
    assert degree.degree == 5
    assert degree_of(scale, Note(NoteName.Fs, 2)) is None


@pytest.mark.parametrize(
    "name, expected",
    [
        ("major", ScaleType.Major),
        ("Ionian", ScaleType.Major),
        ("aeolian", ScaleType.NaturalMinor),
        ("Natural Minor", ScaleType.NaturalMinor),
        (" Minor Pentatonic ", ScaleType.PentatonicMinor),
        ("dominant", ScaleType.Mixolydian),
        ("bebop", None),
    ],
)
def test_find_scale_type(name: str, expected: ScaleType) -> None:
    assert find_scale_type(name) == expected


def test_modes() -> None:
    dorian = get_scale_definition(ScaleType.Dorian)
    assert dorian.mode is not None
    assert dorian.mode.parent_scale == ScaleType.Major
    assert dorian.mode.starting_degree == 2
    assert get_scale_definition(ScaleType.Blues).mode is None


@pytest.mark.parametrize(
    "scale_type, expected",
    [
        (ScaleType.Major, ["C", "Dm", "Em", "F", "G", "Am", "Bdim"]),
        (ScaleType.NaturalMinor, ["Cm", "Ddim", "Eb", "Fm", "Gm", "Ab", "Bb"]),
        (ScaleType.HarmonicMinor, ["Cm", "Ddim", "Ebaug", "Fm", "G", "Ab", "Bdim"]),
    ],
)
def test_diatonic_triads(scale_type: ScaleType, expected: List[str]) -> None:
    triads = diatonic_triads(generate_scale(C4, scale_type))
    assert [c.symbol for c in triads] == expected


@pytest.mark.parametrize(
    "degree, quality, expected",
    [
        (1, ChordQuality.Major, "I"),
        (2, ChordQuality.Minor, "ii"),
        (7, ChordQuality.Diminished, "vii°"),
        (3, ChordQuality.Augmented, "III+"),
    ],
)
def test_roman_numeral(degree: int, quality: ChordQuality, expected: str) -> None:
    assert roman_numeral(degree, quality) == expected


def test_progression_chords() -> None:
    g_major = generate_scale(Note(NoteName.G, 3), ScaleType.Major)
    chords = progression_chords(g_major, ("I", "V", "vi", "IV"))
    assert [c.symbol for c in chords] == ["G", "D", "Em", "C"]
    with pytest.raises(InvalidSymbol):
        progression_chords(g_major, ("I", "III"))


@pytest.mark.parametrize("scale_type", list(ScaleType))
def test_common_progressions_resolve(scale_type: ScaleType) -> None:
    """Every listed progression uses only triads of its scale."""
    scale = generate_scale(C4, scale_type)
    definition = get_scale_definition(scale_type)
    assert scale.common_progressions == definition.common_progressions
    for progression in scale.common_progressions:
        chords = progression_chords(scale, progression)
        assert len(chords) == len(progression)
        assert all(c.root.chromatic_position in scale.pitch_classes for c in chords)


def test_scale_genres() -> None:
    assert "flamenco" in generate_scale(C4, ScaleType.Phrygian).genres
    custom = generate_scale(C4, [2, 2, 1, 2, 2, 2, 1])
    assert custom.definition is None
    assert custom.genres == ()
    assert custom.common_progressions == ()
    assert len(diatonic_triads(custom)) == 7


@pytest.mark.parametrize(
    "pattern",
    [[2, 2, 3, 2, 3], [1, 1, 1, 1, 1, 1, 6]],
)
def test_diatonic_triads_invalid(pattern: List[int]) -> None:
    with pytest.raises(InvalidScaleDefinition):
        diatonic_triads(generate_scale(C4, pattern))
