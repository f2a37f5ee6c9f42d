"""Tests for fretboard grid computation."""

from dataclasses import replace

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fretlab.base import OutOfRange, UnknownTuning
from fretlab.chord import ChordQuality, build_chord
from fretlab.fingering import ChordPosition, VoicingType, find_fingerings
from fretlab.fretboard import (
    DisplayOptions,
    FretboardConfig,
    FretCoord,
    HighlightSource,
    NamingConvention,
    check_fret_range,
    compute_fretboard,
)
from fretlab.highlight import HighlightType
from fretlab.note import Note, NoteName
from fretlab.scale import ScaleType, generate_scale
from fretlab.tuning import TuningName, get_tuning
from tests.fretlab.hypo import configure_hypo

configure_hypo()

C_MAJOR = generate_scale(Note(NoteName.C, 4), ScaleType.Major)
C_MAJOR_PCS = frozenset([0, 2, 4, 5, 7, 9, 11])
DEFAULT_CONFIG = FretboardConfig()
SCALE_CONFIG = replace(DEFAULT_CONFIG, highlight_source=HighlightSource.scale(C_MAJOR))


def test_default_grid() -> None:
    board = compute_fretboard(DEFAULT_CONFIG)
    assert [s.string_number for s in board.strings] == [6, 5, 4, 3, 2, 1]
    assert all(len(s.frets) == 13 for s in board.strings)
    assert len(list(board)) == 78
    assert board.root_note is None
    for string in board.strings:
        for fret in string.frets:
            assert fret.highlight_type == HighlightType.Off
            assert not fret.is_muted
            assert fret.interval_label is None
            assert not fret.is_highlighted


def test_c_major_on_low_e() -> None:
    board = compute_fretboard(SCALE_CONFIG)
    low_e = board.string(6)
    assert low_e is not None
    assert str(low_e.open_note) == "E2"
    for fret in low_e.frets:
        if fret.position == 8:
            assert fret.highlight_type == HighlightType.Root
            assert str(fret.note) == "C3"
        elif fret.note.chromatic_position in C_MAJOR_PCS:
            assert fret.highlight_type == HighlightType.ScaleNote
        else:
            assert fret.highlight_type == HighlightType.Off
    assert low_e.frets[1].note.name == NoteName.F


def test_scale_interval_labels() -> None:
    board = compute_fretboard(SCALE_CONFIG)
    low_e = board.string(6)
    assert low_e is not None
    assert low_e.frets[0].interval_label == "3"
    assert low_e.frets[8].interval_label == "R"
    assert low_e.frets[2].interval_label == "b5"


def test_every_fret_note() -> None:
    board = compute_fretboard(DEFAULT_CONFIG)
    for string in board.strings:
        for fret in string.frets:
            assert fret.note.midi == string.open_note.midi + fret.position


@given(
    st.integers(min_value=0, max_value=24),
    st.integers(min_value=0, max_value=24),
    st.sampled_from(list(TuningName)),
)
def test_fret_range(start: int, end: int, tuning_name: TuningName) -> None:
    """Each string holds exactly the frets of the displayed range."""
    config = FretboardConfig(tuning=tuning_name, start_fret=start, end_fret=end)
    if start > end:
        with pytest.raises(OutOfRange):
            compute_fretboard(config)
        return
    board = compute_fretboard(config)
    for string in board.strings:
        assert [f.position for f in string.frets] == list(range(start, end + 1))
        for fret in string.frets:
            assert fret.note.midi == string.open_note.midi + fret.position


@pytest.mark.parametrize(
    "start, end",
    [(5, 2), (-1, 12), (0, 25), (25, 26)],
)
def test_invalid_range(start: int, end: int) -> None:
    config = replace(DEFAULT_CONFIG, start_fret=start, end_fret=end)
    with pytest.raises(OutOfRange) as info:
        compute_fretboard(config)
    assert info.value.start_fret == start
    assert info.value.end_fret == end


def test_max_fret_override() -> None:
    config = replace(DEFAULT_CONFIG, end_fret=15, max_fret=12)
    with pytest.raises(OutOfRange):
        compute_fretboard(config)


def test_unknown_tuning() -> None:
    with pytest.raises(UnknownTuning):
        compute_fretboard(replace(DEFAULT_CONFIG, tuning="Nashville"))


def test_chord_root_wins() -> None:
    chord = build_chord(Note(NoteName.C, 3), ChordQuality.Major)
    board = compute_fretboard(
        replace(DEFAULT_CONFIG, highlight_source=HighlightSource.chord(chord))
    )
    assert board.root_note == chord.root
    a_string = board.string(5)
    assert a_string is not None
    assert a_string.frets[3].highlight_type == HighlightType.Root
    assert a_string.frets[7].highlight_type == HighlightType.ChordTone
    assert a_string.frets[5].highlight_type == HighlightType.Off
    assert a_string.frets[7].interval_label == "3"


def test_interval_mode() -> None:
    config = replace(DEFAULT_CONFIG, root_note=Note(NoteName.A, 2))
    board = compute_fretboard(config)
    a_string = board.string(5)
    assert a_string is not None
    assert a_string.frets[0].highlight_type == HighlightType.Root
    assert a_string.frets[12].highlight_type == HighlightType.Root
    assert a_string.frets[3].highlight_type == HighlightType.Interval
    assert a_string.frets[3].interval_label == "b3"
    assert a_string.frets[7].interval_label == "5"


def test_root_note_ignored_with_source() -> None:
    config = replace(SCALE_CONFIG, root_note=Note(NoteName.A, 2))
    board = compute_fretboard(config)
    assert board.root_note == C_MAJOR.root
    assert len(board.positions_with(HighlightType.Interval)) == 0


@pytest.mark.parametrize(
    "naming, expected",
    [
        (NamingConvention.Mixed, NoteName.Bb),
        (NamingConvention.Sharps, NoteName.As),
        (NamingConvention.Flats, NoteName.Bb),
    ],
)
def test_naming_with_flat_scale(naming: NamingConvention, expected: NoteName) -> None:
    f_major = generate_scale(Note(NoteName.F, 3), ScaleType.Major)
    config = FretboardConfig(
        highlight_source=HighlightSource.scale(f_major),
        display=DisplayOptions(naming=naming),
    )
    a_string = compute_fretboard(config).string(5)
    assert a_string is not None
    assert a_string.frets[1].note.name == expected


def test_default_naming_uses_sharps() -> None:
    board = compute_fretboard(DEFAULT_CONFIG)
    low_e = board.string(6)
    assert low_e is not None
    assert low_e.frets[2].note.name == NoteName.Fs
    flats = compute_fretboard(
        replace(DEFAULT_CONFIG, display=DisplayOptions(naming=NamingConvention.Flats))
    )
    flat_low_e = flats.string(6)
    assert flat_low_e is not None
    assert flat_low_e.frets[2].note.name == NoteName.Gb


def test_voicing_annotations() -> None:
    chord = build_chord(Note(NoteName.C, 3), ChordQuality.Major)
    positions = find_fingerings(chord.chord_tones, get_tuning(TuningName.Standard))
    voicing = next(p for p in positions if p.finger_positions == (None, 3, 2, 0, 1, 0))
    source = HighlightSource.chord(chord, voicing)
    board = compute_fretboard(replace(DEFAULT_CONFIG, highlight_source=source))
    low_e = board.string(6)
    assert low_e is not None
    assert [f.is_muted for f in low_e.frets[:5]] == [True, True, True, True, False]
    a_string = board.string(5)
    assert a_string is not None
    assert not any(f.is_muted for f in a_string.frets)
    assert a_string.frets[3].finger_number == 3
    assert a_string.frets[2].finger_number is None
    g_string = board.string(3)
    assert g_string is not None
    assert g_string.frets[0].finger_number == 0
    b_string = board.string(2)
    assert b_string is not None
    assert b_string.frets[1].finger_number == 1


def test_interaction_flags() -> None:
    config = replace(
        DEFAULT_CONFIG,
        hovered_fret=FretCoord(1, 5),
        pressed_frets=frozenset([FretCoord(2, 1), FretCoord(6, 3)]),
        selected_notes=frozenset([Note(NoteName.A, 4)]),
    )
    board = compute_fretboard(config)
    hovered = [
        (s.string_number, f.position)
        for s in board.strings
        for f in s.frets
        if f.is_hovered
    ]
    assert hovered == [(1, 5)]
    pressed = {
        (s.string_number, f.position)
        for s in board.strings
        for f in s.frets
        if f.is_pressed
    }
    assert pressed == {(2, 1), (6, 3)}
    selected = {
        (s.string_number, f.position)
        for s in board.strings
        for f in s.frets
        if f.is_selected
    }
    assert selected == {(1, 5), (2, 10)}
    fret = board.fret_at(FretCoord(2, 10))
    assert fret is not None
    assert fret.is_highlighted
    assert fret.highlight_type == HighlightType.Off


def test_find_positions() -> None:
    board = compute_fretboard(DEFAULT_CONFIG)
    found = board.find_positions(Note(NoteName.C, 4))
    assert [(p.string_number, p.fret_number) for p in found] == [
        (4, 10),
        (3, 5),
        (2, 1),
    ]
    assert len(board.find_positions(Note(NoteName.C, 4), match_octave=False)) == 6
    assert board.string(7) is None
    assert board.fret_at(FretCoord(1, 13)) is None


def test_reference_octave() -> None:
    board = compute_fretboard(replace(DEFAULT_CONFIG, reference_octave=3))
    low_e = board.string(6)
    assert low_e is not None
    assert str(low_e.frets[0].note) == "E3"


def test_memoized() -> None:
    config = replace(SCALE_CONFIG, start_fret=3, end_fret=7)
    assert compute_fretboard(config) is compute_fretboard(config)
    assert compute_fretboard(config) == compute_fretboard(replace(config))


def test_check_fret_range() -> None:
    check_fret_range(0, 24, 24)
    check_fret_range(7, 7, 12)
    with pytest.raises(OutOfRange) as info:
        check_fret_range(3, 13, 12)
    assert info.value.max_fret == 12


def test_minor_chord_spelled_flat() -> None:
    chord = build_chord(Note(NoteName.C, 3), ChordQuality.Minor)
    board = compute_fretboard(
        replace(DEFAULT_CONFIG, highlight_source=HighlightSource.chord(chord))
    )
    a_string = board.string(5)
    assert a_string is not None
    assert str(a_string.frets[6].note) == "Eb3"
    assert a_string.frets[6].highlight_type == HighlightType.ChordTone
    # Pitches outside the chord keep the default sharp spelling
    assert a_string.frets[1].note.name == NoteName.As


def test_fully_muted_voicing() -> None:
    chord = build_chord(Note(NoteName.C, 3), ChordQuality.Major)
    muted = ChordPosition("Muted", 0, (None,) * 6, (None,) * 6, VoicingType.Closed)
    source = HighlightSource.chord(chord, muted)
    board = compute_fretboard(replace(DEFAULT_CONFIG, highlight_source=source))
    for string in board.strings:
        for fret in string.frets:
            assert not fret.is_muted
            assert fret.finger_number is None
