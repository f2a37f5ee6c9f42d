"""Tests for MIDI message helpers."""

from dataclasses import replace

import pytest
from mido.frozen import FrozenMessage

from fretlab.base import InvalidPitch
from fretlab.chord import ChordQuality, build_chord_tones
from fretlab.fingering import find_fingerings
from fretlab.fretboard import FretboardConfig, compute_fretboard
from fretlab.midi import (
    chord_position_msgs,
    chord_position_off_msgs,
    fret_note_msg,
    is_note_off_msg,
    is_note_on_msg,
    note_from_msg,
    note_off_msg,
    note_on_msg,
    note_to_midi,
)
from fretlab.note import DisplayMode, Note, NoteName
from fretlab.tuning import TuningName, get_tuning

STANDARD = get_tuning(TuningName.Standard)


def test_note_to_midi() -> None:
    assert note_to_midi(Note(NoteName.C, 4)) == 60
    assert note_to_midi(Note(NoteName.E, 2)) == 40
    assert note_to_midi(Note(NoteName.G, 9)) == 127
    with pytest.raises(InvalidPitch) as info:
        note_to_midi(Note(NoteName.Gs, 9))
    assert info.value.value == 128
    assert info.value.field == "midi note"


def test_note_messages() -> None:
    on = note_on_msg(Note(NoteName.A, 4), velocity=90, channel=2)
    assert on == FrozenMessage(type="note_on", channel=2, note=69, velocity=90)
    assert is_note_on_msg(on)
    assert not is_note_off_msg(on)
    off = note_off_msg(Note(NoteName.A, 4), channel=2)
    assert off.velocity == 0
    assert is_note_off_msg(off)
    assert not is_note_on_msg(off)
    assert is_note_off_msg(FrozenMessage(type="note_off", note=69))


def test_note_from_msg() -> None:
    msg = FrozenMessage(type="note_on", note=61, velocity=64)
    assert note_from_msg(msg) == Note(NoteName.Cs, 4)
    assert note_from_msg(msg, DisplayMode.Flat) == Note(NoteName.Db, 4)
    assert note_from_msg(FrozenMessage(type="control_change")) is None


def test_fret_note_msg() -> None:
    board = compute_fretboard(FretboardConfig())
    low_e = board.string(6)
    assert low_e is not None
    msg = fret_note_msg(low_e.frets[3])
    assert msg is not None
    assert msg.note == 43
    assert msg.velocity == 100
    assert msg.channel == 0
    muted = replace(low_e.frets[3], is_muted=True)
    assert fret_note_msg(muted) is None


def test_chord_position_msgs() -> None:
    tones = build_chord_tones(Note(NoteName.G, 2), ChordQuality.Major)
    position = find_fingerings(tones, STANDARD)[0]
    msgs = chord_position_msgs(position, STANDARD)
    assert [m.note for m in msgs] == [43, 47, 50, 55, 59, 67]
    assert all(is_note_on_msg(m) for m in msgs)
    offs = chord_position_off_msgs(position, STANDARD)
    assert [m.note for m in offs] == [m.note for m in msgs]
    assert all(is_note_off_msg(m) for m in offs)


def test_chord_position_skips_muted() -> None:
    tones = build_chord_tones(Note(NoteName.C, 3), ChordQuality.Major)
    positions = find_fingerings(tones, STANDARD)
    position = next(p for p in positions if p.muted_count > 0)
    msgs = chord_position_msgs(position, STANDARD, velocity=70, channel=5)
    assert len(msgs) == 6 - position.muted_count
    assert all(m.velocity == 70 and m.channel == 5 for m in msgs)
    notes = [m.note for m in msgs]
    assert notes == sorted(notes)
