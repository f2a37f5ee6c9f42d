"""MIDI helpers for auditioning fretboard notes and chord voicings.

Frets and chord positions are plain data; these helpers turn them into
``mido`` frozen messages so a caller can preview them on any MIDI output.
"""

from __future__ import annotations

from typing import List, Optional, cast

from mido.frozen import FrozenMessage

from fretlab import constants
from fretlab.base import InvalidPitch
from fretlab.fingering import ChordPosition
from fretlab.fretboard import Fret
from fretlab.note import DisplayMode, Note, note_from_midi
from fretlab.tuning import Tuning


def is_note_on_msg(msg: FrozenMessage) -> bool:
    """Check if a message is a true note-on message.

    Args:
        msg: The MIDI message to check.

    Returns:
        True if the message is note_on with velocity > 0.
    """
    return cast(bool, msg.type == "note_on" and msg.velocity > 0)


def is_note_off_msg(msg: FrozenMessage) -> bool:
    """Check if a message is a note-off message.

    Args:
        msg: The MIDI message to check.

    Returns:
        True if the message is note_off or note_on with velocity 0.
    """
    return cast(
        bool, (msg.type == "note_on" and msg.velocity == 0) or msg.type == "note_off"
    )


def note_to_midi(note: Note) -> int:
    """Get the MIDI note number of a note (C4 = 60).

    Raises:
        InvalidPitch: If the pitch lies outside the MIDI range 0-127.
    """
    value = note.midi
    if value < 0 or value > 127:
        raise InvalidPitch(value, field="midi note")
    return value


def note_from_msg(
    msg: FrozenMessage, preference: DisplayMode = DisplayMode.Sharp
) -> Optional[Note]:
    """Get the note carried by a note message, or None for other messages."""
    if msg.type == "note_on" or msg.type == "note_off":
        return note_from_midi(cast(int, msg.note), preference)  # pyright: ignore
    else:
        return None


def note_on_msg(
    note: Note,
    velocity: int = constants.DEFAULT_VELOCITY,
    channel: int = constants.DEFAULT_CHANNEL,
) -> FrozenMessage:
    """Create a note-on message for a note."""
    return FrozenMessage(
        type="note_on", channel=channel, note=note_to_midi(note), velocity=velocity
    )


def note_off_msg(note: Note, channel: int = constants.DEFAULT_CHANNEL) -> FrozenMessage:
    """Create a note-off message (note-on with velocity 0) for a note."""
    return note_on_msg(note, velocity=0, channel=channel)


def fret_note_msg(
    fret: Fret,
    velocity: int = constants.DEFAULT_VELOCITY,
    channel: int = constants.DEFAULT_CHANNEL,
) -> Optional[FrozenMessage]:
    """Create a note-on message for a fret cell.

    Returns:
        The message, or None if the fret is muted.
    """
    if fret.is_muted:
        return None
    return note_on_msg(fret.note, velocity, channel)


def chord_position_msgs(
    position: ChordPosition,
    tuning: Tuning,
    velocity: int = constants.DEFAULT_VELOCITY,
    channel: int = constants.DEFAULT_CHANNEL,
) -> List[FrozenMessage]:
    """Create note-on messages for every sounding string of a voicing.

    Args:
        position: The voicing to play.
        tuning: The tuning the voicing was found in.
        velocity: MIDI velocity (1-127).
        channel: Zero-based MIDI channel.

    Returns:
        One message per sounding string, lowest string first.
    """
    return [
        note_on_msg(note, velocity, channel)
        for note in position.sounding_notes(tuning)
        if note is not None
    ]


def chord_position_off_msgs(
    position: ChordPosition,
    tuning: Tuning,
    channel: int = constants.DEFAULT_CHANNEL,
) -> List[FrozenMessage]:
    """Create note-off messages matching ``chord_position_msgs``."""
    return [
        note_off_msg(note, channel)
        for note in position.sounding_notes(tuning)
        if note is not None
    ]
