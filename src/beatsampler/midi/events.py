"""MIDI input events the sampler reacts to."""

from dataclasses import dataclass
from typing import Optional, Union

import mido

# MIDI Machine Control "stop", as sent by the controller's transport stop button
STOP_SYSEX: tuple[int, ...] = (0x7F, 0x7F, 0x06, 0x01)


@dataclass(frozen=True)
class NoteStart:
    """A pad was pressed."""

    channel: int
    key: int
    velocity: int


@dataclass(frozen=True)
class NoteEnd:
    """A pad was released."""

    channel: int
    key: int


@dataclass(frozen=True)
class SysEx:
    """System-exclusive payload, without the F0/F7 framing bytes."""

    data: tuple[int, ...]

    @property
    def is_stop(self) -> bool:
        """True only for the exact transport stop sequence."""
        return self.data == STOP_SYSEX


MidiEvent = Union[NoteStart, NoteEnd, SysEx]


def parse_message(msg: mido.Message) -> Optional[MidiEvent]:
    """
    Parse a mido message into a sampler event.

    Note on with velocity 0 is a note end.

    Args:
        msg: MIDI message

    Returns:
        NoteStart, NoteEnd, SysEx, or None for anything else
    """
    if msg.type == 'note_on':
        if msg.velocity > 0:
            return NoteStart(msg.channel, msg.note, msg.velocity)
        return NoteEnd(msg.channel, msg.note)

    if msg.type == 'note_off':
        return NoteEnd(msg.channel, msg.note)

    if msg.type == 'sysex':
        return SysEx(tuple(msg.data))

    return None
