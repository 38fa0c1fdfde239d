"""MIDI transport adapters and input events."""

from .events import STOP_SYSEX, MidiEvent, NoteEnd, NoteStart, SysEx, parse_message
from .input_manager import MidiInputManager
from .output_manager import MidiOutputManager

__all__ = [
    "MidiEvent",
    "MidiInputManager",
    "MidiOutputManager",
    "NoteEnd",
    "NoteStart",
    "STOP_SYSEX",
    "SysEx",
    "parse_message",
]
