"""Event dispatch, background plays and the application lifecycle."""

from .application import SamplerApplication
from .dispatcher import AmbientSelector, Dispatcher
from .sequencer import DiagnosticSequencer
from .tasks import PlaybackTasks

__all__ = [
    "AmbientSelector",
    "DiagnosticSequencer",
    "Dispatcher",
    "PlaybackTasks",
    "SamplerApplication",
]
