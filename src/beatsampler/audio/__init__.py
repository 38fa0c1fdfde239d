"""Sample playback and shared-stream arbitration."""

from .arbiter import PlaybackTicket, StreamArbiter
from .decoder import WavDecoder
from .engine import Engine
from .playback import DEFAULT_CHUNK_FRAMES, PlaybackResult, play_chunks
from .sample import Sample, StreamOwnership
from .stream import AudioDevice, AudioStream, OutputStream

__all__ = [
    "AudioDevice",
    "AudioStream",
    "DEFAULT_CHUNK_FRAMES",
    "Engine",
    "OutputStream",
    "PlaybackResult",
    "PlaybackTicket",
    "Sample",
    "StreamArbiter",
    "StreamOwnership",
    "WavDecoder",
    "play_chunks",
]
