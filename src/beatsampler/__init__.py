"""beatsampler: trigger WAV samples from MIDI pad controllers."""

__version__ = "0.1.0"

from .audio import Engine, PlaybackResult, Sample
from .core import SamplerApplication

__all__ = [
    "Engine",
    "PlaybackResult",
    "Sample",
    "SamplerApplication",
]
