"""
Custom exception hierarchy for beatsampler.

## Exception Hierarchy

```
BeatSamplerError (base)
├── SetupError
│   └── MidiPortNotFoundError
├── AudioDeviceError
│   └── AudioStreamError
├── SampleError
│   ├── SampleLoadError
│   └── SampleDecodeError
└── ConfigurationError
    ├── ConfigFileInvalidError
    └── ConfigValidationError
```

Setup errors are fatal and end the process with exit code 1. Sample errors
are fatal only to the one sample involved. Stream errors during playback are
retried once by the playback loop and never crash the process.
"""

from .audio import (
    AudioDeviceError,
    AudioStreamError,
    SampleDecodeError,
    SampleLoadError,
)
from .base import BeatSamplerError, SampleError, SetupError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    ErrorCollector,
    collect_errors,
    format_error_for_display,
    wrap_audio_device_error,
    wrap_pydantic_error,
)
from .midi import MidiPortNotFoundError

__all__ = [
    # Audio
    "AudioDeviceError",
    "AudioStreamError",
    "SampleDecodeError",
    "SampleLoadError",
    # Base
    "BeatSamplerError",
    "SampleError",
    "SetupError",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # MIDI
    "MidiPortNotFoundError",
    # Handlers
    "ErrorCollector",
    "collect_errors",
    "format_error_for_display",
    "wrap_audio_device_error",
    "wrap_pydantic_error",
]
