"""Audio-related exceptions.

This module defines exceptions for the audio side of the sampler:
- AudioDeviceError: No usable output device
- AudioStreamError: A stream failed to open, start, stop or write
- SampleLoadError: Sample file missing, invalid, or its stream unavailable
- SampleDecodeError: PCM data could not be read mid-playback
"""

from pathlib import Path
from typing import Optional

from .base import BeatSamplerError, SampleError


class AudioDeviceError(BeatSamplerError):
    """Audio device initialization or operation failed."""

    def __init__(self, user_message: str, device_id: Optional[int] = None, **kwargs):
        """
        Initialize audio device error.

        Args:
            user_message: User-friendly error message
            device_id: The device ID that failed (if applicable)
        """
        super().__init__(user_message, device=device_id, **kwargs)
        self.device_id = device_id


class AudioStreamError(AudioDeviceError):
    """An output stream operation failed."""

    def __init__(self, operation: str, original_error: Optional[str] = None, device_id: Optional[int] = None):
        """
        Initialize stream error.

        Args:
            operation: What the stream was doing ("open", "start", "write", ...)
            original_error: The original error message from the audio library
            device_id: The device ID involved (if known)
        """
        user_msg = f"Audio stream failed to {operation}."
        tech_msg = user_msg
        if original_error:
            tech_msg += f" Original error: {original_error}"

        super().__init__(
            user_msg,
            device_id=device_id,
            technical_message=tech_msg,
            recoverable=True,
            recovery_hint="Run 'beatsampler audio list' to check the output device.",
        )
        self.operation = operation


class SampleLoadError(SampleError):
    """Sample could not be loaded."""

    def __init__(self, path: Path, reason: str):
        """
        Initialize sample load error.

        Args:
            path: Path of the sample file
            reason: Why loading failed
        """
        super().__init__(
            f"Failed to load sound {path.name}: {reason}",
            path=path,
            technical_message=f"Failed to load {path}: {reason}",
            recovery_hint="Sample files must be uncompressed PCM WAV files.",
        )
        self.reason = reason


class SampleDecodeError(SampleError):
    """PCM data could not be decoded during playback."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Failed to read the PCM buffer of {path.name}",
            path=path,
            technical_message=f"Failed to read the PCM buffer of {path}: {reason}",
            recovery_hint="The file may be truncated or corrupt; reload it before playing again.",
        )
        self.reason = reason
