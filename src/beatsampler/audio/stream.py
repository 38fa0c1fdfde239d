"""Blocking audio output streams and device queries.

sounddevice is imported inside each function: loading it needs the PortAudio
shared library, and the rest of the package must stay importable without one.
"""

import logging
from typing import Any, Optional, Protocol

import numpy as np
import numpy.typing as npt

from beatsampler.exceptions import AudioDeviceError, wrap_audio_device_error

logger = logging.getLogger(__name__)


class OutputStream(Protocol):
    """What the playback loop needs from an output stream."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def write(self, frames: npt.NDArray[np.int32]) -> None: ...

    def close(self) -> None: ...


class AudioStream:
    """
    Blocking int32 output stream on top of sounddevice.

    Unlike a callback stream, ``write`` blocks until the device has accepted
    the frames, which is what paces the playback loop. All PortAudio failures
    surface as AudioStreamError.
    """

    def __init__(self, stream: Any, device: Optional[int] = None):
        """
        Args:
            stream: An opened sounddevice.OutputStream
            device: Output device ID the stream was opened on
        """
        self._stream = stream
        self.device = device

    @classmethod
    def open(
        cls,
        channels: int,
        sample_rate: int,
        buffer_size: int,
        device: Optional[int] = None,
    ) -> "AudioStream":
        """
        Open (but do not start) an output stream.

        Args:
            channels: Number of output channels
            sample_rate: Sample rate in Hz
            buffer_size: Frames per hardware buffer
            device: Output device ID (None for default)

        Raises:
            AudioStreamError: If PortAudio refuses the configuration
        """
        import sounddevice as sd

        try:
            stream = sd.OutputStream(
                samplerate=sample_rate,
                blocksize=buffer_size,
                channels=channels,
                dtype='int32',
                device=device,
            )
        except (sd.PortAudioError, ValueError) as e:
            raise wrap_audio_device_error(e, "open", device_id=device) from e

        logger.debug(
            f"Opened output stream: {channels} ch, {sample_rate} Hz, "
            f"buffer {buffer_size} frames, latency {stream.latency * 1000:.1f}ms"
        )
        return cls(stream, device)

    def _require_open(self):
        if self._stream is None:
            raise wrap_audio_device_error(RuntimeError("stream is closed"), "use", self.device)
        return self._stream

    def start(self) -> None:
        """Start the stream; no-op if already running."""
        import sounddevice as sd

        stream = self._require_open()
        if not stream.stopped:
            return
        try:
            stream.start()
        except sd.PortAudioError as e:
            raise wrap_audio_device_error(e, "start", self.device) from e

    def stop(self) -> None:
        """Stop the stream after pending frames have played."""
        import sounddevice as sd

        stream = self._require_open()
        try:
            stream.stop(ignore_errors=False)
        except sd.PortAudioError as e:
            raise wrap_audio_device_error(e, "stop", self.device) from e

    def write(self, frames: npt.NDArray[np.int32]) -> None:
        """
        Write frames, blocking until the device accepts them.

        Args:
            frames: C-contiguous int32 array shaped (frames, channels)
        """
        import sounddevice as sd

        stream = self._require_open()
        try:
            underflowed = stream.write(frames)
        except (sd.PortAudioError, TypeError, ValueError) as e:
            raise wrap_audio_device_error(e, "write", self.device) from e
        if underflowed:
            logger.debug("Output underflow")

    def close(self) -> None:
        """Close the stream. Safe to call repeatedly."""
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        stream.close(ignore_errors=True)

    @property
    def closed(self) -> bool:
        return self._stream is None

    @property
    def active(self) -> bool:
        return self._stream is not None and self._stream.active


class AudioDevice:
    """Read-only queries about the host's audio output devices."""

    @staticmethod
    def default_output() -> dict:
        """
        Return the default output device description.

        Raises:
            AudioDeviceError: If the host has no usable output device
        """
        try:
            import sounddevice as sd

            info = sd.query_devices(kind='output')
        except (OSError, ValueError) as e:
            # PortAudioError is an OSError; so is a missing PortAudio library
            raise AudioDeviceError(
                "No audio output device available.",
                technical_message=f"Failed to query default output device: {e}",
                recovery_hint="Check that an output device is connected and not in use.",
            ) from e

        if not info or info.get('max_output_channels', 0) < 1:
            raise AudioDeviceError(
                "No audio output device available.",
                recovery_hint="Check that an output device is connected and not in use.",
            )
        return dict(info)

    @staticmethod
    def log_default_output() -> dict:
        """Log the default output device like a startup banner."""
        info = AudioDevice.default_output()
        logger.info(
            f"Default output: {info['name']} - {info['default_samplerate']} Hz, "
            f"max channels: {info['max_output_channels']}"
        )
        return info

    @staticmethod
    def list_output_devices() -> list[tuple[int, str, str, dict]]:
        """
        List all audio output devices.

        Returns:
            List of (device_id, device_name, host_api_name, device_info)
        """
        import sounddevice as sd

        devices = sd.query_devices()
        hostapis = sd.query_hostapis()

        available = []
        for i, device in enumerate(devices):
            if device['max_output_channels'] > 0:
                hostapi_name = hostapis[device['hostapi']]['name']
                available.append((i, device['name'], hostapi_name, device))
        return available

    @staticmethod
    def get_default_device() -> Optional[int]:
        """Get the default output device ID, or None if unset."""
        import sounddevice as sd

        device = sd.default.device[1]
        return device if device is not None and device >= 0 else None
