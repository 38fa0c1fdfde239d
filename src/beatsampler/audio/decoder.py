"""Chunked PCM WAV decoder."""

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import numpy.typing as npt
import soundfile as sf

from beatsampler.exceptions import SampleDecodeError, SampleLoadError

logger = logging.getLogger(__name__)

# Containers and sample encodings accepted as "uncompressed PCM"
PCM_FORMATS = frozenset({"WAV", "WAVEX"})
PCM_SUBTYPES = frozenset({"PCM_U8", "PCM_S8", "PCM_16", "PCM_24", "PCM_32"})


class WavDecoder:
    """
    Streaming decoder over an open PCM WAV file.

    Reads fixed-size chunks of frames into a caller-owned int32 buffer,
    widening narrower PCM encodings to the full 32-bit range. The file stays
    open for the decoder's lifetime so a sample can be replayed by rewinding
    instead of reopening.
    """

    def __init__(self, path: Path, sound_file: sf.SoundFile):
        self.path = path
        self._file = sound_file

    @classmethod
    def open(cls, path: Path) -> "WavDecoder":
        """
        Open a WAV file and validate its header.

        Args:
            path: Path to the sample file

        Returns:
            Decoder positioned on the first PCM frame

        Raises:
            SampleLoadError: If the file is missing or not a PCM WAV file
        """
        if not path.exists():
            raise SampleLoadError(path, "file not found")

        try:
            sound_file = sf.SoundFile(str(path))
        except (RuntimeError, OSError) as e:
            raise SampleLoadError(path, f"not a valid WAV file ({e})") from e

        if sound_file.format not in PCM_FORMATS or sound_file.subtype not in PCM_SUBTYPES:
            found = f"{sound_file.format}/{sound_file.subtype}"
            sound_file.close()
            raise SampleLoadError(path, f"not an uncompressed PCM WAV file ({found})")

        logger.debug(
            f"Opened {path.name}: {sound_file.channels} ch, {sound_file.samplerate} Hz, "
            f"{sound_file.frames} frames, {sound_file.subtype}"
        )
        return cls(path, sound_file)

    @property
    def channels(self) -> int:
        return self._file.channels

    @property
    def sample_rate(self) -> int:
        return self._file.samplerate

    @property
    def num_frames(self) -> int:
        return self._file.frames

    @property
    def position(self) -> Optional[int]:
        """Current frame position, or None once closed."""
        if self._file.closed:
            return None
        return self._file.tell()

    @property
    def closed(self) -> bool:
        return self._file.closed

    def read_into(self, buffer: npt.NDArray[np.int32]) -> int:
        """
        Decode the next chunk into ``buffer``.

        Args:
            buffer: int32 array shaped (frames, channels)

        Returns:
            Number of frames decoded; 0 once the data is exhausted

        Raises:
            SampleDecodeError: If the PCM data cannot be read
        """
        try:
            chunk = self._file.read(out=buffer)
        except (RuntimeError, ValueError, OSError) as e:
            raise SampleDecodeError(self.path, str(e)) from e
        return len(chunk)

    def rewind(self) -> None:
        """Seek back to the first PCM frame."""
        self._file.seek(0)

    def close(self) -> None:
        """Close the underlying file. Safe to call repeatedly."""
        self._file.close()
