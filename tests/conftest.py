"""Pytest fixtures for tests."""

from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Optional

import numpy as np
import pytest
import soundfile as sf

from fakes import FakeStreamFactory


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_wav(temp_dir):
    """
    Factory writing a 32-bit PCM WAV file.

    With ``value`` every sample equals it, which makes each sample's audio
    recognisable in a shared stream. Without it the file holds a ramp.
    """

    def _make(
        name: str,
        frames: int,
        channels: int = 2,
        value: Optional[int] = None,
        sample_rate: int = 48000,
        subtype: str = 'PCM_32',
    ) -> Path:
        if value is None:
            data = np.arange(frames * channels, dtype=np.int32).reshape(frames, channels) * 1000
        else:
            data = np.full((frames, channels), value, dtype=np.int32)
        path = temp_dir / f"{name}.wav"
        sf.write(str(path), data, sample_rate, subtype=subtype)
        return path

    return _make


@pytest.fixture
def stream_factory():
    """Factory handing out FakeStreams."""
    return FakeStreamFactory()
