"""In-memory stand-ins for audio output streams."""

import threading
import time
from typing import Callable, Optional

import numpy as np

from beatsampler.exceptions import AudioStreamError

# Frames per chunk used throughout the tests
CHUNK = 64


class FakeStream:
    """
    In-memory output stream recording every chunk written.

    Optionally slows writes down, injects start/write failures, or runs a
    hook inside each write to check what else is running at that moment.
    """

    def __init__(
        self,
        write_delay: float = 0.0,
        fail_writes: int = 0,
        fail_starts: int = 0,
        on_write: Optional[Callable[[np.ndarray], None]] = None,
    ):
        self.write_delay = write_delay
        self.fail_writes = fail_writes
        self.fail_starts = fail_starts
        self.on_write = on_write
        self.writes: list[np.ndarray] = []
        self.starts = 0
        self.stops = 0
        self.closes = 0
        self.max_concurrent_writes = 0
        self._concurrent = 0
        self._lock = threading.Lock()

    def start(self) -> None:
        self.starts += 1
        if self.fail_starts:
            self.fail_starts -= 1
            raise AudioStreamError("start", "injected start failure")

    def stop(self) -> None:
        self.stops += 1

    def write(self, frames: np.ndarray) -> None:
        with self._lock:
            if self.fail_writes:
                self.fail_writes -= 1
                raise AudioStreamError("write", "injected write failure")
            self._concurrent += 1
            self.max_concurrent_writes = max(self.max_concurrent_writes, self._concurrent)
        try:
            if self.on_write:
                self.on_write(frames)
            if self.write_delay:
                time.sleep(self.write_delay)
            with self._lock:
                self.writes.append(frames.copy())
        finally:
            with self._lock:
                self._concurrent -= 1

    def close(self) -> None:
        self.closes += 1

    @property
    def frames_written(self) -> int:
        return sum(len(w) for w in self.writes)

    def chunks_with_value(self, value: int) -> int:
        """Count written chunks whose every sample equals ``value``."""
        return sum(1 for w in self.writes if np.all(w == value))

    def concatenated(self) -> np.ndarray:
        return np.concatenate(self.writes) if self.writes else np.zeros((0, 0), dtype=np.int32)


class FakeStreamFactory:
    """Stands in for AudioStream.open and keeps every stream it made."""

    def __init__(self, **stream_kwargs):
        self.stream_kwargs = stream_kwargs
        self.calls: list[tuple[int, int, int, Optional[int]]] = []
        self.streams: list[FakeStream] = []

    def __call__(self, channels: int, sample_rate: int, buffer_size: int, device: Optional[int] = None) -> FakeStream:
        self.calls.append((channels, sample_rate, buffer_size, device))
        stream = FakeStream(**self.stream_kwargs)
        self.streams.append(stream)
        return stream


def wait_for(condition: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll until condition() is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.001)
    return condition()
