"""Shared output engine for platforms limited to a single output stream."""

import logging
import threading
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np
import numpy.typing as npt

from beatsampler.audio.arbiter import DEFAULT_PREEMPTION_CAPACITY, StreamArbiter
from beatsampler.audio.playback import DEFAULT_CHUNK_FRAMES, PlaybackResult, is_cancelled, play_chunks
from beatsampler.audio.stream import AudioStream, OutputStream

if TYPE_CHECKING:
    from beatsampler.audio.sample import Sample

logger = logging.getLogger(__name__)

StreamFactory = Callable[..., OutputStream]


class Engine:
    """
    Process-wide owner of the one shared output stream.

    Some platforms don't support multiple streams on the same device. In that
    case every sample plays through this engine, one at a time: a new trigger
    cuts off whatever is sounding and takes over the stream.

    The engine stream has a fixed format (stereo/48kHz by default); samples
    are channel-converted into it but never resampled.
    """

    def __init__(
        self,
        stream: OutputStream,
        sample_rate: int = 48000,
        channels: int = 2,
        chunk_frames: int = DEFAULT_CHUNK_FRAMES,
        preemption_capacity: int = DEFAULT_PREEMPTION_CAPACITY,
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_frames = chunk_frames
        self.arbiter = StreamArbiter(preemption_capacity)
        self._stream = stream
        self._buffer: npt.NDArray[np.int32] = np.zeros((chunk_frames, channels), dtype=np.int32)
        self._closed = False

    @classmethod
    def open(
        cls,
        sample_rate: int = 48000,
        channels: int = 2,
        chunk_frames: int = DEFAULT_CHUNK_FRAMES,
        preemption_capacity: int = DEFAULT_PREEMPTION_CAPACITY,
        device: Optional[int] = None,
        stream_factory: StreamFactory = AudioStream.open,
    ) -> "Engine":
        """
        Open the shared stream and build the engine around it.

        Raises:
            AudioStreamError: If the stream cannot be opened
        """
        stream = stream_factory(channels, sample_rate, chunk_frames, device=device)
        logger.info(f"Shared engine stream opened: {channels} ch, {sample_rate} Hz")
        return cls(stream, sample_rate, channels, chunk_frames, preemption_capacity)

    def play_sample(self, sample: "Sample", cancel: Optional[threading.Event] = None) -> PlaybackResult:
        """
        Play a sample on the shared stream, preempting the current occupant.

        Blocks until this play ends: naturally, by error, by ``cancel`` or by
        being preempted in turn. A play superseded by a newer trigger while
        still waiting for the stream returns CANCELLED without writing.

        Args:
            sample: Engine-backed sample to play
            cancel: Optional shutdown signal checked between chunks

        Returns:
            PlaybackResult of this play
        """
        ticket = self.arbiter.issue(sample.name)
        self.arbiter.request_cutoff(ticket)

        with self.arbiter.occupy(ticket):
            if self.arbiter.cutoff_requested(ticket):
                # A newer trigger arrived while this one was waiting
                logger.debug(f"Skipping {sample.name} (#{ticket.id}): superseded before it started")
                result = PlaybackResult.CANCELLED
            else:
                logger.debug(f"Playing {sample.name} via the shared stream (#{ticket.id})")
                result = play_chunks(
                    sample.decoder,
                    sample.buffer,
                    self._stream,
                    lambda: is_cancelled(cancel) or self.arbiter.cutoff_requested(ticket),
                    convert=self._convert,
                )
            sample.settle(result)

        return result

    def _convert(self, chunk: npt.NDArray[np.int32]) -> npt.NDArray[np.int32]:
        """Copy a chunk into the engine buffer, adapting the channel count."""
        frames, channels = chunk.shape
        out = self._buffer[:frames]
        if channels == self.channels:
            out[:] = chunk
        elif channels == 1:
            out[:] = chunk  # Broadcast mono to every output channel
        elif channels > self.channels:
            out[:] = chunk[:, :self.channels]
        else:
            out[:, :channels] = chunk
            out[:, channels:] = 0
        return out

    @property
    def active(self) -> bool:
        """Whether a sample currently occupies the stream."""
        return self.arbiter.active

    def close(self) -> None:
        """Close the shared stream. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        self._stream.close()
        logger.debug("Shared engine stream closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
