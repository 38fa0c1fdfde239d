"""The decode/convert/write loop shared by dedicated and engine playback."""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

import numpy as np
import numpy.typing as npt

from beatsampler.audio.decoder import WavDecoder
from beatsampler.audio.stream import OutputStream
from beatsampler.exceptions import AudioStreamError, SampleDecodeError

logger = logging.getLogger(__name__)

# Frames moved per decode/write iteration
DEFAULT_CHUNK_FRAMES = 8192

Converter = Callable[[npt.NDArray[np.int32]], npt.NDArray[np.int32]]


class PlaybackResult(str, Enum):
    """How a play ended."""

    FINISHED = "finished"  # Decoder exhausted
    CANCELLED = "cancelled"  # Preempted or shut down between chunks
    STREAM_ERROR = "stream_error"  # Write/start failed twice in a row
    DECODE_ERROR = "decode_error"  # PCM data unreadable

    @property
    def rewinds(self) -> bool:
        """Whether the decoder goes back to frame 0 after this result."""
        return self in (PlaybackResult.FINISHED, PlaybackResult.CANCELLED)


def is_cancelled(cancel: Optional[threading.Event]) -> bool:
    return cancel is not None and cancel.is_set()


def _recover(stream: OutputStream, name: str) -> bool:
    """Stop and restart a stream after a failure. Returns True on success."""
    try:
        stream.stop()
    except AudioStreamError as e:
        logger.debug(f"Stop before restart failed for {name}: {e.technical_message}")
    try:
        stream.start()
    except AudioStreamError as e:
        logger.error(f"Failed to restart the stream for sample {name}: {e.technical_message}")
        return False
    return True


def _start(stream: OutputStream, name: str) -> bool:
    try:
        stream.start()
        return True
    except AudioStreamError as e:
        logger.warning(f"Failed to start the stream for sample {name}: {e.technical_message}")
    return _recover(stream, name)


def _write(stream: OutputStream, frames: npt.NDArray[np.int32], name: str) -> bool:
    """Write one chunk, with a single stop/restart/retry on failure."""
    try:
        stream.write(frames)
        return True
    except AudioStreamError as e:
        logger.warning(f"Failed to write sample {name} to stream, restarting: {e.technical_message}")

    if not _recover(stream, name):
        return False

    try:
        stream.write(frames)
        return True
    except AudioStreamError as e:
        logger.error(f"Failed to write sample {name} to stream: {e.technical_message}")
        return False


def play_chunks(
    decoder: WavDecoder,
    buffer: npt.NDArray[np.int32],
    stream: OutputStream,
    should_stop: Callable[[], bool],
    convert: Optional[Converter] = None,
) -> PlaybackResult:
    """
    Pump a decoder into a stream until exhaustion, error or cancellation.

    Cancellation is polled once per chunk, after the write returns, so a
    stop request takes effect within one chunk-write.

    Args:
        decoder: Source of PCM frames
        buffer: Reusable int32 conversion buffer shaped (chunk_frames, channels)
        stream: Destination stream; started here and stopped before returning
        should_stop: Non-blocking cancellation check
        convert: Optional channel conversion applied before writing

    Returns:
        PlaybackResult describing why the loop ended
    """
    name = decoder.path.name

    if not _start(stream, name):
        return PlaybackResult.STREAM_ERROR

    chunks = 0
    try:
        while True:
            try:
                frames = decoder.read_into(buffer)
            except SampleDecodeError as e:
                logger.error(f"Failed to read the PCM buffer: {e.technical_message}")
                return PlaybackResult.DECODE_ERROR

            if frames == 0:
                logger.debug(f"Finished {name} after {chunks} chunks")
                return PlaybackResult.FINISHED

            chunk = buffer[:frames]
            if convert is not None:
                chunk = convert(chunk)

            if not _write(stream, chunk, name):
                return PlaybackResult.STREAM_ERROR
            chunks += 1

            if should_stop():
                logger.debug(f"Exit early: {name} cut off after {chunks} chunks")
                return PlaybackResult.CANCELLED
    finally:
        try:
            stream.stop()
        except AudioStreamError as e:
            logger.warning(f"Failed to stop the stream for sample {name}: {e.technical_message}")
