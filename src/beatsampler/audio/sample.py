"""Loadable, replayable sound bound to an output path."""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import numpy.typing as npt

from beatsampler.audio.decoder import WavDecoder
from beatsampler.audio.engine import Engine
from beatsampler.audio.playback import DEFAULT_CHUNK_FRAMES, PlaybackResult, is_cancelled, play_chunks
from beatsampler.audio.stream import AudioStream, OutputStream
from beatsampler.exceptions import AudioStreamError, SampleLoadError

logger = logging.getLogger(__name__)


class StreamOwnership(str, Enum):
    """Who owns the stream a sample plays on. Fixed at load time."""

    DEDICATED = "dedicated"  # Sample owns its own hardware stream
    ENGINE = "engine"  # Sample borrows the shared engine stream


class Sample:
    """
    One sound, loaded once and replayed on every trigger.

    Holds an open decoder and a PCM conversion buffer that is reused across
    plays. In dedicated mode the sample also owns an output stream matching
    the file's format, and concurrent plays of the same sample queue up on
    the sample's lock. In engine mode plays go through the shared Engine.

    After a play that finishes or is cancelled the decoder is rewound, so the
    next play starts from the top. After a decode or stream error the
    position is left as is.
    """

    def __init__(
        self,
        path: Path,
        decoder: WavDecoder,
        chunk_frames: int = DEFAULT_CHUNK_FRAMES,
        stream: Optional[OutputStream] = None,
        engine: Optional[Engine] = None,
    ):
        if (stream is None) == (engine is None):
            raise ValueError("A sample needs exactly one of a dedicated stream or an engine")

        self.path = path
        self.decoder = decoder
        self.buffer: npt.NDArray[np.int32] = np.zeros((chunk_frames, decoder.channels), dtype=np.int32)
        self.ownership = StreamOwnership.ENGINE if engine is not None else StreamOwnership.DEDICATED
        self._stream = stream
        self._engine = engine
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def load(
        cls,
        path: Path,
        engine: Optional[Engine] = None,
        chunk_frames: int = DEFAULT_CHUNK_FRAMES,
        device: Optional[int] = None,
        stream_factory: Callable[..., OutputStream] = AudioStream.open,
    ) -> "Sample":
        """
        Open a sample file and, without an engine, its dedicated stream.

        Args:
            path: Path to a PCM WAV file
            engine: Shared engine; None to open a dedicated stream
            chunk_frames: Frames per decode/write iteration (dedicated mode)
            device: Output device ID for the dedicated stream
            stream_factory: Opens a stream from (channels, sample_rate, buffer_size)

        Raises:
            SampleLoadError: If the file or its stream cannot be opened
        """
        decoder = WavDecoder.open(path)

        if engine is not None:
            if decoder.sample_rate != engine.sample_rate:
                logger.warning(
                    f"{path.name} is {decoder.sample_rate} Hz but the shared stream runs at "
                    f"{engine.sample_rate} Hz; it will play at the wrong speed"
                )
            return cls(path, decoder, engine.chunk_frames, engine=engine)

        try:
            stream = stream_factory(decoder.channels, decoder.sample_rate, chunk_frames, device=device)
        except AudioStreamError as e:
            decoder.close()
            raise SampleLoadError(
                path,
                f"failed to open stream with channels: {decoder.channels}, "
                f"sample rate: {decoder.sample_rate}, buffer length: {chunk_frames} - "
                f"{e.technical_message}",
            ) from e

        return cls(path, decoder, chunk_frames, stream=stream)

    @property
    def name(self) -> str:
        return self.path.stem

    @property
    def engine(self) -> Optional[Engine]:
        return self._engine

    def play(self, cancel: Optional[threading.Event] = None) -> PlaybackResult:
        """
        Play the sample from the start, blocking until it ends.

        Args:
            cancel: Optional signal checked between chunks; when set the
                play stops within one chunk

        Returns:
            PlaybackResult describing how the play ended
        """
        if self._engine is not None:
            return self._engine.play_sample(self, cancel)

        with self._lock:
            logger.debug(f"Playing {self.name} on its own stream")
            result = play_chunks(
                self.decoder,
                self.buffer,
                self._stream,
                lambda: is_cancelled(cancel),
            )
            self.settle(result)
        return result

    def settle(self, result: PlaybackResult) -> None:
        """
        Leave the decoder ready for the next play.

        Must be called while holding whichever lock guarded the play.
        """
        if result.rewinds:
            self.decoder.rewind()
        else:
            logger.warning(f"{self.name} ended with {result.value}; not rewinding")

    def close(self) -> None:
        """Release the file and any owned stream. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        self.decoder.close()
        if self._stream is not None:
            self._stream.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"Sample({self.name!r}, {self.ownership.value})"
