"""Tests for the chunked playback loop."""

import threading
from unittest.mock import Mock

import numpy as np
import pytest

from beatsampler.audio import PlaybackResult, WavDecoder, play_chunks
from beatsampler.exceptions import SampleDecodeError

from fakes import CHUNK, FakeStream


def never() -> bool:
    return False


@pytest.fixture
def decoder(make_wav):
    decoder = WavDecoder.open(make_wav("ramp", CHUNK * 3 + 5))
    yield decoder
    decoder.close()


@pytest.fixture
def buffer():
    return np.zeros((CHUNK, 2), dtype=np.int32)


@pytest.mark.unit
class TestPlayChunks:
    """Test play_chunks outcomes."""

    def test_plays_whole_file(self, decoder, buffer):
        stream = FakeStream()

        result = play_chunks(decoder, buffer, stream, never)

        assert result == PlaybackResult.FINISHED
        assert [len(w) for w in stream.writes] == [CHUNK, CHUNK, CHUNK, 5]
        assert stream.starts == 1
        assert stream.stops == 1

    def test_written_frames_match_file(self, decoder, buffer):
        reference = WavDecoder.open(decoder.path)
        expected = np.zeros((decoder.num_frames, 2), dtype=np.int32)
        reference.read_into(expected)
        reference.close()
        stream = FakeStream()

        play_chunks(decoder, buffer, stream, never)

        np.testing.assert_array_equal(stream.concatenated(), expected)

    def test_cancel_is_checked_after_each_write(self, decoder, buffer):
        stream = FakeStream()
        cancel = threading.Event()
        cancel.set()

        result = play_chunks(decoder, buffer, stream, cancel.is_set)

        assert result == PlaybackResult.CANCELLED
        assert len(stream.writes) == 1
        assert stream.stops == 1

    def test_convert_applied_before_write(self, decoder, buffer):
        stream = FakeStream()

        play_chunks(decoder, buffer, stream, never, convert=lambda chunk: chunk[:, :1])

        assert all(w.shape[1] == 1 for w in stream.writes)

    def test_single_write_failure_recovers(self, decoder, buffer):
        stream = FakeStream(fail_writes=1)

        result = play_chunks(decoder, buffer, stream, never)

        assert result == PlaybackResult.FINISHED
        assert stream.frames_written == decoder.num_frames
        # Initial start plus the restart
        assert stream.starts == 2

    def test_second_write_failure_is_stream_error(self, decoder, buffer):
        stream = FakeStream(fail_writes=2)

        result = play_chunks(decoder, buffer, stream, never)

        assert result == PlaybackResult.STREAM_ERROR
        assert stream.writes == []
        assert stream.stops >= 1

    def test_single_start_failure_recovers(self, decoder, buffer):
        stream = FakeStream(fail_starts=1)

        result = play_chunks(decoder, buffer, stream, never)

        assert result == PlaybackResult.FINISHED
        assert stream.frames_written == decoder.num_frames

    def test_second_start_failure_is_stream_error(self, decoder, buffer):
        stream = FakeStream(fail_starts=2)

        result = play_chunks(decoder, buffer, stream, never)

        assert result == PlaybackResult.STREAM_ERROR
        assert stream.writes == []

    def test_decode_failure(self, buffer, make_wav):
        decoder = Mock(spec=WavDecoder)
        decoder.path = make_wav("ramp", 10)
        decoder.read_into.side_effect = SampleDecodeError(decoder.path, "corrupt")
        stream = FakeStream()

        result = play_chunks(decoder, buffer, stream, never)

        assert result == PlaybackResult.DECODE_ERROR
        assert stream.stops == 1


@pytest.mark.unit
class TestPlaybackResult:
    """Test which results rewind the decoder."""

    @pytest.mark.parametrize("result,rewinds", [
        (PlaybackResult.FINISHED, True),
        (PlaybackResult.CANCELLED, True),
        (PlaybackResult.STREAM_ERROR, False),
        (PlaybackResult.DECODE_ERROR, False),
    ])
    def test_rewinds(self, result, rewinds):
        assert result.rewinds is rewinds
