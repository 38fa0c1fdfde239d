"""Tests for Sample in dedicated-stream mode."""

import threading

import numpy as np
import pytest

from beatsampler.audio import PlaybackResult, Sample, StreamOwnership
from beatsampler.core import PlaybackTasks
from beatsampler.exceptions import AudioStreamError, SampleLoadError

from fakes import CHUNK, FakeStream, FakeStreamFactory


@pytest.mark.unit
class TestSampleLoad:
    """Test loading samples with their own streams."""

    def test_opens_stream_matching_file(self, make_wav, stream_factory):
        path = make_wav("moo", CHUNK, channels=1, sample_rate=44100)

        sample = Sample.load(path, chunk_frames=CHUNK, device=3, stream_factory=stream_factory)

        assert stream_factory.calls == [(1, 44100, CHUNK, 3)]
        assert sample.ownership == StreamOwnership.DEDICATED
        assert sample.name == "moo"
        assert sample.engine is None
        assert sample.buffer.shape == (CHUNK, 1)
        sample.close()

    def test_missing_file(self, temp_dir, stream_factory):
        with pytest.raises(SampleLoadError):
            Sample.load(temp_dir / "missing.wav", stream_factory=stream_factory)

        assert stream_factory.calls == []

    def test_stream_open_failure(self, make_wav):
        def failing_factory(*args, **kwargs):
            raise AudioStreamError("open", "Invalid sample rate")

        with pytest.raises(SampleLoadError) as exc_info:
            Sample.load(make_wav("moo", CHUNK), chunk_frames=CHUNK, stream_factory=failing_factory)

        assert "Invalid sample rate" in exc_info.value.technical_message
        assert "buffer length" in exc_info.value.technical_message

    def test_needs_exactly_one_output(self, make_wav):
        from beatsampler.audio import WavDecoder

        path = make_wav("moo", CHUNK)
        decoder = WavDecoder.open(path)
        with pytest.raises(ValueError):
            Sample(path, decoder)
        decoder.close()


@pytest.fixture
def load(make_wav):
    """Load a dedicated sample on a FakeStream."""
    loaded = []

    def _load(name: str, chunks: int, value=None, **stream_kwargs) -> Sample:
        factory = FakeStreamFactory(**stream_kwargs)
        sample = Sample.load(
            make_wav(name, CHUNK * chunks, value=value),
            chunk_frames=CHUNK,
            stream_factory=factory,
        )
        sample.fake_stream = factory.streams[0]
        loaded.append(sample)
        return sample

    yield _load
    for sample in loaded:
        sample.close()


@pytest.mark.unit
class TestSamplePlay:
    """Test dedicated-stream plays."""

    def test_replay_is_identical(self, load):
        sample = load("ramp", 3)

        results = [sample.play() for _ in range(3)]

        assert results == [PlaybackResult.FINISHED] * 3
        writes = sample.fake_stream.writes
        assert len(writes) == 9
        np.testing.assert_array_equal(np.concatenate(writes[:3]), np.concatenate(writes[3:6]))
        np.testing.assert_array_equal(np.concatenate(writes[:3]), np.concatenate(writes[6:]))

    def test_cancel_rewinds(self, load):
        sample = load("ramp", 5)
        cancel = threading.Event()
        cancel.set()

        assert sample.play(cancel) == PlaybackResult.CANCELLED
        assert len(sample.fake_stream.writes) == 1
        assert sample.decoder.position == 0

    def test_stream_error_does_not_rewind(self, load):
        sample = load("ramp", 3, fail_writes=2)

        assert sample.play() == PlaybackResult.STREAM_ERROR
        assert sample.decoder.position == CHUNK

    def test_play_after_close_is_decode_error(self, load):
        sample = load("ramp", 2)
        sample.close()

        assert sample.play() == PlaybackResult.DECODE_ERROR

    def test_close_is_idempotent(self, load):
        sample = load("ramp", 1)

        sample.close()
        sample.close()

        assert sample.closed
        assert sample.decoder.closed
        assert sample.fake_stream.closes == 1

    def test_same_sample_plays_queue_up(self, load):
        sample = load("ramp", 10, write_delay=0.002)
        tasks = PlaybackTasks()

        futures = [tasks.spawn(sample) for _ in range(3)]

        assert [f.result(timeout=5) for f in futures] == [PlaybackResult.FINISHED] * 3
        assert sample.fake_stream.max_concurrent_writes == 1
        assert len(sample.fake_stream.writes) == 30

    def test_distinct_samples_overlap(self, make_wav):
        # Both writers must be inside write() at the same time to pass the barrier
        barrier = threading.Barrier(2, timeout=5)
        first_write = {"a": True, "b": True}

        def meet(name):
            def on_write(frames):
                if first_write[name]:
                    first_write[name] = False
                    barrier.wait()
            return on_write

        samples = []
        for name in ("a", "b"):
            stream = FakeStream(write_delay=0.002, on_write=meet(name))
            factory = lambda *args, stream=stream, **kwargs: stream
            samples.append(Sample.load(make_wav(name, CHUNK * 5), chunk_frames=CHUNK, stream_factory=factory))
        tasks = PlaybackTasks()

        futures = [tasks.spawn(sample) for sample in samples]

        assert [f.result(timeout=10) for f in futures] == [PlaybackResult.FINISHED] * 2
        assert not barrier.broken
        for sample in samples:
            sample.close()

    def test_repr(self, load):
        sample = load("moo", 1)

        assert repr(sample) == "Sample('moo', dedicated)"
