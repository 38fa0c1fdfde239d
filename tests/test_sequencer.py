"""Tests for the diagnostic note burst."""

import threading

import mido
import pytest

from beatsampler.core import DiagnosticSequencer


@pytest.mark.unit
class TestDiagnosticSequencer:
    """Test DiagnosticSequencer."""

    def test_sweeps_keys_in_order(self):
        sent = []
        sequencer = DiagnosticSequencer(
            lambda msg: sent.append(msg) or True,
            keys=range(36, 39),
            dwell=0.001,
            channel=2,
            velocity=100,
        )

        swept = sequencer.run()

        assert swept == 3
        assert sent == [
            mido.Message('note_on', channel=2, note=36, velocity=100),
            mido.Message('note_off', channel=2, note=36, velocity=0),
            mido.Message('note_on', channel=2, note=37, velocity=100),
            mido.Message('note_off', channel=2, note=37, velocity=0),
            mido.Message('note_on', channel=2, note=38, velocity=100),
            mido.Message('note_off', channel=2, note=38, velocity=0),
        ]

    def test_stop_event_ends_sweep(self):
        sent = []
        stop = threading.Event()
        stop.set()
        sequencer = DiagnosticSequencer(lambda msg: sent.append(msg) or True, dwell=0.001)

        assert sequencer.run(stop) == 0
        assert sent == []

    def test_undelivered_message_ends_sweep(self):
        sent = []
        sequencer = DiagnosticSequencer(lambda msg: sent.append(msg) and False, dwell=0.001)

        assert sequencer.run() == 0
        assert len(sent) == 1
