"""Diagnostic note burst for controller feedback."""

import logging
import threading
from typing import Callable, Iterable, Optional

import mido

logger = logging.getLogger(__name__)


class DiagnosticSequencer:
    """
    Walks the pad grid sending note on, then note off after a short dwell.

    Controllers light a pad on incoming note on, so this makes a quick
    visual sweep confirming the output connection works. It plays no part
    in sample playback.
    """

    def __init__(
        self,
        send: Callable[[mido.Message], bool],
        keys: Iterable[int] = range(36, 52),
        dwell: float = 0.05,
        channel: int = 0,
        velocity: int = 127,
    ):
        """
        Args:
            send: Sends one message, returning False if it was not delivered
            keys: Pad keys in sweep order
            dwell: Seconds between each note on and its note off
            channel: MIDI channel (0-based)
            velocity: Note on velocity
        """
        self._send = send
        self.keys = list(keys)
        self.dwell = dwell
        self.channel = channel
        self.velocity = velocity

    def run(self, stop: Optional[threading.Event] = None) -> int:
        """
        Send the burst once.

        Args:
            stop: Ends the sweep early when set; the current note is still
                released

        Returns:
            Number of keys swept
        """
        waiter = stop or threading.Event()
        swept = 0
        for key in self.keys:
            if waiter.is_set():
                break
            if not self._send(mido.Message('note_on', channel=self.channel, note=key, velocity=self.velocity)):
                logger.warning(f"Failed to send note on {key}; is the MIDI output connected?")
                break
            waiter.wait(self.dwell)
            self._send(mido.Message('note_off', channel=self.channel, note=key, velocity=0))
            swept += 1

        logger.debug(f"Diagnostic burst swept {swept} of {len(self.keys)} keys")
        return swept
