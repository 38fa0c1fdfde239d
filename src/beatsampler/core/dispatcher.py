"""Maps controller events to sample plays and shutdown."""

import logging
import random
import threading
from concurrent.futures import Future
from typing import Callable, Optional, Sequence

import mido

from beatsampler.audio import PlaybackResult, Sample
from beatsampler.core.tasks import PlaybackTasks
from beatsampler.midi import MidiEvent, NoteEnd, NoteStart, SysEx, parse_message

logger = logging.getLogger(__name__)


class AmbientSelector:
    """
    Picks the samples for pads that have no explicit mapping.

    Each entry fires independently with its own probability, so entries at
    1.0 always play and lower ones add variation. With a fixed seed the
    sequence of picks is reproducible.
    """

    def __init__(self, choices: Sequence[tuple[Sample, float]], seed: Optional[int] = None):
        """
        Args:
            choices: (sample, probability) pairs in play order
            seed: Random seed; None for a non-deterministic sequence
        """
        self._choices = list(choices)
        self._rng = random.Random(seed)

    def choose(self) -> list[Sample]:
        """Draw the samples to play for one unmapped hit."""
        # Draw for every entry so the sequence doesn't depend on earlier outcomes
        draws = [self._rng.random() for _ in self._choices]
        return [sample for (sample, probability), draw in zip(self._choices, draws) if draw < probability]

    @property
    def samples(self) -> list[Sample]:
        return [sample for sample, _ in self._choices]


class Dispatcher:
    """
    Turns MIDI events into background sample plays.

    ``handle_message`` runs on the MIDI transport's callback thread and
    never blocks: each selected sample is handed to PlaybackTasks.
    """

    def __init__(
        self,
        pad_map: dict[int, list[Sample]],
        ambient: AmbientSelector,
        tasks: PlaybackTasks,
        on_stop: Callable[[], None],
        cancel: Optional[threading.Event] = None,
    ):
        """
        Args:
            pad_map: Pad key -> samples to trigger together
            ambient: Fallback for keys missing from pad_map
            tasks: Spawner for background plays
            on_stop: Called when the transport stop command arrives
            cancel: Shutdown signal passed to every play
        """
        self._pad_map = pad_map
        self._ambient = ambient
        self._tasks = tasks
        self._on_stop = on_stop
        self._cancel = cancel

    def handle_message(self, msg: mido.Message) -> list["Future[PlaybackResult]"]:
        """MIDI input callback."""
        event = parse_message(msg)
        if event is None:
            return []
        return self.handle_event(event)

    def handle_event(self, event: MidiEvent) -> list["Future[PlaybackResult]"]:
        """
        React to one event.

        Returns:
            Completion handles of the plays that were started
        """
        if isinstance(event, NoteStart):
            return self._note_start(event)

        if isinstance(event, NoteEnd):
            logger.debug(f"Ending note {event.key} on channel {event.channel}")
            return []

        if isinstance(event, SysEx):
            logger.info(f"Got sysex: {' '.join(f'{b:02X}' for b in event.data)}")
            if event.is_stop:
                logger.info("Got a stop command")
                self._on_stop()
            return []

        return []

    def samples_for(self, key: int) -> list[Sample]:
        """Samples a note start on ``key`` would trigger."""
        if key in self._pad_map:
            return list(self._pad_map[key])
        return self._ambient.choose()

    def _note_start(self, event: NoteStart) -> list["Future[PlaybackResult]"]:
        logger.info(
            f"Starting note {event.key} on channel {event.channel} with velocity {event.velocity}"
        )
        return [self._tasks.spawn(sample, self._cancel) for sample in self.samples_for(event.key)]
