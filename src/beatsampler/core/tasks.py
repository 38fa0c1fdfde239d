"""Fire-and-forget sample plays with completion handles."""

import logging
import threading
from concurrent.futures import Future, wait
from typing import Optional

from beatsampler.audio import PlaybackResult, Sample

logger = logging.getLogger(__name__)


class PlaybackTasks:
    """
    Runs every triggered play on its own thread.

    Plays block for the length of the sample (or until preempted), so each
    one gets a dedicated thread rather than a slot in a bounded pool: a
    pool would queue triggers behind long samples. ``spawn`` returns a
    Future resolving to the PlaybackResult so callers and tests can await
    the outcome without sleeping.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._running: set[Future] = set()

    def spawn(self, sample: Sample, cancel: Optional[threading.Event] = None) -> "Future[PlaybackResult]":
        """
        Start ``sample.play(cancel)`` in the background.

        Args:
            sample: Sample to play
            cancel: Cancellation signal forwarded to the play

        Returns:
            Future completing with the play's PlaybackResult
        """
        future: Future[PlaybackResult] = Future()
        with self._lock:
            self._running.add(future)
        future.add_done_callback(self._forget)

        thread = threading.Thread(
            target=self._run,
            args=(future, sample, cancel),
            name=f"play-{sample.name}",
            daemon=True,
        )
        thread.start()
        return future

    def _run(self, future: Future, sample: Sample, cancel: Optional[threading.Event]) -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = sample.play(cancel)
        except Exception as e:
            logger.exception(f"Failed to play sample {sample.name}")
            future.set_exception(e)
        else:
            future.set_result(result)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._running.discard(future)

    @property
    def pending(self) -> int:
        """Number of plays still running."""
        with self._lock:
            return len(self._running)

    def wait_all(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for every running play to end.

        Returns:
            True if all plays ended within the timeout
        """
        with self._lock:
            running = list(self._running)
        _, not_done = wait(running, timeout=timeout)
        return not not_done
