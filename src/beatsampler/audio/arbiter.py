"""Occupancy and preemption state for a single shared output stream."""

import itertools
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

# One token per pad can be in flight
DEFAULT_PREEMPTION_CAPACITY = 16


@dataclass
class PlaybackTicket:
    """Arrival number for one shared-stream play. Higher ids arrived later."""

    id: int
    name: str
    cutoff_requested: bool = False


class StreamArbiter:
    """
    Lock, active flag and preemption channel for one shared stream.

    A play takes a ticket, asks every older play to stop
    (``request_cutoff``), then waits in ``acquire``. Older plays are the
    occupant and any ticket still waiting for the stream. The occupant polls
    ``cutoff_requested`` between chunks and leaves once a newer ticket has
    asked; a waiter that gets the stream after a newer ticket asked is
    superseded and should not play at all. The latest trigger always ends up
    on the stream.

    Tokens in the channel are ticket ids. Reading them raises the arbiter's
    newest-request mark, which is what ``cutoff_requested`` compares against,
    so a token read by one play still counts for every older play after it.
    """

    def __init__(self, capacity: int = DEFAULT_PREEMPTION_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Preemption capacity must be at least 1, got {capacity}")

        self._lock = threading.Lock()  # Held for the whole play
        self._state_lock = threading.Lock()  # Guards the fields below
        self._active = False
        self._occupant: Optional[PlaybackTicket] = None
        self._outstanding: set[int] = set()  # Issued and not yet released
        self._newest_request = 0
        self._cutoffs: Queue[int] = Queue(maxsize=capacity)
        self._tickets = itertools.count(1)

    def issue(self, name: str) -> PlaybackTicket:
        """Hand out the next ticket in arrival order."""
        with self._state_lock:
            ticket = PlaybackTicket(id=next(self._tickets), name=name)
            self._outstanding.add(ticket.id)
        return ticket

    def request_cutoff(self, ticket: PlaybackTicket) -> bool:
        """
        Ask older plays, running or waiting, to give way.

        Blocks while the channel is full rather than dropping the request.

        Returns:
            True if a token was sent
        """
        with self._state_lock:
            older = [t for t in self._outstanding if t < ticket.id]
            if not older:
                return False
            occupant = self._occupant

        ticket.cutoff_requested = True
        if occupant is not None:
            logger.debug(f"{ticket.name} (#{ticket.id}) preempting {occupant.name} (#{occupant.id})")
        else:
            logger.debug(f"{ticket.name} (#{ticket.id}) superseding {len(older)} waiting plays")
        self._cutoffs.put(ticket.id)
        return True

    def acquire(self, ticket: PlaybackTicket) -> None:
        """Wait for the stream, then mark it active for ``ticket``."""
        self._lock.acquire()
        with self._state_lock:
            self._active = True
            self._occupant = ticket

    def release(self, ticket: PlaybackTicket) -> None:
        """Mark the stream idle and let the next waiter in."""
        with self._state_lock:
            if self._occupant is not ticket:
                raise RuntimeError(f"Ticket #{ticket.id} does not hold the stream")
            self._active = False
            self._occupant = None
            self._outstanding.discard(ticket.id)
        self._lock.release()

    @contextmanager
    def occupy(self, ticket: PlaybackTicket) -> Iterator[PlaybackTicket]:
        """Hold the stream for the duration of the block."""
        self.acquire(ticket)
        try:
            yield ticket
        finally:
            self.release(ticket)

    def cutoff_requested(self, ticket: PlaybackTicket) -> bool:
        """
        Non-blocking check for a newer play than ``ticket``.

        Drains the channel as a side effect, which frees senders blocked on
        a full channel.
        """
        while True:
            try:
                token = self._cutoffs.get_nowait()
            except Empty:
                break
            with self._state_lock:
                self._newest_request = max(self._newest_request, token)

        with self._state_lock:
            return self._newest_request > ticket.id

    @property
    def active(self) -> bool:
        with self._state_lock:
            return self._active

    @property
    def occupant(self) -> Optional[PlaybackTicket]:
        with self._state_lock:
            return self._occupant

    @property
    def capacity(self) -> int:
        return self._cutoffs.maxsize
