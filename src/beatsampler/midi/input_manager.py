"""MIDI input port bound by exact device name."""

import logging
import threading
from collections.abc import Callable
from typing import Optional

import mido

from beatsampler.exceptions import MidiPortNotFoundError

logger = logging.getLogger(__name__)


class MidiInputManager:
    """
    Listens to one MIDI input port.

    The port is looked up by exact name when listening starts; a missing
    port is a setup error rather than something to wait for.
    """

    def __init__(self, port_name: str):
        """
        Initialize MIDI input manager.

        Args:
            port_name: Exact name of the input port to open
        """
        self.port_name = port_name
        self._port: Optional[mido.ports.BaseInput] = None
        self._port_lock = threading.Lock()
        self._message_callback: Optional[Callable[[mido.Message], None]] = None

    def on_message(self, callback: Callable[[mido.Message], None]) -> None:
        """
        Register callback for incoming MIDI messages.

        Callback is executed in mido's internal I/O thread - keep it fast!

        Args:
            callback: Function that receives mido.Message
        """
        self._message_callback = callback

    @staticmethod
    def list_ports() -> list[str]:
        """Get list of available MIDI input ports."""
        return mido.get_input_names()

    def find_port(self) -> str:
        """
        Check that the configured port exists.

        Raises:
            MidiPortNotFoundError: If no input port has exactly this name
        """
        ports = self.list_ports()
        for port_id, port in enumerate(ports):
            logger.debug(f"MIDI input [{port_id}] {port}")
        if self.port_name not in ports:
            raise MidiPortNotFoundError(self.port_name, "input", ports)
        return self.port_name

    def start(self) -> None:
        """
        Open the port and start delivering messages.

        Raises:
            MidiPortNotFoundError: If the port does not exist
        """
        with self._port_lock:
            if self._port is not None:
                logger.warning("MidiInputManager is already listening")
                return
            port_name = self.find_port()
            self._port = mido.open_input(port_name, callback=self._midi_callback)
        logger.info(f"Listening to MIDI port {port_name}")

    def stop(self) -> None:
        """Stop listening and close the port."""
        with self._port_lock:
            if self._port is None:
                return
            port, self._port = self._port, None
            try:
                port.close()
            except Exception as e:
                logger.error(f"Error closing MIDI input port: {e}")
        logger.debug("MidiInputManager stopped")

    def _midi_callback(self, msg: mido.Message) -> None:
        """
        MIDI message callback - called from mido's internal I/O thread.

        Dispatches to user's registered callback if set.
        """
        try:
            if self._message_callback:
                self._message_callback(msg)
        except Exception as e:
            logger.error(f"Error in MIDI input callback: {e}", exc_info=True)

    @property
    def is_connected(self) -> bool:
        """Check if the input port is open."""
        with self._port_lock:
            return self._port is not None

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
