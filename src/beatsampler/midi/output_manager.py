"""MIDI output port bound by exact device name."""

import logging
import threading
from typing import Optional

import mido

from beatsampler.exceptions import MidiPortNotFoundError

logger = logging.getLogger(__name__)


class MidiOutputManager:
    """Sends MIDI messages to one output port."""

    def __init__(self, port_name: str):
        """
        Initialize MIDI output manager.

        Args:
            port_name: Exact name of the output port to open
        """
        self.port_name = port_name
        self._port: Optional[mido.ports.BaseOutput] = None
        self._port_lock = threading.Lock()

    @staticmethod
    def list_ports() -> list[str]:
        """Get list of available MIDI output ports."""
        return mido.get_output_names()

    def start(self) -> None:
        """
        Open the output port.

        Raises:
            MidiPortNotFoundError: If no output port has exactly this name
        """
        with self._port_lock:
            if self._port is not None:
                return
            ports = self.list_ports()
            if self.port_name not in ports:
                raise MidiPortNotFoundError(self.port_name, "output", ports)
            self._port = mido.open_output(self.port_name)
        logger.info(f"Connected to MIDI output: {self.port_name}")

    def send(self, message: mido.Message) -> bool:
        """
        Send MIDI message to device.

        Args:
            message: MIDI message to send

        Returns:
            True if sent successfully, False if not connected
        """
        with self._port_lock:
            if self._port:
                try:
                    self._port.send(message)
                    return True
                except Exception as e:
                    logger.error(f"Error sending MIDI message: {e}")
                    return False
            return False

    def stop(self) -> None:
        """Close the output port."""
        with self._port_lock:
            if self._port is None:
                return
            port, self._port = self._port, None
            try:
                port.close()
            except Exception as e:
                logger.error(f"Error closing MIDI output port: {e}")
        logger.debug("MidiOutputManager stopped")

    @property
    def is_connected(self) -> bool:
        """Check if the output port is open."""
        with self._port_lock:
            return self._port is not None

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
