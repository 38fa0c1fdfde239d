"""MIDI-related exceptions."""

from typing import Optional

from .base import SetupError


class MidiPortNotFoundError(SetupError):
    """Requested MIDI port was not found."""

    def __init__(self, port_name: str, direction: str = "input", available: Optional[list[str]] = None):
        """
        Initialize port-not-found error.

        Args:
            port_name: Exact port name that was requested
            direction: "input" or "output"
            available: Port names that were available at lookup time
        """
        user_msg = f"Can't find MIDI {direction} port '{port_name}'."
        tech_msg = user_msg
        if available is not None:
            tech_msg += f" Available: {available or 'none'}"

        super().__init__(
            user_message=user_msg,
            technical_message=tech_msg,
            recovery_hint="Connect the controller or run 'beatsampler midi list' to see port names.",
        )
        self.port_name = port_name
        self.direction = direction
        self.available = available or []
