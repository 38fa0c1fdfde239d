"""Root exception types.

Every error the sampler raises deliberately derives from BeatSamplerError.
Two branches decide how far a failure reaches:

- SetupError ends the process before the MIDI loop starts (exit code 1).
- SampleError disables one sample and leaves the rest playable.
"""

from pathlib import Path
from typing import Any, Optional


class BeatSamplerError(Exception):
    """
    Base exception for all beatsampler errors.

    The CLI prints ``user_message`` and, under it, ``recovery_hint``. Logs get
    ``technical_message``, which defaults to the user message followed by the
    keyword ``context`` the error was raised with (a path, a port name, a
    device id).

    Attributes:
        user_message: Short message shown on the console
        technical_message: Message written to the log
        recoverable: True if retrying or editing the config can fix it
        recovery_hint: Suggested fix, if there is one
        context: Details identifying what failed
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
        **context: Any,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.context = {key: value for key, value in context.items() if value is not None}
        self.technical_message = technical_message or self._describe(user_message)
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def _describe(self, message: str) -> str:
        if not self.context:
            return message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{message} [{details}]"

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """User message with the recovery hint appended as a suggestion."""
        if not self.recovery_hint:
            return self.user_message
        return f"{self.user_message}\n\nSuggestion: {self.recovery_hint}"


class SetupError(BeatSamplerError):
    """Startup failed; the process cannot run and exits non-zero."""


class SampleError(BeatSamplerError):
    """A single sample failed; other samples stay usable."""

    def __init__(self, user_message: str, path: Path, **kwargs):
        super().__init__(user_message, path=path, **kwargs)
        self.path = path
