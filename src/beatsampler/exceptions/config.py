"""Configuration exceptions.

The config file is one JSON object validated by the pydantic ``AppConfig``
model. ConfigFileInvalidError covers files that are not JSON at all;
ConfigValidationError covers well-formed JSON with values the model rejects.
Both point at the offending spot and say what a valid value looks like.
"""

import re
from typing import Any, Optional

from .base import BeatSamplerError

# pydantic reports JSON syntax errors as "... at line 3 column 5"
_JSON_POSITION = re.compile(r"line (\d+) column (\d+)")

_DECLARE_SAMPLE = "Every sample name used here must be declared under 'samples'."

# Looked up by full field path first, then by top-level section
FIELD_HINTS = {
    "samples": "Map each sample name to a WAV file name inside 'sounds_dir'.",
    "pad_map": f"Pad keys are MIDI notes 0-127. {_DECLARE_SAMPLE}",
    "ambient": f"Give each choice a 'name' and a 'probability' between 0 and 1. {_DECLARE_SAMPLE}",
    "startup_samples": _DECLARE_SAMPLE,
    "ready_sample": _DECLARE_SAMPLE,
    "closing_sample": _DECLARE_SAMPLE,
    "engine.chunk_frames": (
        "'engine.chunk_frames' is the number of frames decoded and written per iteration. "
        "It must be positive; 8192 is the default."
    ),
    "engine.preemption_capacity": "'engine.preemption_capacity' should be at least the number of pads.",
    "engine": "Engine settings are positive numbers (sample_rate in Hz, channels, chunk_frames).",
    "sequencer": (
        "'sequencer.first_key' and 'sequencer.last_key' are MIDI notes 0-127, "
        "and first_key must not be above last_key."
    ),
    "midi_input": "Run 'beatsampler midi list' to see the exact MIDI port names.",
    "midi_output": "Run 'beatsampler midi list' to see the exact MIDI port names.",
    "audio_device": "Run 'beatsampler audio list' to see valid device IDs.",
}


def hint_for_field(field: str, error_msg: str = "") -> Optional[str]:
    """Find the hint for a dotted field path such as ``sequencer.first_key``."""
    if field in FIELD_HINTS:
        return FIELD_HINTS[field]
    section = field.split(".", 1)[0]
    if section in FIELD_HINTS:
        return FIELD_HINTS[section]
    if "unknown sample name" in error_msg:
        # Cross-reference errors are raised for the whole document
        return _DECLARE_SAMPLE
    return None


class ConfigurationError(BeatSamplerError):
    """Configuration is invalid or cannot be loaded."""


class ConfigFileInvalidError(ConfigurationError):
    """Configuration file is not a JSON document."""

    def __init__(self, file_path: str, parse_error: str):
        """
        Args:
            file_path: Path to the config file
            parse_error: Parser message, usually ending in "at line L column C"
        """
        position = _JSON_POSITION.search(parse_error)
        self.line = int(position.group(1)) if position else None
        self.column = int(position.group(2)) if position else None

        if position:
            user_msg = f"Configuration file is not valid JSON ({parse_error})"
            hint = f"Fix line {self.line}, column {self.column} of {file_path}"
        else:
            user_msg = "Configuration file is not valid JSON"
            hint = f"Check {file_path} with a JSON validator"
        hint += ", or delete it to run with the built-in defaults."

        super().__init__(
            user_message=user_msg,
            technical_message=f"JSON parse error in {file_path}: {parse_error}",
            recoverable=True,
            recovery_hint=hint,
            file=file_path,
        )
        self.file_path = file_path
        self.parse_error = parse_error

    @classmethod
    def empty(cls, file_path: str) -> "ConfigFileInvalidError":
        """Error for a config file holding nothing but whitespace."""
        error = cls(file_path, "File is empty")
        error.user_message = "Configuration file is empty"
        error.recovery_hint = (
            f"Write a JSON object such as {{\"midi_input\": \"Arturia BeatStep\"}} to {file_path}, "
            "or delete it to run with the built-in defaults."
        )
        return error


class ConfigValidationError(ConfigurationError):
    """Configuration JSON parsed but a value was rejected."""

    def __init__(self, field: str, value: Any, error_msg: str, file_path: Optional[str] = None):
        """
        Args:
            field: Dotted path of the rejected field (``engine.chunk_frames``)
            value: The rejected value
            error_msg: Why the value was rejected
            file_path: Path to the config file (optional)
        """
        hint = hint_for_field(field, error_msg) or f"Update '{field}' in your configuration."
        if file_path:
            hint += f"\nConfig file: {file_path}"

        super().__init__(
            user_message=f"Invalid configuration value for '{field}': {error_msg}",
            technical_message=f"Config validation failed for {field}={value!r}: {error_msg}",
            recoverable=True,
            recovery_hint=hint,
            file=file_path,
        )
        self.field = field
        self.value = value
        self.file_path = file_path
