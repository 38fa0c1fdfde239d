"""Application configuration model."""

import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_serializer, field_validator, model_validator

from beatsampler.exceptions import ConfigFileInvalidError, wrap_pydantic_error

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".beatsampler" / "config.json"


def _default_samples() -> dict[str, str]:
    return {
        "moo": "cow_moo_32b.wav",
        "fart": "cow_fart_32b.wav",
        "power_up": "power_up_32b.wav",
        "power_down": "power_down_32b.wav",
        "bleep": "bleep_32b.wav",
        "scan": "scan_32b.wav",
        "screen_beeps": "ScreenBeeps_32b.wav",
    }


class AmbientChoice(BaseModel):
    """A sample that may fire when an unmapped pad is hit."""

    name: str = Field(description="Sample name (key in 'samples')")
    probability: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Chance of firing on each unmapped pad hit",
    )


class EngineConfig(BaseModel):
    """Shared-stream engine settings."""

    sample_rate: int = Field(default=48000, gt=0, description="Shared stream sample rate in Hz")
    channels: int = Field(default=2, ge=1, description="Shared stream channel count")
    chunk_frames: int = Field(default=8192, gt=0, description="Frames per decode/write iteration")
    preemption_capacity: int = Field(
        default=16,
        ge=1,
        description="Preemption channel size (number of pads on the controller)",
    )


class SequencerConfig(BaseModel):
    """Diagnostic note burst sent to the controller."""

    on_startup: bool = Field(default=False, description="Run the burst once at startup")
    first_key: int = Field(default=36, ge=0, le=127, description="First pad key")
    last_key: int = Field(default=51, ge=0, le=127, description="Last pad key (inclusive)")
    dwell_ms: float = Field(default=50.0, gt=0, description="Time between note on and note off")
    channel: int = Field(default=0, ge=0, le=15, description="MIDI channel (0-based)")
    velocity: int = Field(default=127, ge=1, le=127, description="Note on velocity")

    @model_validator(mode="after")
    def check_key_range(self) -> "SequencerConfig":
        if self.first_key > self.last_key:
            raise ValueError(f"first_key ({self.first_key}) is above last_key ({self.last_key})")
        return self

    @property
    def keys(self) -> range:
        return range(self.first_key, self.last_key + 1)


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Playback
    shared_stream: Optional[bool] = Field(
        default=None,
        description=(
            "Play every sample through one shared stream. "
            "None = auto (enabled on platforms without concurrent output streams)"
        ),
    )
    verbose: bool = Field(default=False, description="Enable verbose diagnostic logging")
    audio_device: Optional[int] = Field(default=None, description="Output device ID (None = system default)")
    engine: EngineConfig = Field(default_factory=EngineConfig)

    # MIDI
    midi_input: str = Field(default="Arturia BeatStep", description="Exact MIDI input port name")
    midi_output: Optional[str] = Field(
        default=None,
        description="Exact MIDI output port name for the diagnostic burst (None = same as input)",
    )

    # Samples
    sounds_dir: Path = Field(default=Path("sounds"), description="Directory holding the sample files")
    samples: dict[str, str] = Field(default_factory=_default_samples, description="Sample name -> file name")
    pad_map: dict[int, list[str]] = Field(
        default_factory=lambda: {44: ["moo"], 45: ["fart"]},
        description="Pad key -> samples triggered together",
    )
    ambient: list[AmbientChoice] = Field(
        default_factory=lambda: [
            AmbientChoice(name="screen_beeps", probability=0.5),
            AmbientChoice(name="scan"),
            AmbientChoice(name="bleep"),
        ],
        description="Samples that may fire for pads missing from pad_map",
    )
    random_seed: Optional[int] = Field(default=None, description="Seed for the ambient choice (None = random)")

    # Lifecycle
    startup_samples: list[str] = Field(
        default_factory=lambda: ["power_up"],
        description="Played in order before listening to MIDI",
    )
    ready_sample: Optional[str] = Field(default="bleep", description="Played once MIDI listening starts")
    closing_sample: Optional[str] = Field(default="power_down", description="Played on shutdown")
    closing_delay: float = Field(default=1.0, ge=0.0, description="Seconds to wait after the closing sample")

    sequencer: SequencerConfig = Field(default_factory=SequencerConfig)

    @field_serializer("sounds_dir")
    def serialize_path(self, path: Path) -> str:
        """Serialize Path to string."""
        return str(path)

    @field_validator("pad_map")
    @classmethod
    def validate_pad_keys(cls, pad_map: dict[int, list[str]]) -> dict[int, list[str]]:
        for key in pad_map:
            if not 0 <= key <= 127:
                raise ValueError(f"pad key {key} is outside the MIDI range 0-127")
        return pad_map

    @model_validator(mode="after")
    def check_sample_references(self) -> "AppConfig":
        unknown = sorted(name for name in self.referenced_samples() if name not in self.samples)
        if unknown:
            raise ValueError(f"unknown sample name(s): {', '.join(unknown)}")
        return self

    def referenced_samples(self) -> set[str]:
        """Every sample name used by pads, ambient choices or the lifecycle."""
        names = {name for names in self.pad_map.values() for name in names}
        names.update(choice.name for choice in self.ambient)
        names.update(self.startup_samples)
        names.update(n for n in (self.ready_sample, self.closing_sample) if n)
        return names

    def sample_paths(self) -> dict[str, Path]:
        """Sample name -> full file path."""
        return {name: self.sounds_dir / filename for name, filename in self.samples.items()}

    def resolve_shared_stream(self, platform: Optional[str] = None) -> bool:
        """
        Decide the playback ownership mode.

        An explicit setting wins. Otherwise shared mode is enabled on Linux,
        where output devices (ALSA hw devices in particular) usually refuse a
        second concurrent stream.
        """
        if self.shared_stream is not None:
            return self.shared_stream
        platform = platform or sys.platform
        return platform.startswith("linux")

    @property
    def midi_output_port(self) -> str:
        return self.midi_output or self.midi_input

    @classmethod
    def load(cls, path: Path) -> "AppConfig":
        """
        Load and validate a config file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigFileInvalidError: If the JSON syntax is invalid
            ConfigValidationError: If the values fail validation
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        json_content = path.read_text()
        if not json_content.strip():
            raise ConfigFileInvalidError.empty(str(path))

        try:
            config = cls.model_validate_json(json_content)
        except ValidationError as e:
            raise wrap_pydantic_error(e, str(path)) from e

        logger.debug(f"Loaded config from {path}")
        return config

    @classmethod
    def load_or_default(cls, path: Optional[Path] = None) -> "AppConfig":
        """
        Load config from file or return defaults when the file is missing.

        Args:
            path: Path to config file. If None, uses ~/.beatsampler/config.json.
        """
        path = path or DEFAULT_CONFIG_PATH
        try:
            return cls.load(path)
        except FileNotFoundError:
            logger.info(f"No config file at {path}, using defaults")
            return cls()
