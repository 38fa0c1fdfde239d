"""Configuration models."""

from .config import AmbientChoice, AppConfig, EngineConfig, SequencerConfig

__all__ = ["AmbientChoice", "AppConfig", "EngineConfig", "SequencerConfig"]
