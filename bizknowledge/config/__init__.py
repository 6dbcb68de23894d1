"""Configuration module -- exports Settings, load_config, and the seed taxonomy."""

from bizknowledge.config.loader import DEFAULT_CONFIG, load_config
from bizknowledge.config.segments import DEFAULT_SEGMENT_NAME, DEFAULT_SEGMENTS
from bizknowledge.config.settings import Settings

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_SEGMENTS",
    "DEFAULT_SEGMENT_NAME",
    "Settings",
    "load_config",
]
