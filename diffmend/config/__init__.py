"""Configuration loading and validation."""

from diffmend.config.loader import load_config
from diffmend.config.schema import Config, LoggingConfig, PatchConfig

__all__ = [
    "Config",
    "LoggingConfig",
    "PatchConfig",
    "load_config",
]
