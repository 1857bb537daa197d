"""Configuration loading."""

from packsmith.config.loader import (
    home_config_exists,
    load_config,
    local_config_exists,
    save_config,
)
from packsmith.config.schema import DEFAULT_CONFIG, PackagerConfig

__all__ = [
    "DEFAULT_CONFIG",
    "PackagerConfig",
    "home_config_exists",
    "load_config",
    "local_config_exists",
    "save_config",
]
