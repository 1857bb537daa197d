"""Configuration file loading and merging."""

import logging
from dataclasses import fields
from pathlib import Path

import yaml

from packsmith.config.schema import DEFAULT_CONFIG, PackagerConfig
from packsmith.errors import ValidationError
from packsmith.package.features import parse_feature_key, parse_package_type

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"
STATE_DIRNAME = ".packsmith"
CONFIG_KEYS = frozenset(f.name for f in fields(PackagerConfig))


def get_home_config_path() -> Path:
    """Get path to global config: ~/.packsmith/config.yaml."""
    return Path.home() / STATE_DIRNAME / CONFIG_FILENAME


def get_local_config_path() -> Path:
    """Get path to local config: ./.packsmith/config.yaml."""
    return Path.cwd() / STATE_DIRNAME / CONFIG_FILENAME


def home_config_exists() -> bool:
    """Check if the global home config exists."""
    return get_home_config_path().exists()


def local_config_exists() -> bool:
    """Check if the local project config exists."""
    return get_local_config_path().exists()


def load_yaml_config(path: Path) -> dict[str, object] | None:
    """Load a YAML config file, return None if not found, empty or invalid."""
    if not path.exists():
        return None
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError:
        logger.warning("Ignoring unreadable config file %s", path)
        return None
    if not isinstance(data, dict):
        return None
    unknown = sorted(str(key) for key in data if key not in CONFIG_KEYS)
    if unknown:
        logger.warning("Ignoring unknown keys in %s: %s", path, ", ".join(unknown))
    result: dict[str, object] = data
    return result


def load_config() -> PackagerConfig:
    """Load merged configuration.

    Precedence (lowest to highest):
    1. Built-in defaults
    2. Global config (~/.packsmith/config.yaml)
    3. Local config (./.packsmith/config.yaml)
    """
    config = DEFAULT_CONFIG

    home_data = load_yaml_config(get_home_config_path())
    if home_data:
        config = config.merge(PackagerConfig.from_dict(home_data))

    local_data = load_yaml_config(get_local_config_path())
    if local_data:
        config = config.merge(PackagerConfig.from_dict(local_data))

    return config


def save_config(config: PackagerConfig, path: Path) -> None:
    """Save config to a YAML file.

    Creates parent directories if needed. Only saves non-None values.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def validate_config(config: PackagerConfig) -> list[str]:
    """List unknown feature keys and package types named by `config`."""
    errors: list[str] = []
    for feature in config.features or ():
        try:
            parse_feature_key(feature)
        except ValueError:
            errors.append(f"Unknown feature '{feature}'")
    if config.package_type is not None:
        try:
            parse_package_type(config.package_type)
        except ValueError:
            errors.append(f"Unknown package type '{config.package_type}'")
    return errors


def update_config_file(path: Path, values: dict[str, str]) -> PackagerConfig:
    """Overlay `values` onto the config stored at `path` and save it.

    Returns the saved config.

    Raises:
        ValidationError: If a key is not a config field or a value names an
            unknown feature or package type. Nothing is written.
    """
    errors = [f"Unknown config key '{key}'" for key in values if key not in CONFIG_KEYS]
    incoming = PackagerConfig.from_dict(dict(values))
    errors.extend(validate_config(incoming))
    if errors:
        raise ValidationError(errors)

    existing = PackagerConfig.from_dict(load_yaml_config(path) or {})
    updated = existing.merge(incoming)
    save_config(updated, path)
    return updated
