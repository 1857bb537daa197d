"""Configuration schema for packsmith."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any


@dataclass
class PackagerConfig:
    """Packsmith configuration schema.

    Fields mirror the `packsmith make` options they provide defaults for.
    None values indicate "not set" and will use defaults or be inherited.
    """

    # Owner metadata
    vendor: str | None = None
    author: str | None = None
    email: str | None = None

    # Package metadata
    license: str | None = None
    locale: str | None = None
    package_type: str | None = None

    # Locations
    output_dir: str | None = None
    stubs_dir: str | None = None

    # Feature keys switched on by default
    features: tuple[str, ...] | None = None

    def merge(self, other: PackagerConfig) -> PackagerConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Returns a new PackagerConfig instance.
        """
        merged: dict[str, Any] = {}
        for f in fields(self):
            theirs = getattr(other, f.name)
            merged[f.name] = theirs if theirs is not None else getattr(self, f.name)
        return PackagerConfig(**merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            result[f.name] = list(value) if f.name == "features" else value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackagerConfig:
        """Create a PackagerConfig from a dictionary.

        Unknown keys are ignored. Scalars are coerced to strings and a
        comma separated `features` string is split.
        """
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = data.get(f.name)
            if raw is None:
                continue
            if f.name == "features":
                if isinstance(raw, str):
                    raw = [part for part in raw.split(",") if part.strip()]
                if isinstance(raw, (list, tuple)):
                    values["features"] = tuple(str(item).strip() for item in raw)
                continue
            values[f.name] = str(raw)
        return cls(**values)


# Default configuration values (used when not specified anywhere)
DEFAULT_CONFIG = PackagerConfig(
    vendor="your-vendor",
    author="Your Name",
    email="your.email@example.com",
    license="MIT",
    locale="en",
    package_type="default",
    output_dir="packages",
    features=(),
)
