"""Validated, immutable description of the package being generated."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType

from packsmith.config.schema import DEFAULT_CONFIG, PackagerConfig
from packsmith.errors import ValidationError
from packsmith.package.features import (
    FeatureKey,
    PackageType,
    expand_flags,
    parse_feature_key,
    parse_package_type,
)
from packsmith.package.naming import (
    class_name_from,
    namespace_from,
    table_name_from,
    title_from,
)

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s.]+(\.[^@\s.]+)+$")
LOCALE_PATTERN = re.compile(r"^[a-z]{2}(_[A-Z]{2})?$")
IDENTIFIER_HINT = "use lowercase words joined by single dashes"


@dataclass(frozen=True)
class PackageDescriptor:
    """Everything the generator needs to know about one package.

    Built once per run by `resolve_descriptor`. Derived identifiers are
    properties so they always follow `vendor` and `name`.
    """

    name: str
    vendor: str
    description: str
    author: str
    email: str
    license: str = "MIT"
    locale: str = "en"
    year: int = 1970
    package_type: PackageType = PackageType.DEFAULT
    features: frozenset[FeatureKey] = frozenset()

    @property
    def namespace(self) -> str:
        return namespace_from(self.vendor, self.name)

    @property
    def class_name(self) -> str:
        return class_name_from(self.name)

    @property
    def table_name(self) -> str:
        return table_name_from(self.class_name)

    @property
    def title(self) -> str:
        return title_from(self.name)

    @property
    def package_name(self) -> str:
        """Published manifest name, ``vendor/name``."""
        return f"{self.vendor}/{self.name}"

    @property
    def feature_flags(self) -> Mapping[FeatureKey, bool]:
        """Read-only flag for every feature key."""
        return MappingProxyType({key: key in self.features for key in FeatureKey})

    def enabled(self, key: FeatureKey) -> bool:
        return key in self.features

    def placeholders(self) -> dict[str, str]:
        """Flat placeholder mapping shared by every stub."""
        return {
            "name": self.name,
            "vendor": self.vendor,
            "packageName": self.package_name,
            "description": self.description,
            "author": self.author,
            "email": self.email,
            "license": self.license,
            "locale": self.locale,
            "year": str(self.year),
            "packageType": self.package_type.value,
            "namespace": self.namespace,
            "class": self.class_name,
            "table": self.table_name,
            "title": self.title,
        }


def _coerce_features(
    features: Mapping[str | FeatureKey, bool] | None, errors: list[str]
) -> dict[FeatureKey, bool]:
    options: dict[FeatureKey, bool] = {}
    for raw_key, value in (features or {}).items():
        if isinstance(raw_key, FeatureKey):
            options[raw_key] = bool(value)
            continue
        try:
            options[parse_feature_key(raw_key)] = bool(value)
        except ValueError:
            errors.append(f"Unknown feature '{raw_key}'")
    return options


def resolve_descriptor(
    name: str,
    vendor: str | None = None,
    description: str | None = None,
    author: str | None = None,
    email: str | None = None,
    features: Mapping[str | FeatureKey, bool] | None = None,
    all_features: bool = False,
    license: str | None = None,
    locale: str | None = None,
    year: int | None = None,
    package_type: str | PackageType | None = None,
    config: PackagerConfig | None = None,
) -> PackageDescriptor:
    """Validate raw input and build the PackageDescriptor.

    Missing values fall back to `config`, then to the built-in defaults.
    Features enabled in the config are switched on as well. Each flag is
    expanded as ``flag OR all_features``.

    Raises:
        ValidationError: If name, vendor, email, locale, package type or a
            feature key is malformed. No filesystem access happens before
            this returns.
    """
    cfg = DEFAULT_CONFIG.merge(config) if config is not None else DEFAULT_CONFIG
    errors: list[str] = []

    vendor = vendor if vendor is not None else cfg.vendor or ""
    author = author if author is not None else cfg.author or ""
    email = email if email is not None else cfg.email or ""
    license = license or cfg.license or "MIT"
    locale = locale or cfg.locale or "en"

    if not IDENTIFIER_PATTERN.match(name or ""):
        errors.append(f"Invalid package name '{name}': {IDENTIFIER_HINT}")
    if not IDENTIFIER_PATTERN.match(vendor):
        errors.append(f"Invalid vendor '{vendor}': {IDENTIFIER_HINT}")
    if not EMAIL_PATTERN.match(email):
        errors.append(f"Invalid email address '{email}'")
    if not LOCALE_PATTERN.match(locale):
        errors.append(f"Invalid locale '{locale}'")

    raw_type = package_type or cfg.package_type or PackageType.DEFAULT
    try:
        resolved_type = parse_package_type(raw_type)
    except ValueError:
        errors.append(f"Unknown package type '{raw_type}'")

    # Config-enabled features act as defaults; explicit options win.
    defaults = _coerce_features(dict.fromkeys(cfg.features or (), True), errors)
    options = {**defaults, **_coerce_features(features, errors)}

    if errors:
        raise ValidationError(errors)

    flags = expand_flags(options, all_features)
    enabled = frozenset(key for key, on in flags.items() if on)
    logger.debug("Resolved features for %s: %s", name, sorted(k.value for k in enabled))

    return PackageDescriptor(
        name=name,
        vendor=vendor,
        description=description or f"A Laravel package for {name}",
        author=author,
        email=email,
        license=license,
        locale=locale,
        year=year if year is not None else date.today().year,
        package_type=resolved_type,
        features=enabled,
    )
