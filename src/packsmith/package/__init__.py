"""Package description: names, feature toggles and the resolved descriptor."""

from packsmith.package.descriptor import PackageDescriptor, resolve_descriptor
from packsmith.package.features import (
    FeatureKey,
    PackageType,
    parse_feature_key,
    parse_package_type,
)
from packsmith.package.naming import class_name_from, namespace_from

__all__ = [
    "FeatureKey",
    "PackageDescriptor",
    "PackageType",
    "class_name_from",
    "namespace_from",
    "parse_feature_key",
    "parse_package_type",
    "resolve_descriptor",
]
