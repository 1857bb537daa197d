"""Feature toggles controlling which artifacts get generated."""

from __future__ import annotations

from enum import Enum

ALL_OPTION = "all"


class FeatureKey(str, Enum):
    """Optional artifact categories.

    Declaration order is the tie-break order used when artifacts are
    resolved, so keep related keys next to each other.
    """

    PROVIDER = "provider"
    FACADE = "facade"
    CONTROLLER = "controller"
    MODEL = "model"  # model + migration
    COMMAND = "command"
    MIDDLEWARE = "middleware"
    EVENT = "event"  # event + listener
    NOTIFICATION = "notification"
    INTERFACE = "interface"  # interface + implementation
    REPOSITORY = "repository"
    SERVICE = "service"
    CONFIG = "config"
    VIEWS = "views"
    LANG = "lang"
    MIGRATIONS = "migrations"
    ROUTES = "routes"
    TESTS = "tests"

    @property
    def option_name(self) -> str:
        """CLI flag name, e.g. ``--with-model``."""
        return f"with-{self.value}"


FEATURE_DESCRIPTIONS: dict[FeatureKey, str] = {
    FeatureKey.PROVIDER: "Package service provider.",
    FeatureKey.FACADE: "Facade class.",
    FeatureKey.CONTROLLER: "HTTP controller.",
    FeatureKey.MODEL: "Eloquent model and its migration.",
    FeatureKey.COMMAND: "Artisan console command.",
    FeatureKey.MIDDLEWARE: "HTTP middleware.",
    FeatureKey.EVENT: "Event and listener pair.",
    FeatureKey.NOTIFICATION: "Notification class.",
    FeatureKey.INTERFACE: "Contract interface and its implementation.",
    FeatureKey.REPOSITORY: "Repository class.",
    FeatureKey.SERVICE: "Service class (implies the repository).",
    FeatureKey.CONFIG: "Publishable config file.",
    FeatureKey.VIEWS: "Blade view.",
    FeatureKey.LANG: "Language file.",
    FeatureKey.MIGRATIONS: "Tracked migrations directory.",
    FeatureKey.ROUTES: "Routes file.",
    FeatureKey.TESTS: "Test case, example tests and phpunit.xml.",
}


def parse_feature_key(value: str) -> FeatureKey:
    """Parse a feature name, accepting ``model``, ``with-model`` or ``with_model``.

    Raises ValueError for unknown names.
    """
    name = value.strip().lower().replace("_", "-")
    if name.startswith("with-"):
        name = name[len("with-") :]
    return FeatureKey(name)


def expand_flags(
    options: dict[FeatureKey, bool], all_features: bool = False
) -> dict[FeatureKey, bool]:
    """Return a flag for every key, each expanded as ``flag OR all``."""
    return {key: bool(options.get(key, False)) or all_features for key in FeatureKey}


class PackageType(str, Enum):
    """Package flavour; each adds a few base directories."""

    DEFAULT = "default"
    ADMIN_PANEL = "admin-panel"
    API_SERVICE = "api-service"
    THEME = "theme"


TYPE_DIRECTORIES: dict[PackageType, tuple[str, ...]] = {
    PackageType.DEFAULT: (),
    PackageType.ADMIN_PANEL: ("resources/assets/js", "resources/assets/css"),
    PackageType.API_SERVICE: ("src/Http/Controllers/Api", "src/Http/Resources"),
    PackageType.THEME: (
        "resources/assets/js",
        "resources/assets/css",
        "resources/assets/images",
    ),
}


def parse_package_type(value: str) -> PackageType:
    """Parse a package type name. Raises ValueError for unknown names."""
    return PackageType(value.strip().lower().replace("_", "-"))
