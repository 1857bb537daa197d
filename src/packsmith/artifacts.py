"""Resolve a package descriptor into the ordered list of artifacts to write.

Each feature key is described once in `FEATURE_TABLE`: the artifacts it
emits, the keys it must come after, and the keys it pulls in. Resolution is
a deterministic topological walk over the enabled keys.
"""

from __future__ import annotations

import heapq
import json
import logging
import re
from dataclasses import dataclass, field

from packsmith.errors import FeatureGraphError
from packsmith.package.descriptor import PackageDescriptor
from packsmith.package.features import TYPE_DIRECTORIES, FeatureKey
from packsmith.package.naming import NAMESPACE_SEPARATOR, snake_case
from packsmith.render import render

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactEntry:
    """One artifact a feature emits. `stub` is None for a bare directory.

    `stub` may contain placeholders; `fallback` is tried when the rendered
    stub id resolves nowhere.
    """

    path: str  # relative, may contain {{placeholders}}
    stub: str | None = None
    fallback: str | None = None


@dataclass(frozen=True)
class FeatureEntry:
    """Generator table row for a feature key."""

    artifacts: tuple[ArtifactEntry, ...]
    after: tuple[FeatureKey, ...] = ()  # ordering only
    requires: tuple[FeatureKey, ...] = ()  # enabling this enables those


@dataclass(frozen=True)
class ArtifactSpec:
    """A single file or directory to materialize."""

    relative_path: str
    template_id: str | None
    placeholders: dict[str, str] = field(default_factory=dict, compare=False)
    feature: FeatureKey | None = None  # None for base artifacts
    fallback: str | None = None

    @property
    def is_directory(self) -> bool:
        return self.template_id is None


BASE_ARTIFACTS: tuple[ArtifactEntry, ...] = (
    ArtifactEntry("src"),
    ArtifactEntry("config"),
    ArtifactEntry("resources/lang/{{locale}}"),
    ArtifactEntry("resources/views"),
    ArtifactEntry("routes"),
    ArtifactEntry("database/migrations"),
    ArtifactEntry("database/seeders"),
    ArtifactEntry("database/factories"),
    ArtifactEntry("composer.json", "manifest"),
    ArtifactEntry("README.md", "readme"),
    ArtifactEntry("LICENSE.md", "license-{{licenseSlug}}", fallback="license"),
    ArtifactEntry(".gitignore", "gitignore"),
)

FEATURE_TABLE: dict[FeatureKey, FeatureEntry] = {
    FeatureKey.PROVIDER: FeatureEntry(
        (ArtifactEntry("src/{{providerClass}}.php", "provider"),),
    ),
    FeatureKey.FACADE: FeatureEntry(
        (ArtifactEntry("src/Facades/{{class}}.php", "facade"),),
        after=(FeatureKey.PROVIDER,),
    ),
    FeatureKey.CONTROLLER: FeatureEntry(
        (ArtifactEntry("src/Http/Controllers/{{controllerClass}}.php", "controller"),),
    ),
    FeatureKey.MODEL: FeatureEntry(
        (
            ArtifactEntry("src/Models/{{class}}.php", "model"),
            ArtifactEntry("database/migrations/{{migrationFile}}", "migration"),
        ),
    ),
    FeatureKey.COMMAND: FeatureEntry(
        (ArtifactEntry("src/Console/Commands/{{commandClass}}.php", "command"),),
    ),
    FeatureKey.MIDDLEWARE: FeatureEntry(
        (ArtifactEntry("src/Http/Middleware/{{middlewareClass}}.php", "middleware"),),
    ),
    FeatureKey.EVENT: FeatureEntry(
        (
            ArtifactEntry("src/Events/{{eventClass}}.php", "event"),
            ArtifactEntry("src/Listeners/{{listenerClass}}.php", "listener"),
        ),
    ),
    FeatureKey.NOTIFICATION: FeatureEntry(
        (
            ArtifactEntry(
                "src/Notifications/{{notificationClass}}.php", "notification"
            ),
        ),
    ),
    FeatureKey.INTERFACE: FeatureEntry(
        (
            ArtifactEntry("src/Contracts/{{interfaceClass}}.php", "interface"),
            ArtifactEntry("src/{{class}}.php", "implementation"),
        ),
    ),
    FeatureKey.REPOSITORY: FeatureEntry(
        (ArtifactEntry("src/Repositories/{{repositoryClass}}.php", "repository"),),
    ),
    FeatureKey.SERVICE: FeatureEntry(
        (ArtifactEntry("src/Services/{{serviceClass}}.php", "service"),),
        after=(FeatureKey.REPOSITORY,),
        requires=(FeatureKey.REPOSITORY,),
    ),
    FeatureKey.CONFIG: FeatureEntry(
        (ArtifactEntry("config/{{name}}.php", "config"),),
    ),
    FeatureKey.VIEWS: FeatureEntry(
        (ArtifactEntry("resources/views/index.blade.php", "view"),),
    ),
    FeatureKey.LANG: FeatureEntry(
        (ArtifactEntry("resources/lang/{{locale}}/messages.php", "lang"),),
    ),
    FeatureKey.MIGRATIONS: FeatureEntry(
        (ArtifactEntry("database/migrations/.gitkeep", "gitkeep"),),
        after=(FeatureKey.MODEL,),
    ),
    FeatureKey.ROUTES: FeatureEntry(
        (ArtifactEntry("routes/web.php", "routes"),),
    ),
    FeatureKey.TESTS: FeatureEntry(
        (
            ArtifactEntry("tests/Feature"),
            ArtifactEntry("tests/Unit"),
            ArtifactEntry("tests/TestCase.php", "test-case"),
            ArtifactEntry("tests/Feature/ExampleTest.php", "feature-test"),
            ArtifactEntry("tests/Unit/ExampleTest.php", "unit-test"),
            ArtifactEntry("phpunit.xml", "phpunit"),
        ),
        after=(FeatureKey.PROVIDER,),
        requires=(FeatureKey.PROVIDER,),
    ),
}


_SLUG_INVALID = re.compile(r"[^a-z0-9.-]+")


def license_slug(license: str) -> str:
    """Stub id suffix for a license: ``Apache-2.0`` -> ``apache-2.0``."""
    return _SLUG_INVALID.sub("-", license.strip().lower()).strip("-")


def _json_text(value: str) -> str:
    """Escape a value for use inside a JSON string literal."""
    return json.dumps(value, ensure_ascii=False)[1:-1]


def build_placeholders(
    descriptor: PackageDescriptor, features: set[FeatureKey] | None = None
) -> dict[str, str]:
    """Flat placeholder mapping for every stub of this package.

    `features` is the resolved feature set; it defaults to the descriptor's
    flags plus everything they require. All values are pure functions of the
    descriptor.
    """
    if features is None:
        features = enabled_features(descriptor)
    values = descriptor.placeholders()
    cls = descriptor.class_name
    namespace = descriptor.namespace
    sep = NAMESPACE_SEPARATOR

    values.update(
        {
            "providerClass": f"{cls}ServiceProvider",
            "controllerClass": f"{cls}Controller",
            "commandClass": f"{cls}Command",
            "commandSignature": f"{descriptor.name}:run",
            "middlewareClass": f"{cls}Middleware",
            "eventClass": f"{cls}Event",
            "listenerClass": f"{cls}Listener",
            "notificationClass": f"{cls}Notification",
            "interfaceClass": f"{cls}Interface",
            "repositoryClass": f"{cls}Repository",
            "serviceClass": f"{cls}Service",
            "migrationFile": f"create_{descriptor.table_name}_table.php",
            "configKey": snake_case(descriptor.name),
            "testNamespace": f"{namespace}{sep}Tests",
            "licenseSlug": license_slug(descriptor.license),
        }
    )

    providers: list[str] = []
    if FeatureKey.PROVIDER in features:
        providers.append(f"{namespace}{sep}{values['providerClass']}")

    values.update(
        {
            "packageNameJson": _json_text(descriptor.package_name),
            "descriptionJson": _json_text(descriptor.description),
            "authorJson": _json_text(descriptor.author),
            "emailJson": _json_text(descriptor.email),
            "licenseJson": _json_text(descriptor.license),
            "namespaceJson": _json_text(f"{namespace}{sep}"),
            "testNamespaceJson": _json_text(f"{namespace}{sep}Tests{sep}"),
            "providersJson": json.dumps(providers),
        }
    )
    return values


def enabled_features(descriptor: PackageDescriptor) -> set[FeatureKey]:
    """Enabled keys plus every key they transitively require."""
    enabled: set[FeatureKey] = set()
    pending = [key for key in FeatureKey if descriptor.enabled(key)]
    while pending:
        key = pending.pop()
        if key in enabled:
            continue
        enabled.add(key)
        for required in FEATURE_TABLE[key].requires:
            if required not in enabled:
                logger.debug("Feature %s pulls in %s", key.value, required.value)
                pending.append(required)
    return enabled


def order_features(keys: set[FeatureKey]) -> list[FeatureKey]:
    """Topologically sort `keys` so predecessors come first.

    Ties are broken by FeatureKey declaration order, so the result is
    deterministic.

    Raises:
        FeatureGraphError: If the table has a cycle among `keys`.
    """
    rank = {key: i for i, key in enumerate(FeatureKey)}
    incoming: dict[FeatureKey, set[FeatureKey]] = {key: set() for key in keys}
    for key in keys:
        entry = FEATURE_TABLE[key]
        for before in (*entry.after, *entry.requires):
            if before in keys:
                incoming[key].add(before)

    ready = [(rank[key], key) for key, deps in incoming.items() if not deps]
    heapq.heapify(ready)
    ordered: list[FeatureKey] = []
    while ready:
        _, key = heapq.heappop(ready)
        ordered.append(key)
        for other, deps in incoming.items():
            if key in deps:
                deps.discard(key)
                if not deps:
                    heapq.heappush(ready, (rank[other], other))

    if len(ordered) != len(keys):
        stuck = sorted(k.value for k in keys if k not in ordered)
        raise FeatureGraphError(f"Feature dependency cycle among: {', '.join(stuck)}")
    return ordered


def _spec(
    entry: ArtifactEntry, placeholders: dict[str, str], feature: FeatureKey | None
) -> ArtifactSpec:
    return ArtifactSpec(
        relative_path=render(entry.path, placeholders),
        template_id=render(entry.stub, placeholders) if entry.stub else None,
        placeholders=dict(placeholders),
        feature=feature,
        fallback=entry.fallback,
    )


def resolve_artifacts(descriptor: PackageDescriptor) -> list[ArtifactSpec]:
    """Return every artifact to generate, base artifacts first.

    Directories added by the package type follow the base artifacts. The
    sequence depends only on the descriptor.
    """
    features = enabled_features(descriptor)
    placeholders = build_placeholders(descriptor, features)
    artifacts = [_spec(entry, placeholders, None) for entry in BASE_ARTIFACTS]
    for directory in TYPE_DIRECTORIES[descriptor.package_type]:
        artifacts.append(_spec(ArtifactEntry(directory), placeholders, None))

    for key in order_features(features):
        for entry in FEATURE_TABLE[key].artifacts:
            artifacts.append(_spec(entry, placeholders, key))

    return artifacts
