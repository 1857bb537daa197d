"""Package generation: resolve artifacts, render stubs, write the tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from packsmith.artifacts import ArtifactSpec, resolve_artifacts
from packsmith.errors import PacksmithError, ValidationError
from packsmith.materializer import (
    ConflictPolicy,
    RenderedArtifact,
    RunState,
    materialize,
)
from packsmith.package.descriptor import PackageDescriptor
from packsmith.render import render, unresolved_placeholders
from packsmith.stubs.loader import StubStore

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of a generation run."""

    state: RunState
    root: Path
    artifacts: list[ArtifactSpec] = field(default_factory=list)
    written: list[str] = field(default_factory=list)
    replaced: bool = False

    @property
    def exit_code(self) -> int:
        return 0 if self.state in (RunState.COMPLETE, RunState.DECLINED) else 1


def failure_state(error: PacksmithError) -> RunState:
    """Terminal state for a run that raised `error`.

    Invalid input aborts before any work starts; everything else fails
    mid-run.
    """
    return RunState.ABORTED if isinstance(error, ValidationError) else RunState.FAILED


def package_root(descriptor: PackageDescriptor, output_dir: Path) -> Path:
    """Directory the package is generated into: ``<output_dir>/<name>``."""
    return Path(output_dir) / descriptor.name


def render_artifact(artifact: ArtifactSpec, store: StubStore) -> RenderedArtifact:
    """Resolve and render one artifact.

    Tokens without a placeholder value are kept verbatim and logged.

    Raises:
        TemplateNotFoundError: If the stub is missing from every provider.
        TemplateDecodeError: If the stub file is not valid UTF-8.
    """
    if artifact.template_id is None:
        return RenderedArtifact(artifact.relative_path, None)

    template = store.resolve(artifact.template_id, artifact.fallback)
    for key in unresolved_placeholders(template, artifact.placeholders):
        logger.warning(
            "Unresolved placeholder {{%s}} in stub '%s' (%s)",
            key,
            artifact.template_id,
            artifact.relative_path,
        )
    return RenderedArtifact(
        artifact.relative_path, render(template, artifact.placeholders)
    )


def render_artifacts(
    artifacts: list[ArtifactSpec], store: StubStore
) -> list[RenderedArtifact]:
    """Render every artifact in memory; the first missing stub aborts."""
    return [render_artifact(artifact, store) for artifact in artifacts]


def generate_package(
    descriptor: PackageDescriptor,
    output_dir: Path,
    conflict_policy: ConflictPolicy,
    store: StubStore | None = None,
) -> GenerationResult:
    """Generate the package tree for `descriptor` under `output_dir`.

    All stubs are rendered before anything touches the disk, so a missing
    stub never leaves a partial tree behind.

    Raises:
        TemplateNotFoundError: If a stub cannot be resolved.
        TemplateDecodeError: If a stub file is not valid UTF-8.
        FilesystemError: If writing the tree fails.
    """
    store = store or StubStore()
    root = package_root(descriptor, output_dir)

    artifacts = resolve_artifacts(descriptor)
    logger.debug("Resolved %d artifacts for %s", len(artifacts), descriptor.name)

    rendered = render_artifacts(artifacts, store)
    result = materialize(root, rendered, conflict_policy)

    return GenerationResult(
        state=result.state,
        root=root,
        artifacts=artifacts,
        written=result.written,
        replaced=result.replaced,
    )
