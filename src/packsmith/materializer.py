"""Write rendered artifacts to disk.

Artifacts are written into a hidden staging directory next to the target
and swapped into place with a rename once every write succeeded. A failure
while staging leaves the target exactly as it was.
"""

from __future__ import annotations

import logging
import os
import secrets
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath

from packsmith.errors import FilesystemError

logger = logging.getLogger(__name__)

ConflictPolicy = Callable[[Path], bool]


class RunState(str, Enum):
    """States of a generation run."""

    VALIDATING = "validating"
    ABORTED = "aborted"
    CONFLICT_CHECK = "conflict-check"
    DECLINED = "declined"
    GENERATING = "generating"
    FAILED = "failed"
    COMPLETE = "complete"


@dataclass(frozen=True)
class RenderedArtifact:
    """An artifact ready to write. `content` is None for a directory."""

    relative_path: str
    content: str | None

    @property
    def is_directory(self) -> bool:
        return self.content is None


@dataclass
class MaterializeResult:
    """Outcome of `materialize`."""

    state: RunState
    root: Path
    written: list[str] = field(default_factory=list)
    replaced: bool = False  # an existing tree was overwritten


def always_overwrite(_root: Path) -> bool:
    return True


def never_overwrite(_root: Path) -> bool:
    return False


def _safe_relative(relative_path: str) -> PurePosixPath:
    """Reject paths that would land outside the package root."""
    rel = PurePosixPath(relative_path)
    if rel.is_absolute() or ".." in rel.parts or not rel.parts:
        raise FilesystemError(Path(relative_path), "path escapes the package root")
    return rel


def ensure_directory(path: Path) -> None:
    """Create `path` and its parents; existing directories are fine."""
    path.mkdir(parents=True, exist_ok=True)


def _remove_tree(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _stage(staging: Path, artifacts: list[RenderedArtifact]) -> list[str]:
    written: list[str] = []
    for artifact in artifacts:
        target = staging.joinpath(*_safe_relative(artifact.relative_path).parts)
        try:
            if artifact.content is None:
                ensure_directory(target)
            else:
                ensure_directory(target.parent)
                target.write_bytes(artifact.content.encode("utf-8"))
        except OSError as e:
            raise FilesystemError(target, e.strerror or str(e)) from e
        written.append(artifact.relative_path)
    return written


def _swap_into_place(staging: Path, root: Path) -> bool:
    """Move `staging` to `root`, replacing an existing tree.

    Returns True when an existing tree was replaced.
    """
    if not os.path.lexists(root):
        os.replace(staging, root)
        return False

    backup = root.with_name(f".{root.name}.{secrets.token_hex(4)}.old")
    os.replace(root, backup)
    try:
        os.replace(staging, root)
    except OSError:
        # Put the previous tree back before reporting the failure.
        os.replace(backup, root)
        raise
    try:
        _remove_tree(backup)
    except OSError:
        logger.warning("Could not remove previous tree at %s", backup, exc_info=True)
    return True


def materialize(
    root: Path,
    artifacts: list[RenderedArtifact],
    conflict_policy: ConflictPolicy,
) -> MaterializeResult:
    """Write `artifacts` under `root`.

    If `root` already exists, `conflict_policy(root)` decides: False leaves
    everything untouched and returns a DECLINED result; True replaces the
    existing tree entirely.

    Raises:
        FilesystemError: If staging or the final swap fails. The staging
            directory is removed and the previous tree, if any, is kept.
    """
    root = Path(root)
    if os.path.lexists(root):
        logger.debug("%s: %s already exists", RunState.CONFLICT_CHECK.value, root)
        if not conflict_policy(root):
            logger.info("Overwrite of %s declined", root)
            return MaterializeResult(state=RunState.DECLINED, root=root)

    try:
        ensure_directory(root.parent)
    except OSError as e:
        raise FilesystemError(root.parent, e.strerror or str(e)) from e

    staging = root.with_name(f".{root.name}.{secrets.token_hex(4)}.tmp")
    logger.debug("%s: staging into %s", RunState.GENERATING.value, staging)
    try:
        staging.mkdir()
        written = _stage(staging, artifacts)
        replaced = _swap_into_place(staging, root)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise FilesystemError(root, e.strerror or str(e)) from e
    except BaseException:
        # Interrupts too; no staging tree may outlive the run.
        shutil.rmtree(staging, ignore_errors=True)
        raise

    logger.info("Wrote %d artifacts to %s", len(written), root)
    return MaterializeResult(
        state=RunState.COMPLETE, root=root, written=written, replaced=replaced
    )
