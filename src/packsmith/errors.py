"""Exception hierarchy for packsmith."""

from __future__ import annotations

from pathlib import Path


class PacksmithError(Exception):
    """Base exception for packsmith failures reported to the user."""


class ValidationError(PacksmithError):
    """Raised when package input is malformed.

    Collects every problem found so the user can fix them in one pass.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class TemplateNotFoundError(PacksmithError):
    """Raised when a stub id is missing from every search root."""

    def __init__(self, stub_id: str, searched: list[str]) -> None:
        self.stub_id = stub_id
        self.searched = list(searched)
        where = ", ".join(self.searched) if self.searched else "no stub roots"
        super().__init__(f"Stub '{stub_id}' not found (searched: {where})")


class FilesystemError(PacksmithError):
    """Raised when writing the package tree fails."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write {path}: {reason}")


class FeatureGraphError(PacksmithError):
    """Raised when the feature table contains a dependency cycle."""


class TemplateDecodeError(PacksmithError):
    """Raised when a stub file is not valid UTF-8 text."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read stub {path}: {reason}")
