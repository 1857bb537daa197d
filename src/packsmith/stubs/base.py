"""Stub provider definition."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from packsmith.errors import TemplateDecodeError

STUB_SUFFIX = ".stub"


@dataclass(frozen=True)
class StubProvider:
    """A directory of stub files queried by id.

    A stub id maps to ``<root>/<id>.stub``. Contents are opaque text.
    """

    label: str  # e.g. "local", "global", "builtin"
    root: Path

    def path_for(self, stub_id: str) -> Path:
        return self.root / f"{stub_id}{STUB_SUFFIX}"

    def get(self, stub_id: str) -> str | None:
        """Return the stub text, or None if this provider lacks it.

        Raises:
            TemplateDecodeError: If the file is not valid UTF-8.
        """
        path = self.path_for(stub_id)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise TemplateDecodeError(path, f"not valid UTF-8 ({e.reason})") from e

    def stub_ids(self) -> list[str]:
        """List stub ids available from this provider."""
        if not self.root.is_dir():
            return []
        return sorted(
            p.name[: -len(STUB_SUFFIX)]
            for p in self.root.iterdir()
            if p.is_file() and p.name.endswith(STUB_SUFFIX)
        )
