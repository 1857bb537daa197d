"""Stub discovery and resolution."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from packsmith.errors import TemplateNotFoundError
from packsmith.stubs.base import STUB_SUFFIX, StubProvider

logger = logging.getLogger(__name__)

# Constants
STUBS_DIRNAME = "stubs"
STATE_DIRNAME = ".packsmith"


def get_package_stubs_path() -> Path:
    """Get path to package-bundled default stubs."""
    return Path(__file__).parent / "default"


def get_global_stubs_path() -> Path:
    """Get path to global user stubs: ~/.packsmith/stubs/."""
    return Path.home() / STATE_DIRNAME / STUBS_DIRNAME


def get_local_stubs_path() -> Path:
    """Get path to project-specific stubs: ./.packsmith/stubs/."""
    return Path.cwd() / STATE_DIRNAME / STUBS_DIRNAME


def get_stub_providers(override: Path | None = None) -> list[StubProvider]:
    """Return stub providers in priority order (highest first).

    Resolution order:
    1. Explicit override directory (--stubs / config stubs_dir)
    2. Local project stubs (./.packsmith/stubs/)
    3. Global user stubs (~/.packsmith/stubs/)
    4. Built-in stubs shipped with packsmith
    """
    providers: list[StubProvider] = []
    if override is not None:
        providers.append(StubProvider("override", override))
    providers.append(StubProvider("local", get_local_stubs_path()))
    providers.append(StubProvider("global", get_global_stubs_path()))
    providers.append(StubProvider("builtin", get_package_stubs_path()))
    return providers


class StubStore:
    """Resolves stub ids against an ordered list of providers.

    The first provider holding the id wins; exhausting the list is the only
    failure path.
    """

    def __init__(self, providers: list[StubProvider] | None = None) -> None:
        if providers is None:
            providers = get_stub_providers()
        self._providers = list(providers)

    @property
    def providers(self) -> list[StubProvider]:
        return list(self._providers)

    def resolve(self, stub_id: str, fallback: str | None = None) -> str:
        """Return the text of `stub_id` from the highest priority provider.

        Every provider is searched for `stub_id` before any is searched for
        `fallback`.

        Raises:
            TemplateNotFoundError: If no provider holds either stub.
            TemplateDecodeError: If the winning stub file is not UTF-8.
        """
        for candidate in (stub_id, fallback):
            if candidate is None:
                continue
            for provider in self._providers:
                content = provider.get(candidate)
                if content is not None:
                    logger.debug("Stub %s resolved from %s", candidate, provider.label)
                    return content
        raise TemplateNotFoundError(stub_id, [str(p.root) for p in self._providers])

    def source_of(self, stub_id: str) -> StubProvider | None:
        """Return the provider that would serve `stub_id`, if any."""
        for provider in self._providers:
            if provider.path_for(stub_id).is_file():
                return provider
        return None

    def available(self) -> dict[str, StubProvider]:
        """Map every known stub id to the provider that serves it."""
        found: dict[str, StubProvider] = {}
        # Lowest priority first so higher priority providers overwrite.
        for provider in reversed(self._providers):
            for stub_id in provider.stub_ids():
                found[stub_id] = provider
        return dict(sorted(found.items()))


def publish_default_stubs(local: bool = True, overwrite: bool = False) -> list[str]:
    """Copy built-in stubs to an override directory for customisation.

    Args:
        local: If True, copy to ./.packsmith/stubs/ (project-local).
               If False, copy to ~/.packsmith/stubs/ (global).
        overwrite: If True, replace stubs that already exist there.

    Returns:
        List of stub ids that were copied.
    """
    target = get_local_stubs_path() if local else get_global_stubs_path()
    target.mkdir(parents=True, exist_ok=True)

    copied: list[str] = []
    for stub_id in StubProvider("builtin", get_package_stubs_path()).stub_ids():
        dest = target / f"{stub_id}{STUB_SUFFIX}"
        if dest.exists() and not overwrite:
            continue
        shutil.copyfile(get_package_stubs_path() / f"{stub_id}{STUB_SUFFIX}", dest)
        copied.append(stub_id)

    return copied
