"""Shared fixtures: keep tests away from the real home and working directory."""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_env(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point HOME and the cwd at fresh temporary directories.

    Both live outside `tmp_path`, so tests can assert on its exact contents.
    """
    home = tmp_path_factory.mktemp("home")
    project = tmp_path_factory.mktemp("project")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(project)
    return project
