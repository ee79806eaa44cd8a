"""Fixtures for CLI tests: a gitosisctl.toml pointing at the test working copy."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitosisctl.config.discovery import CONFIG_ENV_VAR, CONFIG_FILENAME


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for var in (CONFIG_ENV_VAR, "GITOSISCTL_GIT__GITOSIS_REPO", "GITOSISCTL_GIT__BRANCH"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def cli_config(tmp_path: Path, repo_root: Path) -> Path:
    """gitosisctl.toml in the (current) tmp directory, discovered by walk-up."""
    path = tmp_path / CONFIG_FILENAME
    path.write_text(
        f'[git]\ngitosis_repo = "{repo_root.name}"\nbranch = "master"\n', encoding="utf-8"
    )
    return path
