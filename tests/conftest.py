"""Shared pytest fixtures and git helpers for gitosisctl tests.

Integration fixtures use real ``git``: a bare authority repository seeded
with a ``gitosis.conf``, and a working copy cloned from it.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from gitosisctl.config import logging as gitosis_logging
from gitosisctl.config.models import GitConfig
from gitosisctl.config.settings import GitosisSettings
from gitosisctl.infrastructure.working_copy import WorkingCopySync
from gitosisctl.services.access import AccessControlService

BRANCH = "master"

INITIAL_CONF = """\
[gitosis]

[group gitosis-admin]
writable = gitosis-admin
members = admin@bootstrap
"""


# ---------------------------------------------------------------------------
# Git helpers
# ---------------------------------------------------------------------------


def git(cwd: Path, *args: str) -> str:
    """Run git in *cwd* and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def configure_identity(repo: Path) -> None:
    git(repo, "config", "user.email", "test@test.com")
    git(repo, "config", "user.name", "Test")


def clone(authority: Path, dest: Path) -> Path:
    git(dest.parent, "clone", "--quiet", "--branch", BRANCH, str(authority), str(dest))
    configure_identity(dest)
    return dest


def remote_subjects(authority: Path) -> list[str]:
    """Commit subjects on the authority branch, newest first."""
    return git(authority, "log", "--format=%s", BRANCH).splitlines()


def remote_head(authority: Path) -> str:
    return git(authority, "rev-parse", BRANCH).strip()


def remote_conf(authority: Path) -> str:
    return git(authority, "show", f"{BRANCH}:gitosis.conf")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo configure_logging() calls made by CLI tests."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    app_level = logging.getLogger("gitosisctl").level
    configured = gitosis_logging._state["configured"]
    yield
    gitosis_logging._state["configured"] = configured
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("gitosisctl").setLevel(app_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def authority(tmp_path: Path) -> Path:
    """Bare authority repository with one commit holding INITIAL_CONF."""
    bare = tmp_path / "gitosis-admin.git"
    bare.mkdir()
    git(bare, "init", "--quiet", "--bare")
    git(bare, "symbolic-ref", "HEAD", f"refs/heads/{BRANCH}")

    seed = tmp_path / "seed"
    seed.mkdir()
    git(seed, "init", "--quiet")
    git(seed, "symbolic-ref", "HEAD", f"refs/heads/{BRANCH}")
    configure_identity(seed)
    (seed / "gitosis.conf").write_text(INITIAL_CONF, encoding="utf-8")
    git(seed, "add", "gitosis.conf")
    git(seed, "commit", "--quiet", "-m", "Initial gitosis configuration")
    git(seed, "push", "--quiet", str(bare), f"{BRANCH}:{BRANCH}")
    return bare


@pytest.fixture
def repo_root(tmp_path: Path, authority: Path) -> Path:
    """The working copy: a clone of the authority."""
    return clone(authority, tmp_path / "work")


@pytest.fixture
def competitor(tmp_path: Path, authority: Path) -> Path:
    """A second clone standing in for another process pushing to the authority."""
    return clone(authority, tmp_path / "competitor")


@pytest.fixture
def working_copy(repo_root: Path) -> WorkingCopySync:
    return WorkingCopySync(repo_root, branch=BRANCH)


@pytest.fixture
def service(working_copy: WorkingCopySync) -> AccessControlService:
    return AccessControlService(working_copy)


@pytest.fixture
def settings(repo_root: Path) -> GitosisSettings:
    return GitosisSettings(git=GitConfig(gitosis_repo=repo_root, branch=BRANCH))


def push_competing_change(competitor: Path, section: str, message: str) -> None:
    """Append *section* to the competitor's gitosis.conf, commit and push it."""
    git(competitor, "pull", "--quiet", "--ff-only")
    conf = competitor / "gitosis.conf"
    conf.write_text(conf.read_text(encoding="utf-8") + f"\n[{section}]\n", encoding="utf-8")
    git(competitor, "commit", "--quiet", "-am", message)
    git(competitor, "push", "--quiet", "origin", BRANCH)
