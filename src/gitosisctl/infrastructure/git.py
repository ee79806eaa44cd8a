"""Version-control capability and its ``git`` subprocess implementation.

:class:`VersionControl` is the port :class:`~gitosisctl.infrastructure.working_copy.WorkingCopySync`
depends on; tests may pass any object with the same methods.
:class:`GitBackend` runs the ``git`` executable. Every failure surfaces as
a :class:`~gitosisctl.domain.errors.VersionControlError` (or a subclass);
nothing is swallowed.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from gitosisctl.domain.errors import PushRejected, VersionControlError

logger = logging.getLogger(__name__)

# Markers git prints when a push is refused because the remote moved on.
_REJECTION_MARKERS = ("[rejected]", "non-fast-forward", "fetch first")


@dataclass(frozen=True)
class CommitInfo:
    """One entry of ``git log``."""

    id: str
    subject: str


class VersionControl(Protocol):
    def clone(self, remote: str, dest: Path, *, branch: str) -> None: ...

    def add_tracked(self, cwd: Path, *paths: str) -> None: ...

    def has_staged_changes(self, cwd: Path) -> bool: ...

    def commit(self, cwd: Path, message: str) -> str: ...

    def push(self, cwd: Path, remote: str, branch: str) -> None: ...

    def fetch(self, cwd: Path, remote: str) -> None: ...

    def reset_hard(self, cwd: Path, ref: str) -> None: ...

    def rev_parse(self, cwd: Path, ref: str) -> str: ...

    def status(self, cwd: Path) -> list[str]: ...

    def ahead_count(self, cwd: Path, upstream: str) -> int: ...

    def log(self, cwd: Path, *, limit: int) -> list[CommitInfo]: ...


class GitBackend:
    """:class:`VersionControl` backed by the ``git`` command line.

    Args:
        executable: Name or path of the git binary.
        author_name: Optional ``user.name`` override for commits.
        author_email: Optional ``user.email`` override for commits.
    """

    def __init__(
        self,
        executable: str = "git",
        *,
        author_name: str | None = None,
        author_email: str | None = None,
    ) -> None:
        self._executable = executable
        self._identity: list[str] = []
        if author_name:
            self._identity += ["-c", f"user.name={author_name}"]
        if author_email:
            self._identity += ["-c", f"user.email={author_email}"]

    # ------------------------------------------------------------------
    # Subprocess plumbing
    # ------------------------------------------------------------------

    def _run(
        self, cwd: Path, *args: str, check: bool = True
    ) -> subprocess.CompletedProcess[str]:
        """Run git in *cwd*. Raises VersionControlError on failure when *check*."""
        cmd = [self._executable, *self._identity, *args]
        logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
        try:
            return subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=check,
            )
        except OSError as exc:
            raise VersionControlError(
                f"Cannot run git: {exc}", command=list(args), cwd=str(cwd)
            ) from exc
        except subprocess.CalledProcessError as exc:
            output = (exc.stderr or exc.stdout or "").strip()
            raise VersionControlError(
                f"git {args[0]} failed: {output}",
                command=list(args),
                cwd=str(cwd),
                returncode=exc.returncode,
            ) from exc

    # ------------------------------------------------------------------
    # VersionControl
    # ------------------------------------------------------------------

    def clone(self, remote: str, dest: Path, *, branch: str) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        self._run(dest.parent, "clone", "--branch", branch, remote, str(dest))

    def add_tracked(self, cwd: Path, *paths: str) -> None:
        """Stage modified and deleted tracked files, plus *paths*.

        Untracked files are left alone unless named in *paths*.
        """
        self._run(cwd, "add", "--update")
        if paths:
            self._run(cwd, "add", "--", *paths)

    def has_staged_changes(self, cwd: Path) -> bool:
        # Exit code 0: nothing staged. 1: staged changes. Anything else: error.
        result = self._run(cwd, "diff", "--cached", "--quiet", check=False)
        if result.returncode not in (0, 1):
            raise VersionControlError(
                f"git diff --cached failed: {result.stderr.strip()}",
                command=["diff", "--cached", "--quiet"],
                cwd=str(cwd),
                returncode=result.returncode,
            )
        return result.returncode == 1

    def commit(self, cwd: Path, message: str) -> str:
        self._run(cwd, "commit", "--quiet", "-m", message)
        return self.rev_parse(cwd, "HEAD")

    def push(self, cwd: Path, remote: str, branch: str) -> None:
        result = self._run(
            cwd, "push", "--porcelain", remote, f"HEAD:refs/heads/{branch}", check=False
        )
        if result.returncode == 0:
            return
        output = f"{result.stdout}\n{result.stderr}".strip()
        if any(marker in output for marker in _REJECTION_MARKERS):
            raise PushRejected(
                f"Push to {remote}/{branch} rejected: remote has diverged",
                remote=remote,
                branch=branch,
            )
        raise VersionControlError(
            f"git push failed: {output}",
            remote=remote,
            branch=branch,
            returncode=result.returncode,
        )

    def fetch(self, cwd: Path, remote: str) -> None:
        self._run(cwd, "fetch", "--quiet", remote)

    def reset_hard(self, cwd: Path, ref: str) -> None:
        self._run(cwd, "reset", "--quiet", "--hard", ref)

    def rev_parse(self, cwd: Path, ref: str) -> str:
        return self._run(cwd, "rev-parse", "--verify", ref).stdout.strip()

    def status(self, cwd: Path) -> list[str]:
        """Porcelain status lines for tracked files (untracked ignored)."""
        result = self._run(cwd, "status", "--porcelain", "--untracked-files=no")
        return [line for line in result.stdout.splitlines() if line.strip()]

    def ahead_count(self, cwd: Path, upstream: str) -> int:
        result = self._run(cwd, "rev-list", "--count", f"{upstream}..HEAD")
        return int(result.stdout.strip() or "0")

    def log(self, cwd: Path, *, limit: int) -> list[CommitInfo]:
        result = self._run(cwd, "log", f"-{limit}", "--pretty=format:%H%x09%s")
        entries: list[CommitInfo] = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            commit_id, _, subject = line.partition("\t")
            entries.append(CommitInfo(id=commit_id, subject=subject))
        return entries
