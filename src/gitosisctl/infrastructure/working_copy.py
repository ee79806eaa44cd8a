"""WorkingCopySync — the local gitosis-admin checkout and its remote.

The working copy is process-wide shared state. This class is the only
code that touches its path: it reads and writes ``gitosis.conf``, stages,
commits, pushes and re-synchronizes with the authority repository.

INVARIANT: Between :meth:`WorkingCopySync.synchronize` and a successful
:meth:`WorkingCopySync.push`, callers hold :meth:`WorkingCopySync.exclusive`.
A commit that is never pushed is reported, never retried in the background.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from gitosisctl.domain.errors import (
    NoChangesToCommit,
    PersistError,
    UnpushedCommit,
    VersionControlError,
    WorkingCopyDirty,
)
from gitosisctl.infrastructure.git import CommitInfo, GitBackend

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gitosisctl.infrastructure.git import VersionControl

logger = logging.getLogger(__name__)

DEFAULT_CONF_FILE = "gitosis.conf"

# One lock per resolved working-copy path, shared by every instance in the process.
_locks: dict[Path, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(root: Path) -> threading.Lock:
    key = root.resolve()
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.Lock()
        return lock


class WorkingCopySync:
    """A git working directory bound to one remote branch.

    Args:
        root: Working-copy directory (the gitosis-admin checkout).
        backend: Version-control capability; defaults to :class:`GitBackend`.
        remote: Remote name the working copy tracks.
        branch: Branch on the remote that holds the authority config.
        conf_file: Config file name relative to *root*.
    """

    def __init__(
        self,
        root: Path,
        *,
        backend: VersionControl | None = None,
        remote: str = "origin",
        branch: str = "master",
        conf_file: str = DEFAULT_CONF_FILE,
    ) -> None:
        self.root = Path(root)
        self.remote = remote
        self.branch = branch
        self._conf_file = conf_file
        self._backend: VersionControl = backend or GitBackend()
        self._lock = _lock_for(self.root)

    @property
    def upstream(self) -> str:
        return f"{self.remote}/{self.branch}"

    def conf_path(self) -> Path:
        return self.root / self._conf_file

    # ------------------------------------------------------------------
    # Concurrency
    # ------------------------------------------------------------------

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold the process-wide lock for this working copy."""
        self._lock.acquire()
        try:
            yield
        finally:
            self._lock.release()

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    def is_provisioned(self) -> bool:
        return (self.root / ".git").exists()

    def provision(self, remote_url: str) -> bool:
        """Clone *remote_url* into the working-copy root unless already there.

        Returns True if a clone was made.
        """
        with self.exclusive():
            if self.is_provisioned():
                logger.debug("Working copy already provisioned at %s", self.root)
                return False
            if self.root.exists() and any(self.root.iterdir()):
                raise VersionControlError(
                    f"Cannot clone into non-empty directory {self.root}", path=str(self.root)
                )
            self._backend.clone(remote_url, self.root, branch=self.branch)
            logger.info("Cloned %s into %s", remote_url, self.root)
            return True

    # ------------------------------------------------------------------
    # Config file I/O
    # ------------------------------------------------------------------

    def read_conf(self) -> bytes:
        """Raw bytes of the config file; a missing file reads as empty."""
        path = self.conf_path()
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return b""
        except OSError as exc:
            raise PersistError(f"Cannot read {path}: {exc}", path=str(path)) from exc

    def write_conf(self, content: bytes) -> None:
        path = self.conf_path()
        try:
            path.write_bytes(content)
        except OSError as exc:
            raise PersistError(f"Cannot write {path}: {exc}", path=str(path)) from exc

    # ------------------------------------------------------------------
    # Replication
    # ------------------------------------------------------------------

    def synchronize(self) -> str:
        """Bring the working copy to the remote tip before a mutation.

        Raises:
            WorkingCopyDirty: tracked files have uncommitted changes.
            UnpushedCommit: local commits are not on the remote.
            VersionControlError: fetch or reset failed.

        Returns the commit id now checked out.
        """
        self._backend.fetch(self.root, self.remote)
        dirty = self._backend.status(self.root)
        if dirty:
            raise WorkingCopyDirty(
                f"Working copy {self.root} has uncommitted changes", files=dirty
            )
        ahead = self._backend.ahead_count(self.root, self.upstream)
        if ahead:
            raise UnpushedCommit(
                f"Working copy is {ahead} commit(s) ahead of {self.upstream}",
                ahead=ahead,
                commit=self._backend.rev_parse(self.root, "HEAD"),
            )
        self._backend.reset_hard(self.root, self.upstream)
        return self._backend.rev_parse(self.root, "HEAD")

    def stage_and_commit(self, message: str) -> str:
        """Stage tracked changes and the config file, then commit with exactly *message*.

        Untracked files other than the config file never enter the commit.

        Raises:
            NoChangesToCommit: nothing differs from HEAD.
            VersionControlError: staging or committing failed.
        """
        self._backend.add_tracked(self.root, self._conf_file)
        if not self._backend.has_staged_changes(self.root):
            raise NoChangesToCommit("Nothing to commit", message=message)
        commit_id = self._backend.commit(self.root, message)
        logger.debug("Committed %s: %s", commit_id[:12], message)
        return commit_id

    def push(self) -> None:
        """Fast-forward the remote branch to the local HEAD.

        Raises:
            PushRejected: the remote has diverged.
            VersionControlError: any other failure (network, auth, I/O).
        """
        self._backend.push(self.root, self.remote, self.branch)
        logger.debug("Pushed to %s", self.upstream)

    def discard_local_commits(self) -> str:
        """Drop local commits and reset to the remote's current tip."""
        self._backend.fetch(self.root, self.remote)
        self._backend.reset_hard(self.root, self.upstream)
        head = self._backend.rev_parse(self.root, "HEAD")
        logger.debug("Reset working copy to %s (%s)", self.upstream, head[:12])
        return head

    def restore_tracked(self) -> None:
        """Throw away uncommitted changes to tracked files (reset to HEAD)."""
        self._backend.reset_hard(self.root, "HEAD")

    def head_commit(self) -> str:
        return self._backend.rev_parse(self.root, "HEAD")

    def log(self, limit: int = 10) -> list[CommitInfo]:
        return self._backend.log(self.root, limit=limit)
