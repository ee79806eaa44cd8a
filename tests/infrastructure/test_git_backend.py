"""Tests for GitBackend — subprocess-based git primitives."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitosisctl.domain.errors import PushRejected, VersionControlError
from gitosisctl.infrastructure.git import GitBackend
from tests.conftest import BRANCH, git, push_competing_change, remote_head


@pytest.fixture
def backend() -> GitBackend:
    return GitBackend()


class TestCommit:
    def test_has_staged_changes(self, backend: GitBackend, repo_root: Path) -> None:
        assert backend.has_staged_changes(repo_root) is False
        (repo_root / "gitosis.conf").write_text("[group x]\n", encoding="utf-8")
        backend.add_tracked(repo_root)
        assert backend.has_staged_changes(repo_root) is True

    def test_add_tracked_skips_untracked(self, backend: GitBackend, repo_root: Path) -> None:
        (repo_root / "notes.txt").write_text("scratch", encoding="utf-8")
        backend.add_tracked(repo_root)
        assert backend.has_staged_changes(repo_root) is False
        assert "?? notes.txt" in git(repo_root, "status", "--porcelain")

    def test_add_tracked_named_path(self, backend: GitBackend, repo_root: Path) -> None:
        (repo_root / "notes.txt").write_text("scratch", encoding="utf-8")
        (repo_root / "new.conf").write_text("[group x]\n", encoding="utf-8")
        backend.add_tracked(repo_root, "new.conf")
        staged = git(repo_root, "diff", "--cached", "--name-only").split()
        assert staged == ["new.conf"]

    def test_has_staged_changes_error_detail(self, backend: GitBackend, repo_root: Path) -> None:
        (repo_root / ".git" / "index").write_bytes(b"garbage")
        with pytest.raises(VersionControlError) as info:
            backend.has_staged_changes(repo_root)
        assert info.value.detail["command"] == ["diff", "--cached", "--quiet"]
        assert info.value.detail["cwd"] == str(repo_root)

    def test_commit_returns_head(self, backend: GitBackend, repo_root: Path) -> None:
        (repo_root / "gitosis.conf").write_text("[group x]\n", encoding="utf-8")
        backend.add_tracked(repo_root)
        commit_id = backend.commit(repo_root, "Some commit message")
        assert commit_id == git(repo_root, "rev-parse", "HEAD").strip()
        assert git(repo_root, "log", "-1", "--format=%s").strip() == "Some commit message"

    def test_identity_override(self, repo_root: Path) -> None:
        backend = GitBackend(author_name="Gitosis Bot", author_email="bot@example.com")
        (repo_root / "gitosis.conf").write_text("[group x]\n", encoding="utf-8")
        backend.add_tracked(repo_root)
        backend.commit(repo_root, "msg")
        assert git(repo_root, "log", "-1", "--format=%an <%ae>").strip() == (
            "Gitosis Bot <bot@example.com>"
        )

    def test_commit_with_nothing_staged_fails(self, backend: GitBackend, repo_root: Path) -> None:
        with pytest.raises(VersionControlError, match="git commit failed"):
            backend.commit(repo_root, "empty")


class TestPush:
    def test_push_fast_forward(
        self, backend: GitBackend, repo_root: Path, authority: Path
    ) -> None:
        (repo_root / "gitosis.conf").write_text("[group x]\n", encoding="utf-8")
        backend.add_tracked(repo_root)
        commit_id = backend.commit(repo_root, "msg")
        backend.push(repo_root, "origin", BRANCH)
        assert remote_head(authority) == commit_id

    def test_push_diverged_raises_rejected(
        self, backend: GitBackend, repo_root: Path, competitor: Path
    ) -> None:
        push_competing_change(competitor, "group rival", "Adding group rival to gitosis.conf")
        (repo_root / "gitosis.conf").write_text("[group x]\n", encoding="utf-8")
        backend.add_tracked(repo_root)
        backend.commit(repo_root, "msg")
        with pytest.raises(PushRejected) as info:
            backend.push(repo_root, "origin", BRANCH)
        assert info.value.retryable is True

    def test_push_to_unknown_remote_is_generic_error(
        self, backend: GitBackend, repo_root: Path
    ) -> None:
        with pytest.raises(VersionControlError) as info:
            backend.push(repo_root, "nowhere", BRANCH)
        assert not isinstance(info.value, PushRejected)
        assert info.value.code == "VCS_ERROR"


class TestInspection:
    def test_status_ignores_untracked(self, backend: GitBackend, repo_root: Path) -> None:
        (repo_root / "scratch.txt").write_text("x", encoding="utf-8")
        assert backend.status(repo_root) == []
        (repo_root / "gitosis.conf").write_text("[group x]\n", encoding="utf-8")
        assert len(backend.status(repo_root)) == 1

    def test_ahead_count(self, backend: GitBackend, repo_root: Path) -> None:
        assert backend.ahead_count(repo_root, f"origin/{BRANCH}") == 0
        (repo_root / "gitosis.conf").write_text("[group x]\n", encoding="utf-8")
        backend.add_tracked(repo_root)
        backend.commit(repo_root, "msg")
        assert backend.ahead_count(repo_root, f"origin/{BRANCH}") == 1

    def test_log(self, backend: GitBackend, repo_root: Path) -> None:
        entries = backend.log(repo_root, limit=5)
        assert [e.subject for e in entries] == ["Initial gitosis configuration"]
        assert len(entries[0].id) == 40

    def test_rev_parse_unknown_ref(self, backend: GitBackend, repo_root: Path) -> None:
        with pytest.raises(VersionControlError):
            backend.rev_parse(repo_root, "no-such-ref")

    def test_missing_executable(self, repo_root: Path) -> None:
        backend = GitBackend(executable="definitely-not-git-binary")
        with pytest.raises(VersionControlError, match="Cannot run git"):
            backend.status(repo_root)


class TestClone:
    def test_clone(self, backend: GitBackend, authority: Path, tmp_path: Path) -> None:
        dest = tmp_path / "nested" / "clone"
        backend.clone(str(authority), dest, branch=BRANCH)
        assert (dest / "gitosis.conf").is_file()
