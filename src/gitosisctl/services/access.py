"""AccessControlService — the single entry point for gitosis.conf changes.

Mutation pipeline, run entirely under the working copy's exclusive lock:

    LOCK → SYNC → LOAD → MUTATE → PERSIST → COMMIT → PUSH → UNLOCK

Domain failures abort at MUTATE, before anything is written. A push the
remote rejects because it moved on is compensated by dropping the local
commit and resetting to the remote tip; the request then fails with a
retryable ``PUSH_REJECTED`` and the caller resubmits. Nothing here retries
on its own, so concurrent callers are never silently reordered.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from gitosisctl.config.logging import get_logger
from gitosisctl.domain import conffile, groups
from gitosisctl.domain.errors import (
    ConfigurationMissing,
    GitosisError,
    KeyNotFoundError,
    PersistError,
    PushRejected,
    UnpushedCommit,
    ValidationError,
    VersionControlError,
)
from gitosisctl.infrastructure.git import GitBackend
from gitosisctl.infrastructure.working_copy import WorkingCopySync
from gitosisctl.services.result import ServiceResult

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from gitosisctl.config.settings import GitosisSettings
    from gitosisctl.domain.conffile import ConfigDocument
    from gitosisctl.infrastructure.git import VersionControl

logger = get_logger(__name__)

REPO_KEY = "git:gitosis-repo"

# Audit-log commit subjects. The remove-group and add-member formats are
# read by downstream consumers and must not change.
ADD_GROUP_MSG = "Adding group {group} to gitosis.conf"
REMOVE_GROUP_MSG = "Removing group {group} from gitosis.conf"
ADD_MEMBER_MSG = "Adding member {member} for group {group}"
REMOVE_MEMBER_MSG = "Removing member {member} from group {group}"


def conf_path(settings: GitosisSettings) -> Path:
    """``<gitosis-repo>/<conf_file>`` from configuration.

    Raises:
        ConfigurationMissing: ``git:gitosis-repo`` is not configured.
    """
    try:
        repo = settings.get_string(REPO_KEY)
    except KeyNotFoundError as exc:
        raise ConfigurationMissing(
            f"{REPO_KEY} is not configured", key=REPO_KEY
        ) from exc
    return Path(repo) / settings.git.conf_file


class AccessControlService:
    """Group and member administration replicated to the authority repository.

    Args:
        working_copy: The gitosis-admin checkout this service owns.
        sync_before_mutation: Fast-forward to the remote tip (and refuse
            dirty or unpushed state) before loading the config.
    """

    def __init__(self, working_copy: WorkingCopySync, *, sync_before_mutation: bool = True) -> None:
        self._wc = working_copy
        self._sync = sync_before_mutation

    @classmethod
    def from_settings(
        cls, settings: GitosisSettings, *, backend: VersionControl | None = None
    ) -> AccessControlService:
        """Build the service from configuration.

        Raises:
            ConfigurationMissing: ``git:gitosis-repo`` is not configured.
        """
        git = settings.git
        path = conf_path(settings)
        working_copy = WorkingCopySync(
            path.parent,
            backend=backend
            or GitBackend(author_name=git.author_name, author_email=git.author_email),
            remote=git.remote,
            branch=git.branch,
            conf_file=git.conf_file,
        )
        return cls(working_copy, sync_before_mutation=git.sync_before_mutation)

    @property
    def working_copy(self) -> WorkingCopySync:
        return self._wc

    def conf_path(self) -> Path:
        return self._wc.conf_path()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_group(self, name: str) -> ServiceResult:
        """Create ``[group <name>]``. Fails with GROUP_ALREADY_EXISTS."""
        return self._mutate(
            "add_group",
            ADD_GROUP_MSG.format(group=name),
            lambda doc: groups.add_group(doc, name),
            group=name,
        )

    def remove_group(self, name: str) -> ServiceResult:
        """Delete ``[group <name>]``. Fails with GROUP_NOT_FOUND."""
        return self._mutate(
            "remove_group",
            REMOVE_GROUP_MSG.format(group=name),
            lambda doc: groups.remove_group(doc, name),
            group=name,
        )

    def add_member(self, group: str, member: str) -> ServiceResult:
        """Append *member* to *group*.

        Fails with GROUP_NOT_FOUND or MEMBER_ALREADY_IN_GROUP.
        """
        return self._mutate(
            "add_member",
            ADD_MEMBER_MSG.format(member=member, group=group),
            lambda doc: groups.add_member(doc, group, member),
            group=group,
            member=member,
        )

    def remove_member(self, group: str, member: str) -> ServiceResult:
        """Drop *member* from *group*.

        Fails with GROUP_NOT_FOUND or MEMBER_NOT_IN_GROUP.
        """
        return self._mutate(
            "remove_member",
            REMOVE_MEMBER_MSG.format(member=member, group=group),
            lambda doc: groups.remove_member(doc, group, member),
            group=group,
            member=member,
        )

    def publish(self, message: str) -> ServiceResult:
        """Commit and push changes already present in the working copy.

        For tooling that edits :meth:`conf_path` directly. Fails with
        NO_CHANGES when there is nothing to commit.
        """
        op = "publish"
        log = logger.bind(op=op)
        if not message.strip():
            return self._fail(op, ValidationError("Commit message must not be empty"), log)
        warnings: list[str] = []
        try:
            with self._wc.exclusive():
                log.debug("lock.acquired")
                commit = self._commit_and_push(message, log, warnings, restore=False)
        except GitosisError as exc:
            return self._fail(op, exc, log, warnings)
        log.info("publish.complete", commit=commit)
        return ServiceResult(
            ok=True, op=op, data={"commit": commit, "message": message}, warnings=warnings
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_groups(self) -> ServiceResult:
        """Group names in file order, with their members."""
        op = "list_groups"
        log = logger.bind(op=op)
        try:
            doc = self._load()
        except GitosisError as exc:
            return self._fail(op, exc, log)
        items = [
            {"name": name, "members": groups.get_members(doc, name)}
            for name in groups.list_groups(doc)
        ]
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    def show_group(self, name: str) -> ServiceResult:
        op = "show_group"
        log = logger.bind(op=op, group=name)
        try:
            members = groups.get_members(self._load(), name)
        except GitosisError as exc:
            return self._fail(op, exc, log)
        return ServiceResult(ok=True, op=op, data={"name": name, "members": members})

    def history(self, limit: int = 10) -> ServiceResult:
        """Latest commits of the working copy (the audit trail)."""
        op = "history"
        log = logger.bind(op=op)
        try:
            entries = self._wc.log(limit)
        except GitosisError as exc:
            return self._fail(op, exc, log)
        commits = [{"id": e.id, "subject": e.subject} for e in entries]
        return ServiceResult(ok=True, op=op, data={"count": len(commits), "commits": commits})

    def provision(self, remote_url: str) -> ServiceResult:
        """Clone the authority repository into the working copy if needed."""
        op = "provision"
        log = logger.bind(op=op, remote=remote_url)
        try:
            cloned = self._wc.provision(remote_url)
            head = self._wc.head_commit()
        except GitosisError as exc:
            return self._fail(op, exc, log)
        log.info("provision.complete", cloned=cloned, head=head)
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(self._wc.root), "cloned": cloned, "head": head},
        )

    def reconcile(self, strategy: str) -> ServiceResult:
        """Resolve a committed-but-unpushed working copy.

        ``"push"`` retries pushing the local commits; ``"discard"`` drops
        them and resets to the remote tip.
        """
        op = "reconcile"
        log = logger.bind(op=op, strategy=strategy)
        if strategy not in ("push", "discard"):
            return self._fail(op, ValidationError(f"Unknown strategy: {strategy!r}"), log)
        try:
            with self._wc.exclusive():
                if strategy == "push":
                    self._wc.push()
                    head = self._wc.head_commit()
                else:
                    head = self._wc.discard_local_commits()
        except GitosisError as exc:
            return self._fail(op, exc, log)
        log.info("reconcile.complete", head=head)
        return ServiceResult(ok=True, op=op, data={"strategy": strategy, "head": head})

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _load(self) -> ConfigDocument:
        with self._wc.exclusive():
            return conffile.parse(self._wc.read_conf())

    def _mutate(
        self,
        op: str,
        message: str,
        mutation: Callable[[ConfigDocument], None],
        **fields: Any,
    ) -> ServiceResult:
        log = logger.bind(op=op, **fields)
        warnings: list[str] = []
        try:
            with self._wc.exclusive():
                log.debug("lock.acquired")
                if self._sync:
                    head = self._wc.synchronize()
                    log.debug("working_copy.synchronized", head=head)

                doc = conffile.parse(self._wc.read_conf())
                mutation(doc)
                log.debug("config.mutated")

                try:
                    self._wc.write_conf(conffile.serialize(doc))
                except PersistError:
                    self._restore(log, warnings)
                    raise
                log.debug("config.persisted")

                commit = self._commit_and_push(message, log, warnings)
        except GitosisError as exc:
            return self._fail(op, exc, log, warnings)

        log.info("mutation.complete", commit=commit)
        return ServiceResult(
            ok=True,
            op=op,
            data={**fields, "commit": commit, "message": message},
            warnings=warnings,
        )

    def _commit_and_push(
        self,
        message: str,
        log: BoundLogger,
        warnings: list[str],
        *,
        restore: bool = True,
    ) -> str:
        """Commit then push; caller holds the lock.

        With *restore*, a failed commit also resets tracked files to HEAD so
        the next mutation starts from a clean checkout.

        The commit-to-push sequence always runs to completion or to an
        explicit error: a rejected push is rolled back, any other push
        failure is reported as UNPUSHED_COMMIT.
        """
        try:
            commit = self._wc.stage_and_commit(message)
        except VersionControlError:
            if restore:
                self._restore(log, warnings)
            raise
        log.debug("commit.created", commit=commit)

        try:
            self._wc.push()
        except PushRejected as exc:
            exc.detail["commit"] = commit
            try:
                head = self._wc.discard_local_commits()
            except VersionControlError as reset_exc:
                raise UnpushedCommit(
                    f"Push rejected and local commit {commit} could not be discarded: "
                    f"{reset_exc.message}",
                    commit=commit,
                ) from reset_exc
            log.warning("push.rejected", commit=commit, reset_to=head)
            raise
        except VersionControlError as exc:
            raise UnpushedCommit(
                f"Commit {commit} was created locally but not pushed: {exc.message}",
                commit=commit,
            ) from exc
        log.debug("push.complete", commit=commit)
        return commit

    def _restore(self, log: BoundLogger, warnings: list[str]) -> None:
        try:
            self._wc.restore_tracked()
        except VersionControlError as exc:
            log.error("working_copy.restore_failed", error=exc.message)
            warnings.append(f"Working copy could not be restored: {exc.message}")

    def _fail(
        self,
        op: str,
        exc: GitosisError,
        log: BoundLogger,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Log *exc* and turn it into a failed result."""
        if isinstance(exc, ValidationError):
            log.warning("request.rejected", code=exc.code, error=exc.message)
        else:
            log.error("request.failed", code=exc.code, error=exc.message)
        return ServiceResult.failure(op, exc, warnings=warnings)
