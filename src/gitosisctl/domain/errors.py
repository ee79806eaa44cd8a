"""Typed error taxonomy.

Every failure carries a stable ``code`` so callers can branch on kind
(the service layer copies it into ``ServiceError.code``).

Validation errors are raised before any disk or network write.
Persistence and replication errors are raised by the infrastructure layer.
"""

from __future__ import annotations

from typing import Any


class GitosisError(Exception):
    """Base class for all gitosisctl errors."""

    code = "GITOSIS_ERROR"
    category = "internal"
    retryable = False

    def __init__(self, message: str, /, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


# --- Validation ---


class ValidationError(GitosisError):
    """Rejected input; raised before any disk or network write."""

    code = "INVALID_INPUT"
    category = "validation"


class MalformedConfig(ValidationError):
    code = "MALFORMED_CONFIG"


class InvalidName(ValidationError):
    code = "INVALID_NAME"


class DuplicateSection(ValidationError):
    code = "DUPLICATE_SECTION"


class SectionNotFound(ValidationError):
    code = "SECTION_NOT_FOUND"


class GroupAlreadyExists(DuplicateSection):
    code = "GROUP_ALREADY_EXISTS"


class GroupNotFound(SectionNotFound):
    code = "GROUP_NOT_FOUND"


class MemberAlreadyInGroup(ValidationError):
    code = "MEMBER_ALREADY_IN_GROUP"


class MemberNotInGroup(ValidationError):
    code = "MEMBER_NOT_IN_GROUP"


# --- Configuration ---


class ConfigurationMissing(GitosisError):
    code = "CONFIGURATION_MISSING"
    category = "configuration"


class KeyNotFoundError(GitosisError):
    code = "KEY_NOT_FOUND"
    category = "configuration"


# --- Persistence ---


class PersistError(GitosisError):
    code = "PERSIST_FAILED"
    category = "persistence"


# --- Replication ---


class VersionControlError(GitosisError):
    code = "VCS_ERROR"
    category = "replication"


class NoChangesToCommit(VersionControlError):
    code = "NO_CHANGES"


class WorkingCopyDirty(VersionControlError):
    code = "WORKING_COPY_DIRTY"


class PushRejected(VersionControlError):
    """The remote diverged; the local commit was (or must be) discarded."""

    code = "PUSH_REJECTED"
    retryable = True


class UnpushedCommit(VersionControlError):
    """Local history is ahead of the remote and needs manual reconciliation."""

    code = "UNPUSHED_COMMIT"
