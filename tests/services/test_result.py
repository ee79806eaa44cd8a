"""Tests for ServiceResult and ServiceError."""

from __future__ import annotations

import pydantic
import pytest

from gitosisctl.domain.errors import (
    GroupNotFound,
    MemberAlreadyInGroup,
    PushRejected,
    UnpushedCommit,
)
from gitosisctl.services.result import ServiceError, ServiceResult


class TestServiceError:
    def test_from_exception(self) -> None:
        err = ServiceError.from_exception(GroupNotFound("Group 'x' not found", group="x"))
        assert err.code == "GROUP_NOT_FOUND"
        assert err.category == "validation"
        assert err.retryable is False
        assert err.detail == {"group": "x"}

    def test_push_rejected_is_retryable(self) -> None:
        err = ServiceError.from_exception(PushRejected("rejected"))
        assert err.code == "PUSH_REJECTED"
        assert err.category == "replication"
        assert err.retryable is True

    def test_unpushed_commit_is_not_retryable(self) -> None:
        err = ServiceError.from_exception(UnpushedCommit("stuck", commit="abc"))
        assert err.retryable is False
        assert err.detail["commit"] == "abc"

    def test_detail_is_copied(self) -> None:
        exc = GroupNotFound("missing", group="x")
        err = ServiceError.from_exception(exc)
        exc.detail["group"] = "y"
        assert err.detail == {"group": "x"}


class TestServiceResult:
    def test_failure(self) -> None:
        exc = MemberAlreadyInGroup("This user is already member of this group")
        result = ServiceResult.failure("add_member", exc, warnings=["w"])
        assert result.ok is False
        assert result.op == "add_member"
        assert result.error is not None
        assert result.error.message == "This user is already member of this group"
        assert result.warnings == ["w"]
        assert result.data == {}

    def test_success_defaults(self) -> None:
        result = ServiceResult(ok=True, op="list_groups")
        assert result.error is None
        assert result.data == {}
        assert result.warnings == []

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="x")
        with pytest.raises(pydantic.ValidationError):
            result.ok = False  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        result = ServiceResult.failure("remove_group", GroupNotFound("gone", group="g"))
        restored = ServiceResult.model_validate_json(result.model_dump_json())
        assert restored == result
