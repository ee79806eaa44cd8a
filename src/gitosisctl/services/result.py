"""ServiceResult and ServiceError — the service contract.

INVARIANT: Every public AccessControlService method returns ServiceResult.
Expected failures are results with ``ok=False``, never raised exceptions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from gitosisctl.domain.errors import GitosisError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult.

    Attributes:
        code: Stable error kind (``GROUP_NOT_FOUND``, ``PUSH_REJECTED``, ...).
        category: ``validation``, ``configuration``, ``persistence`` or
            ``replication``.
        retryable: True only when resubmitting the same request may succeed.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    category: str = "internal"
    retryable: bool = False
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: GitosisError) -> ServiceError:
        return cls(
            code=exc.code,
            message=exc.message,
            category=exc.category,
            retryable=exc.retryable,
            detail=dict(exc.detail),
        )


class ServiceResult(BaseModel):
    """Return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"add_member"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        exc: GitosisError,
        *,
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            data=data or {},
            warnings=warnings or [],
            error=ServiceError.from_exception(exc),
        )
