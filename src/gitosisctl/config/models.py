"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, gitosisctl.toml only contains
overrides. A deployment needs only ``[git] gitosis_repo``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class GitConfig(BaseModel):
    """[git] section."""

    model_config = {"frozen": True}

    gitosis_repo: Path | None = None
    gitosis_remote: str | None = None
    remote: str = "origin"
    branch: str = "master"
    conf_file: str = "gitosis.conf"
    author_name: str | None = None
    author_email: str | None = None
    sync_before_mutation: bool = True
