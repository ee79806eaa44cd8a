"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``GITOSISCTL_*`` prefix (``GITOSISCTL_GIT__GITOSIS_REPO``)
  3. TOML file    — ``gitosisctl.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the walk-up discovery from :mod:`gitosisctl.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from gitosisctl.config.discovery import find_config
from gitosisctl.config.models import GitConfig
from gitosisctl.domain.errors import KeyNotFoundError


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``gitosisctl.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class GitosisSettings(BaseSettings):
    """Settings for the library and the CLI.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        git: The ``[git]`` section: working copy, remote and branch.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "GITOSISCTL_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    git: GitConfig = Field(default_factory=GitConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def load(
        cls,
        *,
        config_path: str | Path | None = None,
        start: Path | None = None,
        **overrides: Any,
    ) -> GitosisSettings:
        """Build settings, discovering ``gitosisctl.toml`` unless *config_path* is given.

        Relative ``git.gitosis_repo`` values from the TOML file are
        resolved against the file's directory.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            settings = cls(config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None

        repo = settings.git.gitosis_repo
        if toml_path is not None and repo is not None and not repo.is_absolute():
            git = settings.git.model_copy(update={"gitosis_repo": toml_path.parent / repo})
            settings = settings.model_copy(update={"git": git})
        return settings

    def get_string(self, key: str) -> str:
        """Look up ``"<section>:<option>"`` (``"git:gitosis-repo"``) as a string.

        Raises:
            KeyNotFoundError: unknown section or option, or the value is unset.
        """
        section_name, sep, option = key.partition(":")
        if not sep or not option:
            raise KeyNotFoundError(f"key {key!r} not found", key=key)
        section = getattr(self, section_name, None)
        if not isinstance(section, BaseModel):
            raise KeyNotFoundError(f"key {key!r} not found", key=key)
        field_name = option.replace("-", "_")
        if field_name not in type(section).model_fields:
            raise KeyNotFoundError(f"key {key!r} not found", key=key)
        value = getattr(section, field_name)
        if value is None:
            raise KeyNotFoundError(f"key {key!r} not found", key=key)
        return str(value)
