"""Tests for the ``group`` command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from gitosisctl.cli import cli
from tests.conftest import remote_conf, remote_subjects


@pytest.mark.usefixtures("cli_config")
class TestGroupCommands:
    def test_add(self, cli_runner: CliRunner, authority: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "group", "add", "myapp"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["op"] == "add_group"
        assert data["data"]["message"] == "Adding group myapp to gitosis.conf"
        assert "[group myapp]" in remote_conf(authority)

    def test_add_twice_fails(self, cli_runner: CliRunner) -> None:
        assert cli_runner.invoke(cli, ["group", "add", "myapp"]).exit_code == 0
        result = cli_runner.invoke(cli, ["group", "add", "myapp"])
        assert result.exit_code == 1
        assert "GROUP_ALREADY_EXISTS" in result.output

    def test_remove(self, cli_runner: CliRunner, authority: Path) -> None:
        cli_runner.invoke(cli, ["group", "add", "myapp"])
        result = cli_runner.invoke(cli, ["group", "remove", "myapp"])
        assert result.exit_code == 0, result.output
        assert remote_subjects(authority)[0] == "Removing group myapp from gitosis.conf"

    def test_remove_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["group", "remove", "ghost"])
        assert result.exit_code == 1
        assert "GROUP_NOT_FOUND" in result.output

    def test_list_quiet(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["group", "add", "myapp"])
        result = cli_runner.invoke(cli, ["-q", "group", "list"])
        assert result.exit_code == 0
        assert result.stdout.split() == ["gitosis-admin", "myapp"]

    def test_list_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["group", "list"])
        assert result.exit_code == 0
        assert "gitosis-admin" in result.stdout
        assert "admin@bootstrap" in result.stdout

    def test_show(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "group", "show", "gitosis-admin"])
        assert json.loads(result.stdout)["data"]["members"] == ["admin@bootstrap"]


class TestUnconfigured:
    def test_missing_repo_setting(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["group", "list"])
        assert result.exit_code == 1
        assert "CONFIGURATION_MISSING" in result.output
        assert "git:gitosis-repo" in result.output
