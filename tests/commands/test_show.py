"""Tests for ``mwchain show``."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from mwchain.cli import cli


class TestShowCommand:
    def test_all_handlers(self, cli_runner: CliRunner, project_root: Path) -> None:
        result = cli_runner.invoke(cli, ["show"])
        assert result.exit_code == 0, result.output
        assert "OK: show (2 handler(s))" in result.stdout
        assert "Query.user" in result.stdout
        assert "Query.health" in result.stdout

    def test_one_handler_json(self, cli_runner: CliRunner, project_root: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "show", "Query.user"])

        assert result.exit_code == 0
        (handler,) = json.loads(result.stdout)["data"]["handlers"]
        assert [i["name"] for i in handler["interceptors"]] == ["log", "auth"]

    def test_unknown_handler(self, cli_runner: CliRunner, project_root: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "show", "Mutation.nope"])

        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "UNKNOWN_HANDLER"

    def test_verbose_includes_telemetry(self, cli_runner: CliRunner, project_root: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "-v", "show"])

        assert result.exit_code == 0
        meta = json.loads(result.stdout)["meta"]
        assert meta["telemetry"]["name"] == "BindingService.show"
