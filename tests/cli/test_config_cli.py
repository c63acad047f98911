"""Tests for implindex.cli.config — config show in table/json/env formats."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from implindex.cli.config import app

runner = CliRunner()


class TestShowConfig:
    def test_show_json_format(self):
        result = runner.invoke(app, ["show", "--format", "json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["duplicate_consumer"] == "reject"
        assert payload["fragment_pattern"] == "**/*.js"

    def test_show_env_format(self, monkeypatch):
        monkeypatch.setenv("IMPLINDEX_DUPLICATE_CONSUMER", "replace")
        result = runner.invoke(app, ["show", "--format", "env"])
        assert result.exit_code == 0
        assert "IMPLINDEX_DUPLICATE_CONSUMER=replace" in result.output
        assert "IMPLINDEX_LOG_LEVEL=WARNING" in result.output

    def test_show_table_format(self):
        result = runner.invoke(app, ["show"])
        assert result.exit_code == 0
        assert "duplicate_consumer" in result.output

    def test_invalid_settings(self, monkeypatch):
        monkeypatch.setenv("IMPLINDEX_DUPLICATE_CONSUMER", "ignore")
        result = runner.invoke(app, ["show"])
        assert result.exit_code == 1
