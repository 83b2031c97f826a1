# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Tests for the shandy-sqlfmt CLI."""

import os

import pytest
from typer.testing import CliRunner

from shandy_sqlfmt import __version__
from shandy_sqlfmt.cli import app

runner = CliRunner()

pytestmark = pytest.mark.skipif(os.name == "nt", reason="uses /bin/sh wrappers")


@pytest.fixture
def config_file(tmp_path, fake_sqlfmt):
    """Config pointing at the fake formatter."""
    config = tmp_path / "shandy.yml"
    config.write_text(f"path: {fake_sqlfmt}\nargs: []\n")
    return config


@pytest.fixture
def missing_config(tmp_path):
    """Config pointing at a formatter that does not exist."""
    config = tmp_path / "missing.yml"
    config.write_text("path: /nonexistent/sqlfmt\n")
    return config


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestMainCallback:
    """Test config loading in the main callback."""

    def test_explicit_config_missing(self, tmp_path):
        result = runner.invoke(app, ["--config", str(tmp_path / "nope.yml"), "config", "show"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_yaml(self, tmp_path):
        config = tmp_path / "bad.yml"
        config.write_text("{ invalid: [")
        result = runner.invoke(app, ["--config", str(config), "config", "show"])
        assert result.exit_code == 1
        assert "Error parsing config file" in result.output


class TestFormatCommand:
    """Test 'shandy-sqlfmt format'."""

    def test_no_files_shows_help(self, config_file):
        result = runner.invoke(app, ["--config", str(config_file), "format"])
        assert result.exit_code == 0
        assert "Format SQL files" in result.output

    def test_formats_files(self, config_file, tmp_path):
        target = tmp_path / "query.sql"
        target.write_text("select 1")

        result = runner.invoke(app, ["--config", str(config_file), "format", str(target)])

        assert result.exit_code == 0
        assert target.read_text() == "select\n    1\n"
        assert "1 file(s) reformatted" in result.output

    def test_check_mode(self, config_file, tmp_path):
        target = tmp_path / "query.sql"
        target.write_text("select 1")

        result = runner.invoke(
            app, ["--config", str(config_file), "format", "--check", str(target)]
        )

        assert result.exit_code == 1
        assert "Would reformat" in result.output
        assert target.read_text() == "select 1"

    def test_check_mode_clean(self, config_file, tmp_path):
        target = tmp_path / "query.sql"
        target.write_text("select\n    1\n")

        result = runner.invoke(
            app, ["--config", str(config_file), "format", "--check", str(target)]
        )

        assert result.exit_code == 0
        assert "0 file(s) would be reformatted, 1 unchanged" in result.output

    def test_stdin(self, config_file):
        result = runner.invoke(
            app, ["--config", str(config_file), "format", "-"], input="select 1"
        )
        assert result.exit_code == 0
        assert result.stdout == "select\n    1\n"

    def test_stdin_syntax_error_shows_formatter_message(self, config_file):
        result = runner.invoke(
            app, ["--config", str(config_file), "format", "-"], input="syntax error"
        )
        assert result.exit_code == 1
        assert "Error: could not parse line 1" in result.output

    def test_in_place(self, config_file, tmp_path):
        target = tmp_path / "query.sql"
        target.write_text("select 1")

        result = runner.invoke(
            app, ["--config", str(config_file), "format", "--in-place", str(target)]
        )

        assert result.exit_code == 0
        assert target.read_text() == "select\n    1\n"

    def test_not_installed(self, missing_config, tmp_path):
        target = tmp_path / "query.sql"
        target.write_text("select 1")

        result = runner.invoke(app, ["--config", str(missing_config), "format", str(target)])

        assert result.exit_code == 1
        assert '"/nonexistent/sqlfmt" is not found' in result.output
        assert result.output.count("is not found") == 1

    def test_missing_file(self, config_file, tmp_path):
        result = runner.invoke(
            app, ["--config", str(config_file), "format", str(tmp_path / "nope.sql")]
        )
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_stdin_with_other_paths(self, config_file, tmp_path):
        result = runner.invoke(
            app, ["--config", str(config_file), "format", "-", str(tmp_path / "a.sql")]
        )
        assert result.exit_code == 1

    def test_stdin_rejects_check(self, config_file):
        """Test --check is refused for stdin rather than ignored."""
        result = runner.invoke(
            app, ["--config", str(config_file), "format", "--check", "-"], input="select 1"
        )
        assert result.exit_code == 1
        assert "--check cannot be combined with stdin" in result.output
        assert "select\n    1" not in result.output

    def test_unreadable_file_does_not_stop_batch(self, config_file, tmp_path):
        good = tmp_path / "good.sql"
        good.write_text("select 1")
        latin1 = tmp_path / "latin1.sql"
        latin1.write_bytes(b"select caf\xe9")

        result = runner.invoke(
            app, ["--config", str(config_file), "format", str(good), str(latin1)]
        )

        assert result.exit_code == 1
        assert good.read_text() == "select\n    1\n"
        assert latin1.read_bytes() == b"select caf\xe9"
        assert f"✗ {latin1}" in result.output
        assert "1 file(s) reformatted, 0 unchanged, 1 failed" in result.output


class TestWorkspaceCommand:
    """Test 'shandy-sqlfmt workspace'."""

    def test_formats_workspace(self, config_file, tmp_path):
        root = tmp_path / "project"
        root.mkdir()
        (root / "a.sql").write_text("select 1")

        result = runner.invoke(app, ["--config", str(config_file), "workspace", str(root)])

        assert result.exit_code == 0
        assert "Workspace formatted" in result.output
        assert (root / "a.sql").read_text() == "select\n    1\n"

    def test_no_workspace(self, config_file):
        result = runner.invoke(app, ["--config", str(config_file), "workspace"])
        assert result.exit_code == 1
        assert "No workspace folder" in result.output


class TestConfigCommand:
    """Test 'shandy-sqlfmt config'."""

    def test_check_available(self, config_file, fake_sqlfmt):
        result = runner.invoke(app, ["--config", str(config_file), "config", "check"])
        assert result.exit_code == 0
        assert str(fake_sqlfmt) in result.output

    def test_check_missing(self, missing_config):
        result = runner.invoke(app, ["--config", str(missing_config), "config", "check"])
        assert result.exit_code == 1
        assert "is not available" in result.output
        assert "pip install shandy-sqlfmt" in result.output

    def test_validate(self, config_file):
        result = runner.invoke(app, ["--config", str(config_file), "config", "validate"])
        assert result.exit_code == 0
        assert "Configuration structure is valid" in result.output

    def test_validate_reports_issues(self, tmp_path, fake_sqlfmt):
        config = tmp_path / "typo.yml"
        config.write_text(f"path: {fake_sqlfmt}\narg: ['--fast']\n")
        result = runner.invoke(app, ["--config", str(config), "config", "validate"])
        assert "Structure Issues:" in result.output
        assert "Did you mean 'args'?" in result.output

    def test_show(self, config_file, fake_sqlfmt):
        result = runner.invoke(app, ["--config", str(config_file), "config", "show"])
        assert result.exit_code == 0
        assert "Command:" in result.output

    def test_tools_uses_configured_path(self, config_file, fake_sqlfmt, tmp_path, monkeypatch):
        """Test a configured formatter off PATH is reported as installed."""
        monkeypatch.setenv("PATH", str(tmp_path / "empty"))
        result = runner.invoke(app, ["--config", str(config_file), "config", "tools"])
        assert result.exit_code == 0
        assert "sqlfmt - ✓ Installed" in result.output
        assert f"Path: {fake_sqlfmt}" in result.output

    def test_tools_missing(self, missing_config):
        result = runner.invoke(app, ["--config", str(missing_config), "config", "tools"])
        assert result.exit_code == 0
        assert "sqlfmt - ✗ Not installed" in result.output
        assert "pip install shandy-sqlfmt" in result.output
