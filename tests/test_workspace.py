# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Tests for workspace.py module."""

from pathlib import Path

from shandy_sqlfmt.workspace import Workspace, WorkspaceFolder, expand_path


class TestWorkspace:
    """Test workspace folder lookup."""

    def test_from_settings_expands(self):
        workspace = Workspace.from_settings("~/analytics", {"dbt": "~/analytics/dbt"})
        assert workspace.root == (Path.home() / "analytics").resolve()
        assert workspace.folders["dbt"] == (Path.home() / "analytics" / "dbt").resolve()

    def test_folder_for_none(self, tmp_path):
        assert Workspace.from_settings(str(tmp_path)).folder_for(None) is None

    def test_folder_for_outside(self, tmp_path):
        workspace = Workspace.from_settings(str(tmp_path / "project"))
        assert workspace.folder_for(tmp_path / "elsewhere" / "q.sql") is None

    def test_folder_for_root(self, tmp_path):
        root = tmp_path / "project"
        workspace = Workspace.from_settings(str(root))
        folder = workspace.folder_for(root / "models" / "q.sql")
        assert folder == WorkspaceFolder(name="project", path=root.resolve())

    def test_deepest_folder_wins(self, tmp_path):
        root = tmp_path / "project"
        workspace = Workspace.from_settings(str(root), {"dbt": str(root / "dbt")})
        folder = workspace.folder_for(root / "dbt" / "models" / "q.sql")
        assert folder.name == "dbt"

    def test_folder_strings_include_root(self, tmp_path):
        root = tmp_path / "project"
        workspace = Workspace.from_settings(str(root), {"dbt": str(root / "dbt")})
        assert workspace.folder_strings() == {
            "dbt": str((root / "dbt").resolve()),
            "project": str(root.resolve()),
        }


class TestExpandPath:
    """Test path expansion."""

    def test_expand_path_tilde(self):
        path = expand_path("~/test/file.sql")
        assert path == (Path.home() / "test/file.sql").resolve()
        assert "~" not in str(path)

    def test_expand_path_relative(self):
        path = expand_path("relative/path/file.sql")
        assert path == (Path.cwd() / "relative/path/file.sql").resolve()
