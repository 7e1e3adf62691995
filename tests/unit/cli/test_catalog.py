"""Unit tests for the catalog command.

These run against the bundled catalogue with isolated config
directories, so no settings file is present.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from provctl.cli.main import app

runner = CliRunner()

pytestmark = pytest.mark.usefixtures("isolated_dirs")


class TestCatalogCommand:
    """Tests for provctl catalog."""

    def test_table_output(self) -> None:
        """The base set is shown as tables."""
        result = runner.invoke(app, ["catalog"])

        assert result.exit_code == 0
        assert "Packages" in result.stdout
        assert "git" in result.stdout

    def test_json_base_set(self) -> None:
        """Without flags only ungated entries are included."""
        result = runner.invoke(app, ["catalog", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        ids = [p["id"] for p in data["packages"]]
        assert "git" in ids
        assert "docker-desktop" not in ids
        assert "ms-mssql.mssql" not in data["extensions"]

    def test_json_with_flags(self) -> None:
        """Flags add their groups."""
        result = runner.invoke(app, ["catalog", "--docker", "--sql-tools", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert "docker-desktop" in [p["id"] for p in data["packages"]]
        assert "ms-mssql.mssql" in data["extensions"]
        assert "sqlfluff" in [c["artifact"] for c in data["config_edits"]]

    def test_uninstall_lists_removal_set(self) -> None:
        """--uninstall shows the removal set, including retired ids."""
        result = runner.invoke(app, ["catalog", "--uninstall", "--json"])

        assert result.exit_code == 0
        ids = [p["id"] for p in json.loads(result.stdout)["removal"]]
        assert "git" in ids
        assert "tfenv" in ids
        assert len(ids) == len(set(ids))

    def test_missing_catalogue_override(self, isolated_dirs: Path) -> None:
        """A settings file pointing at a missing catalogue exits 1."""
        settings = isolated_dirs / "settings.toml"
        missing = isolated_dirs / "nowhere.toml"
        settings.write_text(f"catalog_path = {json.dumps(str(missing))}\n", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(settings), "catalog"])

        assert result.exit_code == 1

    def test_invalid_settings(self, isolated_dirs: Path) -> None:
        """An invalid settings file exits 1."""
        settings = isolated_dirs / "settings.toml"
        settings.write_text("require_admin = 'sometimes'\n", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(settings), "catalog"])

        assert result.exit_code == 1
