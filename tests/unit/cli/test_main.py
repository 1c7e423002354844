"""Tests for the searchblend CLI.

Covers the global options and the blend and layout commands.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from searchblend import __version__
from searchblend.cli.commands.blend import read_response
from searchblend.cli.main import app
from searchblend.core.exceptions import ValidationError


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, temp_dir):
    """Run every command where no searchblend.yaml or override exists."""
    monkeypatch.chdir(temp_dir)
    for name in (
        "SEARCHBLEND_BLOCK_SIZE",
        "SEARCHBLEND_BOOST_POSITION",
        "SEARCHBLEND_BOOST_COUNT",
        "SEARCHBLEND_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def write_response(path: Path, prefix: str, count: int, **extra) -> Path:
    data = {"records": [{"id": f"{prefix}{i}"} for i in range(count)], **extra}
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestVersion:
    """Tests for --version."""

    def test_version(self) -> None:
        """Test the version is printed."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"searchblend version {__version__}" in result.output


class TestLayoutCommand:
    """Tests for 'layout' command."""

    def test_plain_alternation(self) -> None:
        """Test the layout string without boosting."""
        result = runner.invoke(app, ["layout", "--block-size", "3", "--positions", "9"])

        assert result.exit_code == 0
        assert result.output.strip().splitlines()[-1] == "PPPSSSPPP"

    def test_boost_window(self) -> None:
        """Test the layout string with a boost window."""
        result = runner.invoke(
            app,
            [
                "layout",
                "-b", "10",
                "--boost-position", "5",
                "--boost-count", "2",
                "--positions", "14",
            ],
        )

        assert result.exit_code == 0
        assert result.output.strip().splitlines()[-1] == "PPPPPSSPPPPPSS"

    def test_layout_from_config_file(self, temp_dir: Path) -> None:
        """Test the block size is read from the config file."""
        config = temp_dir / "custom.yaml"
        config.write_text("blending:\n  block_size: 2\n", encoding="utf-8")

        result = runner.invoke(app, ["layout", "-c", str(config), "--positions", "6"])

        assert result.exit_code == 0
        assert result.output.strip().splitlines()[-1] == "PPSSPP"

    def test_invalid_block_size(self) -> None:
        """Test a zero block size exits with an error."""
        result = runner.invoke(app, ["layout", "--block-size", "0"])

        assert result.exit_code == 1
        assert "Error" in result.output


class TestBlendCommand:
    """Tests for 'blend' command."""

    def test_json_output(self, temp_dir: Path) -> None:
        """Test blending two response files into JSON."""
        primary = write_response(temp_dir / "p.json", "P", 6, total=60)
        secondary = write_response(
            temp_dir / "s.json", "S", 6, total=40, facets={"format": {"Book": 3}}
        )
        config = temp_dir / "searchblend.yaml"
        config.write_text("blending:\n  block_size: 2\n", encoding="utf-8")

        result = runner.invoke(
            app,
            ["blend", "-p", str(primary), "-s", str(secondary), "-n", "4", "--json"],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["total"] == 100
        assert [item["record"]["id"] for item in data["records"]] == ["P0", "P1", "S0", "S1"]
        assert [item["source"] for item in data["records"]] == [
            "primary", "primary", "secondary", "secondary",
        ]
        assert data["facets"]["blender_backend"] == [["primary", 60], ["secondary", 40]]
        assert data["errors"] == []
        assert data["error_sources"] == {}

    def test_filter_selects_one_backend(self, temp_dir: Path) -> None:
        """Test a blender_backend filter on the command line."""
        primary = write_response(temp_dir / "p.json", "P", 3)
        secondary = write_response(temp_dir / "s.json", "S", 3)

        result = runner.invoke(
            app,
            [
                "blend", "-p", str(primary), "-s", str(secondary),
                "-f", "blender_backend:secondary", "--json",
            ],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [item["record"]["id"] for item in data["records"]] == ["S0", "S1", "S2"]

    def test_table_output(self, temp_dir: Path) -> None:
        """Test the human-readable table."""
        primary = write_response(temp_dir / "p.json", "P", 2)
        secondary = write_response(temp_dir / "s.json", "S", 2)

        result = runner.invoke(app, ["blend", "-p", str(primary), "-s", str(secondary)])

        assert result.exit_code == 0
        assert "Blended results (4 total)" in result.output
        assert "blender_backend" in result.output

    def test_missing_secondary_is_partial(self, temp_dir: Path) -> None:
        """Test a missing response file degrades to one backend."""
        primary = write_response(temp_dir / "p.json", "P", 3)

        result = runner.invoke(app, ["blend", "-p", str(primary)])

        assert result.exit_code == 0
        assert "search_backend_partial_failure (Secondary)" in result.output

    def test_no_backends_fails(self) -> None:
        """Test blending without any response file exits with an error."""
        result = runner.invoke(app, ["blend"])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_config_logging_section(self, temp_dir: Path) -> None:
        """Test the config file's log level and file apply without --log-level."""
        primary = write_response(temp_dir / "p.json", "P", 2)
        secondary = write_response(temp_dir / "s.json", "S", 2)
        config = temp_dir / "searchblend.yaml"
        config.write_text(
            "logging:\n  level: DEBUG\n  file: logs/blend.log\n", encoding="utf-8"
        )

        result = runner.invoke(
            app, ["blend", "-p", str(primary), "-s", str(secondary), "--json"]
        )

        assert result.exit_code == 0
        assert "Blended results" in (temp_dir / "logs" / "blend.log").read_text(
            encoding="utf-8"
        )

    def test_invalid_json_fails(self, temp_dir: Path) -> None:
        """Test a response file that is not JSON."""
        broken = temp_dir / "broken.json"
        broken.write_text("{not json", encoding="utf-8")

        result = runner.invoke(app, ["blend", "-p", str(broken)])

        assert result.exit_code == 1


class TestReadResponse:
    """Tests for read_response helper."""

    def test_not_an_object(self, temp_dir: Path) -> None:
        """Test a JSON list is rejected."""
        path = temp_dir / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ValidationError):
            read_response(path)

    def test_valid_response(self, temp_dir: Path) -> None:
        """Test a valid response file."""
        response = read_response(write_response(temp_dir / "p.json", "P", 2, total=9))

        assert response.total == 9
        assert len(response.records) == 2
