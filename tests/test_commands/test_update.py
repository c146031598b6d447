from __future__ import annotations

import pytest
from pathlib import Path
from typing import Iterator
from unittest.mock import patch

from click.testing import CliRunner

from conftest import FakeGitHub, manifest_text, write
from spmaudit.cli import cli
from spmaudit.commands.update import _display_summary
from spmaudit.models.result import UpdateReport
from spmaudit.utils.http import HTTPClient


@pytest.fixture
def fake_client(github: FakeGitHub) -> Iterator[FakeGitHub]:
    """Route the update command's HTTP client to the fake GitHub."""

    def client(**kwargs: object) -> HTTPClient:
        return HTTPClient(transport=github.transport, max_retries=0)

    with patch("spmaudit.commands.update.HTTPClient", side_effect=client):
        yield github


@pytest.mark.unit
class TestUpdatePackageCommand:
    def test_updates_to_latest(
        self, runner: CliRunner, swift_project: Path, fake_client: FakeGitHub
    ) -> None:
        fake_client.releases("apple", "swift-log", ["1.6.1"])

        result = runner.invoke(cli, ["update", "package", "swift-log"])

        assert result.exit_code == 0, result.output
        assert "Updated swift-log from 1.0.0 to 1.6.1" in result.output
        manifest = (swift_project / "MyLib" / "Package.swift").read_text(encoding="utf-8")
        assert 'swift-log.git", exact: "1.6.1"' in manifest

    def test_explicit_version_downgrade_warns(
        self, runner: CliRunner, swift_project: Path, fake_client: FakeGitHub
    ) -> None:
        fake_client.releases("apple", "swift-nio", ["2.61.0", "2.60.0", "2.59.0"])

        result = runner.invoke(
            cli, ["update", "package", "swift-nio", "--version", "2.59.0"]
        )

        assert result.exit_code == 0, result.output
        assert "downgraded from 2.60.0 to 2.59.0" in result.output

    def test_already_current(
        self, runner: CliRunner, swift_project: Path, fake_client: FakeGitHub
    ) -> None:
        fake_client.releases("apple", "swift-nio", ["2.60.0"])

        result = runner.invoke(cli, ["update", "package", "swift-nio"])

        assert result.exit_code == 0
        assert "swift-nio is already at 2.60.0" in result.output

    @pytest.mark.parametrize(
        "args, message",
        [
            (["missing-package"], "Package 'missing-package' not found in project"),
            (["swift-collections"], "Xcode project updates are not supported"),
            (["swift-log", "--version", "one"], "Invalid version format: 'one'"),
            (["swift-log", "--version", "9.0.0"], "Version '9.0.0' not found"),
        ],
    )
    def test_refusals_exit_one(
        self,
        runner: CliRunner,
        swift_project: Path,
        fake_client: FakeGitHub,
        args: list,
        message: str,
    ) -> None:
        fake_client.releases("apple", "swift-log", ["1.6.1"])
        manifest = swift_project / "MyLib" / "Package.swift"
        before = manifest.read_text(encoding="utf-8")

        result = runner.invoke(cli, ["update", "package", *args])

        assert result.exit_code == 1
        assert message in result.output
        assert manifest.read_text(encoding="utf-8") == before


@pytest.mark.unit
class TestUpdateAllCommand:
    def test_partial_failure_reported_inline(
        self, runner: CliRunner, swift_project: Path, fake_client: FakeGitHub
    ) -> None:
        fake_client.releases("apple", "swift-log", ["1.6.1"])
        fake_client.releases("apple", "swift-nio", ["2.60.0"])

        result = runner.invoke(cli, ["update", "all"])

        assert result.exit_code == 0, result.output
        assert "Update Summary" in result.output
        assert "Updated 1 package(s)" in result.output
        assert "1 package(s) could not be updated" in result.output

    def test_everything_current(
        self, runner: CliRunner, tmp_path: Path, fake_client: FakeGitHub
    ) -> None:
        write(
            tmp_path / "Package.swift",
            manifest_text([("https://github.com/apple/swift-nio", "2.60.0")]),
        )
        fake_client.releases("apple", "swift-nio", ["2.60.0"])

        result = runner.invoke(cli, ["update", "all", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "All dependencies are up to date" in result.output

    def test_backup_flag(
        self, runner: CliRunner, tmp_path: Path, fake_client: FakeGitHub
    ) -> None:
        write(
            tmp_path / "Package.swift",
            manifest_text([("https://github.com/apple/swift-nio", "2.50.0")]),
        )
        fake_client.releases("apple", "swift-nio", ["2.60.0"])

        result = runner.invoke(cli, ["update", "all", "--backup"])

        assert result.exit_code == 0, result.output
        assert len(list(tmp_path.glob("Package.swift.*.backup"))) == 1

    def test_empty_project(self, runner: CliRunner, fake_client: FakeGitHub) -> None:
        result = runner.invoke(cli, ["update", "all"])

        assert result.exit_code == 0
        assert "No Swift package dependencies found" in result.output


@pytest.mark.unit
class TestDisplaySummary:
    def test_error_text_is_escaped(self) -> None:
        report = UpdateReport(
            "swift-nio", "App.xcodeproj", error="Cannot update [app] from Xcode"
        )

        with patch("spmaudit.commands.update.print_table") as print_table:
            _display_summary([report])

        row = print_table.call_args[0][0][0]
        assert row["Result"] == "[red]✗ Cannot update \\[app] from Xcode[/red]"
