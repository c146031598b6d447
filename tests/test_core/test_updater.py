"""Unit tests for spmaudit.core.updater.

Every refusal is checked to leave the manifest untouched; successful
updates must only change the version literal of the matched declaration.
"""

from __future__ import annotations

import pytest
from pathlib import Path

from conftest import FakeGitHub, manifest_text, write
from spmaudit.core.release_resolver import ReleaseResolver
from spmaudit.core.updater import PackageUpdater, declaration_pattern, rewrite_declaration
from spmaudit.utils.http import HTTPClient
from spmaudit.exceptions import (
    AmbiguousMatchError,
    InvalidVersionError,
    MultipleSourcesError,
    PackageNotFoundError,
    UnsupportedUpdateError,
    VersionNotFoundError,
)


def _updater(root: Path, http: HTTPClient, **kwargs: bool) -> PackageUpdater:
    return PackageUpdater(root, ReleaseResolver(http, discover_token=False), **kwargs)


def _client(github: FakeGitHub) -> HTTPClient:
    return HTTPClient(transport=github.transport, max_retries=0)


@pytest.mark.unit
class TestRewriteDeclaration:
    def test_replaces_only_version_literal(self) -> None:
        text = manifest_text(
            [
                ("https://github.com/apple/swift-log.git", "1.0.0"),
                ("https://github.com/apple/swift-nio", "1.0.0"),
            ]
        )

        updated = rewrite_declaration(
            text, "https://github.com/apple/swift-log", "1.6.1", file_path="Package.swift"
        )

        assert updated == text.replace(
            'swift-log.git", exact: "1.0.0"', 'swift-log.git", exact: "1.6.1"'
        )

    def test_pattern_does_not_match_longer_url(self) -> None:
        text = '.package(url: "https://github.com/apple/swift-log-extras", exact: "1.0.0")'
        assert declaration_pattern("https://github.com/apple/swift-log").search(text) is None

    @pytest.mark.parametrize("count", [0, 2])
    def test_requires_exactly_one_match(self, count: int) -> None:
        text = manifest_text([("https://github.com/a/b", "1.0.0")] * count)

        with pytest.raises(AmbiguousMatchError) as exc_info:
            rewrite_declaration(text, "https://github.com/a/b", "2.0.0", file_path="P")

        assert exc_info.value.match_count == count


@pytest.mark.unit
class TestUpdatePackage:
    @pytest.mark.asyncio
    async def test_updates_to_latest(self, swift_project: Path, github: FakeGitHub) -> None:
        manifest = swift_project / "MyLib" / "Package.swift"
        before = manifest.read_text(encoding="utf-8")
        github.releases("apple", "swift-log", ["1.6.1", "1.6.0"])

        async with _client(github) as http:
            report = await _updater(swift_project, http).update_package("swift-log")

        assert report.changed
        assert not report.downgrade
        assert (report.previous_version, report.new_version) == ("1.0.0", "1.6.1")
        assert report.backup_path is None
        assert manifest.read_text(encoding="utf-8") == before.replace(
            'exact: "1.0.0"', 'exact: "1.6.1"'
        )

    @pytest.mark.asyncio
    async def test_explicit_downgrade_is_flagged(
        self, swift_project: Path, github: FakeGitHub
    ) -> None:
        github.releases("apple", "swift-nio", ["2.62.0", "2.60.0", "2.50.0"])

        async with _client(github) as http:
            report = await _updater(swift_project, http).update_package(
                "swift-nio", "2.50.0"
            )

        assert report.changed
        assert report.downgrade
        manifest = (swift_project / "MyLib" / "Package.swift").read_text(encoding="utf-8")
        assert 'swift-nio", exact: "2.50.0"' in manifest

    @pytest.mark.asyncio
    async def test_same_version_does_not_write(
        self, swift_project: Path, github: FakeGitHub
    ) -> None:
        github.releases("apple", "swift-nio", ["2.60.0"])
        manifest = swift_project / "MyLib" / "Package.swift"
        mtime = manifest.stat().st_mtime_ns

        async with _client(github) as http:
            report = await _updater(swift_project, http).update_package("swift-nio")

        assert not report.changed
        assert manifest.stat().st_mtime_ns == mtime

    @pytest.mark.asyncio
    async def test_backup(self, swift_project: Path, github: FakeGitHub) -> None:
        github.releases("apple", "swift-log", ["1.6.1"])

        async with _client(github) as http:
            report = await _updater(
                swift_project, http, create_backup=True
            ).update_package("swift-log")

        assert report.backup_path is not None
        backup = Path(report.backup_path)
        assert backup.name.startswith("Package.swift.")
        assert 'exact: "1.0.0"' in backup.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_unknown_package(self, swift_project: Path, github: FakeGitHub) -> None:
        async with _client(github) as http:
            with pytest.raises(PackageNotFoundError):
                await _updater(swift_project, http).update_package("nope")

        assert github.requests == []

    @pytest.mark.asyncio
    async def test_xcode_dependency_is_refused(
        self, swift_project: Path, github: FakeGitHub
    ) -> None:
        async with _client(github) as http:
            with pytest.raises(UnsupportedUpdateError, match="Xcode"):
                await _updater(swift_project, http).update_package("swift-collections")

        assert github.requests == []

    @pytest.mark.asyncio
    async def test_declared_in_several_files(
        self, tmp_path: Path, github: FakeGitHub
    ) -> None:
        for directory in ("A", "B"):
            write(
                tmp_path / directory / "Package.swift",
                manifest_text([("https://github.com/apple/swift-log", "1.0.0")]),
            )

        async with _client(github) as http:
            with pytest.raises(MultipleSourcesError) as exc_info:
                await _updater(tmp_path, http).update_package("swift-log")

        assert len(exc_info.value.sources) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("version", ["latest", "1", "1.2.3.4", "v1.2.0", "1.2.x"])
    async def test_invalid_version(
        self, swift_project: Path, github: FakeGitHub, version: str
    ) -> None:
        async with _client(github) as http:
            with pytest.raises(InvalidVersionError):
                await _updater(swift_project, http).update_package("swift-log", version)

    @pytest.mark.asyncio
    async def test_version_not_released(
        self, swift_project: Path, github: FakeGitHub
    ) -> None:
        github.releases("apple", "swift-log", ["1.6.1"])
        manifest = swift_project / "MyLib" / "Package.swift"
        before = manifest.read_text(encoding="utf-8")

        async with _client(github) as http:
            with pytest.raises(VersionNotFoundError):
                await _updater(swift_project, http).update_package("swift-log", "9.9.9")

        assert manifest.read_text(encoding="utf-8") == before

    @pytest.mark.asyncio
    async def test_duplicate_declaration_in_one_file(
        self, tmp_path: Path, github: FakeGitHub
    ) -> None:
        write(
            tmp_path / "Package.swift",
            manifest_text(
                [
                    ("https://github.com/apple/swift-log", "1.0.0"),
                    ("https://github.com/apple/swift-log.git", "1.0.0"),
                ]
            ),
        )
        github.releases("apple", "swift-log", ["1.6.1"])

        async with _client(github) as http:
            with pytest.raises(AmbiguousMatchError):
                await _updater(tmp_path, http).update_package("swift-log")


@pytest.mark.unit
class TestUpdateAll:
    @pytest.mark.asyncio
    async def test_reports_each_package(
        self, swift_project: Path, github: FakeGitHub
    ) -> None:
        github.releases("apple", "swift-log", ["1.6.1"])
        github.releases("apple", "swift-nio", ["2.60.0"])

        async with _client(github) as http:
            reports = await _updater(swift_project, http).update_all()

        by_name = {report.name: report for report in reports}
        assert sorted(by_name) == ["swift-collections", "swift-log", "swift-nio"]

        assert not by_name["swift-collections"].succeeded
        assert "Xcode" in by_name["swift-collections"].error

        assert by_name["swift-log"].changed
        assert by_name["swift-log"].new_version == "1.6.1"

        assert by_name["swift-nio"].succeeded
        assert not by_name["swift-nio"].changed

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_remaining_packages(
        self, tmp_path: Path, github: FakeGitHub
    ) -> None:
        write(
            tmp_path / "Package.swift",
            manifest_text(
                [
                    ("https://github.com/acme/gone", "1.0.0"),
                    ("https://github.com/acme/kept", "1.0.0"),
                ]
            ),
        )
        github.releases("acme", "gone", [])
        github.tags("acme", "gone", [])
        github.releases("acme", "kept", ["1.1.0"])

        async with _client(github) as http:
            reports = await _updater(tmp_path, http).update_all()

        assert [r.succeeded for r in reports] == [False, True]
        assert reports[1].changed
        assert 'kept", exact: "1.1.0"' in (tmp_path / "Package.swift").read_text(
            encoding="utf-8"
        )
