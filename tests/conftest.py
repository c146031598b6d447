"""Shared fixtures: an in-memory GitHub API and a sample Swift project tree."""

from __future__ import annotations

import json
import base64
import httpx
import pytest
from pathlib import Path
from click.testing import CliRunner
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from spmaudit.constants import (
    GITHUB_COMMITS_URL,
    GITHUB_LICENSE_URL,
    GITHUB_README_URL,
    GITHUB_RELEASES_URL,
    GITHUB_TAGS_URL,
    TAGS_PAGE_SIZE,
)
from spmaudit.utils.console import reconfigure_console
from spmaudit.utils.logger import disable_logging

MIT_TEXT = (
    "MIT License\n\nPermission is hereby granted, free of charge, to any person "
    "obtaining a copy of this software...\n"
)


class FakeGitHub:
    """Route GitHub REST URLs to canned JSON responses.

    Unknown URLs answer 404, like GitHub does for missing repositories.
    Every request is recorded in :attr:`requests`.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Tuple[int, Any, Dict[str, str]]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        url: str,
        payload: Any = None,
        status: int = 200,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.routes[url] = (status, payload, headers or {})

    def releases(
        self,
        owner: str,
        repo: str,
        tags: Sequence[str],
        prerelease: Sequence[str] = (),
    ) -> None:
        self.add(
            GITHUB_RELEASES_URL.format(owner=owner, repo=repo),
            [{"tag_name": tag, "prerelease": tag in prerelease} for tag in tags],
        )

    def tags(self, owner: str, repo: str, names: Sequence[str]) -> None:
        self.add(
            GITHUB_TAGS_URL.format(owner=owner, repo=repo, per_page=TAGS_PAGE_SIZE),
            [{"name": name} for name in names],
        )

    def readme(self, owner: str, repo: str) -> None:
        self.add(GITHUB_README_URL.format(owner=owner, repo=repo), {"name": "README.md"})

    def license(self, owner: str, repo: str, text: str) -> None:
        encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        self.add(
            GITHUB_LICENSE_URL.format(owner=owner, repo=repo),
            {"content": encoded, "encoding": "base64"},
        )

    def last_commit(self, owner: str, repo: str, date: str) -> None:
        self.add(
            GITHUB_COMMITS_URL.format(owner=owner, repo=repo),
            [{"commit": {"committer": {"date": date}}}],
        )

    def requested_urls(self) -> List[str]:
        return [str(request.url) for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        status, payload, headers = route
        if payload is None:
            return httpx.Response(status, headers=headers)
        return httpx.Response(status, json=payload, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


# ---------------------------------------------------------------------------
# Project tree
# ---------------------------------------------------------------------------


def manifest_text(
    dependencies: Sequence[Tuple[str, str]],
    tools_version: str = "5.9",
) -> str:
    """Render a Package.swift declaring exact-version dependencies."""
    lines = [
        f"// swift-tools-version:{tools_version}",
        "import PackageDescription",
        "",
        "let package = Package(",
        '    name: "Sample",',
        "    dependencies: [",
    ]
    lines += [
        f'        .package(url: "{url}", exact: "{version}"),'
        for url, version in dependencies
    ]
    lines += ["    ]", ")", ""]
    return "\n".join(lines)


def resolved_text(pins: Sequence[Tuple[str, str, Optional[str]]]) -> str:
    """Render a v2 Package.resolved from ``(identity, location, version)``."""
    entries = []
    for identity, location, version in pins:
        state: Dict[str, Any] = {"revision": "0" * 40}
        if version is not None:
            state["version"] = version
        else:
            state["branch"] = "main"
        entries.append(
            {
                "identity": identity,
                "kind": "remoteSourceControl",
                "location": location,
                "state": state,
            }
        )
    return json.dumps({"pins": entries, "version": 2}, indent=2)


def pbxproj_text(references: Sequence[Tuple[str, str]]) -> str:
    """Render the package-reference section of a project.pbxproj."""
    blocks = []
    for index, (url, kind) in enumerate(references):
        blocks.append(
            f"""		B{index:07d} /* XCRemoteSwiftPackageReference */ = {{
			isa = XCRemoteSwiftPackageReference;
			repositoryURL = "{url}";
			requirement = {{
				kind = {kind};
				minimumVersion = 1.0.0;
			}};
		}};"""
        )
    return (
        "// !$*UTF8*$!\n{\n/* Begin XCRemoteSwiftPackageReference section */\n"
        + "\n".join(blocks)
        + "\n/* End XCRemoteSwiftPackageReference section */\n}\n"
    )


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


LOCKFILE_SUBPATH = "App.xcodeproj/project.xcworkspace/xcshareddata/swiftpm/Package.resolved"


@pytest.fixture
def swift_project(tmp_path: Path) -> Path:
    """A workspace with one SwiftPM package and one Xcode project.

    Layout::

        App.xcodeproj/                 swift-collections (direct, ^Major)
            project.pbxproj            swift-atomics, swift-log (transitive)
            project.xcworkspace/.../Package.resolved
        MyLib/Package.swift            swift-log 1.0.0, swift-nio 2.60.0
        MyLib/.build/checkouts/swift-log/   README, MIT LICENSE, CLAUDE.md
        Fixtures/Package.swift         ignored
        Widget-tests/Package.swift     ignored
    """
    write(
        tmp_path / "MyLib" / "Package.swift",
        manifest_text(
            [
                ("https://github.com/apple/swift-log.git", "1.0.0"),
                ("https://github.com/apple/swift-nio", "2.60.0"),
            ]
        ),
    )

    checkout = tmp_path / "MyLib" / ".build" / "checkouts" / "swift-log"
    write(checkout / "README.md", "# SwiftLog\n")
    write(checkout / "LICENSE.txt", MIT_TEXT)
    write(checkout / "CLAUDE.md", "instructions\n")
    write(checkout / "Package.swift", manifest_text([], tools_version="5.8"))

    write(
        tmp_path / "App.xcodeproj" / "project.pbxproj",
        pbxproj_text(
            [("https://github.com/apple/swift-collections.git", "upToNextMajorVersion")]
        ),
    )
    write(
        tmp_path / LOCKFILE_SUBPATH,
        resolved_text(
            [
                ("swift-atomics", "https://github.com/apple/swift-atomics.git", "1.1.0"),
                (
                    "swift-collections",
                    "https://github.com/apple/swift-collections.git",
                    "1.0.4",
                ),
                ("swift-log", "https://github.com/apple/swift-log.git", "1.0.0"),
                ("swift-syntax", "https://github.com/apple/swift-syntax.git", None),
            ]
        ),
    )

    write(
        tmp_path / "Fixtures" / "Package.swift",
        manifest_text([("https://github.com/acme/fixture", "0.0.1")]),
    )
    write(
        tmp_path / "Widget-tests" / "Package.swift",
        manifest_text([("https://github.com/acme/widget", "0.0.1")]),
    )
    return tmp_path


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[CliRunner]:
    """CliRunner isolated from the caller's config, token and terminal.

    The CLI reconfigures logging and the console on every invocation, so
    both are reset afterwards to drop references to the runner's streams.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("COLUMNS", "250")
    monkeypatch.delenv("SPM_AUDIT_CONFIG", raising=False)
    yield CliRunner()
    disable_logging()
    reconfigure_console()
