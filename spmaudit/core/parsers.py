"""Extractors for the three Swift package files spm-audit understands.

Each parser works on text only and never touches the filesystem, so the
scanner and reconciler can feed them whatever they read and the tests can
feed them literals:

- :class:`ManifestParser` reads ``Package.swift`` declarations of the form
  ``url: "https://github.com/<owner>/<repo>", exact: "<version>"`` and
  the ``// swift-tools-version`` header.
- :class:`LockfileParser` reads the JSON pins of ``Package.resolved``
  (format v2/v3, and the legacy v1 ``object.pins`` layout).
- :class:`DescriptorParser` reads ``XCRemoteSwiftPackageReference`` blocks
  of an Xcode ``project.pbxproj`` and returns the declared requirement
  kind for every package URL.

The regexes stay behind these classes; nothing else in :mod:`spmaudit.core`
matches on file contents.
"""

from __future__ import annotations

import re
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Pattern, Tuple

from spmaudit.exceptions import ParseError
from spmaudit.models.dependency import RequirementKind, canonical_url
from spmaudit.utils.logger import get_logger

logger = get_logger("parsers")


# ---------------------------------------------------------------------------
# Package.swift
# ---------------------------------------------------------------------------


class ManifestParser:
    """Extract exact-version GitHub dependencies from ``Package.swift``.

    Only declarations pinned with ``exact:`` are returned; ranges,
    branches and revisions are not auditable from the manifest alone.

    Example::

        >>> ManifestParser().parse(
        ...     '.package(url: "https://github.com/apple/swift-log.git", exact: "1.5.3")'
        ... )
        [('https://github.com/apple/swift-log.git', '1.5.3')]
    """

    DEPENDENCY_PATTERN: Pattern[str] = re.compile(
        r'url:\s*"(https://github\.com/[^"]+)",\s*exact:\s*"([^"]+)"'
    )
    TOOLS_VERSION_PATTERN: Pattern[str] = re.compile(
        r"^\s*//\s*swift-tools-version\s*:\s*([0-9]+(?:\.[0-9]+)*)",
        re.IGNORECASE,
    )

    def parse(self, text: str) -> List[Tuple[str, str]]:
        """Return ``(url, version)`` pairs in declaration order."""
        return [
            (match.group(1), match.group(2))
            for match in self.DEPENDENCY_PATTERN.finditer(text)
        ]

    def parse_tools_version(self, text: str) -> Optional[str]:
        """Return the ``swift-tools-version`` declared on the first line."""
        first_line = text.lstrip("\ufeff").split("\n", 1)[0]
        match = self.TOOLS_VERSION_PATTERN.match(first_line)
        return match.group(1) if match else None


# ---------------------------------------------------------------------------
# Package.resolved
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LockfilePin:
    """
    One entry of a ``Package.resolved`` file.

    Attributes:
        identity: Package identity as written by SwiftPM.
        location: Repository URL exactly as pinned.
        version: Resolved version, ``None`` for branch or revision pins.
    """

    identity: str
    location: str
    version: Optional[str] = None


class LockfileParser:
    """Parse ``Package.resolved`` JSON into :class:`LockfilePin` objects.

    Raises :class:`~spmaudit.exceptions.ParseError` on malformed JSON or
    when no pin list can be found.
    """

    def parse(self, text: str, *, file_path: Optional[str] = None) -> List[LockfilePin]:
        try:
            document = json.loads(text)
        except ValueError as exc:
            raise ParseError(
                f"Invalid JSON in lockfile: {exc}", file_path=file_path
            ) from exc

        if not isinstance(document, dict):
            raise ParseError("Lockfile is not a JSON object", file_path=file_path)

        if "pins" in document:
            raw_pins = document["pins"]
            identity_key, location_key = "identity", "location"
        elif isinstance(document.get("object"), dict) and "pins" in document["object"]:
            # Format v1
            raw_pins = document["object"]["pins"]
            identity_key, location_key = "package", "repositoryURL"
        else:
            raise ParseError("Lockfile has no pins", file_path=file_path)

        if not isinstance(raw_pins, list):
            raise ParseError("Lockfile pins is not a list", file_path=file_path)

        pins: List[LockfilePin] = []
        for raw in raw_pins:
            pin = self._parse_pin(raw, identity_key, location_key)
            if pin is None:
                logger.debug("Skipping malformed pin in %s: %r", file_path, raw)
                continue
            pins.append(pin)
        return pins

    @staticmethod
    def _parse_pin(
        raw: Any,
        identity_key: str,
        location_key: str,
    ) -> Optional[LockfilePin]:
        if not isinstance(raw, dict):
            return None

        location = raw.get(location_key)
        if not isinstance(location, str) or not location:
            return None

        identity = raw.get(identity_key)
        if not isinstance(identity, str):
            identity = location.rstrip("/").rsplit("/", 1)[-1]

        state = raw.get("state")
        version = state.get("version") if isinstance(state, dict) else None
        if not isinstance(version, str) or not version:
            version = None

        return LockfilePin(identity=identity, location=location, version=version)


# ---------------------------------------------------------------------------
# project.pbxproj
# ---------------------------------------------------------------------------


class DescriptorParser:
    """Map package URLs to requirement kinds from ``project.pbxproj``.

    URLs are keyed in canonical form (``.git`` stripped). Blocks with an
    unknown ``kind`` are ignored.
    """

    BLOCK_PATTERN: Pattern[str] = re.compile(
        r"isa\s*=\s*XCRemoteSwiftPackageReference;((?:(?!isa\s*=)[\s\S])*)"
    )
    URL_PATTERN: Pattern[str] = re.compile(r'repositoryURL\s*=\s*"?([^";]+)"?\s*;')
    KIND_PATTERN: Pattern[str] = re.compile(
        r"requirement\s*=\s*\{[^}]*?kind\s*=\s*\"?(\w+)\"?\s*;"
    )

    def parse(self, text: str) -> Dict[str, RequirementKind]:
        requirements: Dict[str, RequirementKind] = {}

        for block in self.BLOCK_PATTERN.finditer(text):
            body = block.group(1)
            url_match = self.URL_PATTERN.search(body)
            kind_match = self.KIND_PATTERN.search(body)
            if url_match is None or kind_match is None:
                continue

            kind = RequirementKind.from_raw(kind_match.group(1))
            if kind is None:
                logger.debug("Ignoring unknown requirement kind %r", kind_match.group(1))
                continue

            requirements[canonical_url(url_match.group(1))] = kind

        return requirements
