"""Upstream release lookup against the GitHub REST API.

:class:`ReleaseResolver` answers "what is the newest stable version of this
repository?" with a two-tier strategy:

1. ``GET /repos/{owner}/{repo}/releases``. Prerelease entries are dropped
   and the first remaining release wins (GitHub lists newest first).
2. If the releases endpoint returns 404 or has no stable release, fall
   back to ``GET /repos/{owner}/{repo}/tags?per_page=100``. Tags that look
   like prereleases or are not dotted-numeric after normalization are
   discarded; the rest are sorted with the lenient comparator and the
   highest wins.

If neither tier yields a candidate the dependency has no releases. Any
other status, transport failure or undecodable body is reported as an
error for that dependency alone; :meth:`ReleaseResolver.check` turns every
such failure into an :class:`~spmaudit.models.result.UpdateOutcome` so a
batch audit never aborts.

The resolver also performs the remote hygiene lookups (README, license,
last commit) used when no local checkout of a dependency exists.

Typical usage::

    async with HTTPClient() as http:
        resolver = ReleaseResolver(http)
        outcome = await resolver.check(record)
"""

from __future__ import annotations

import os
import base64
import binascii
import subprocess
from datetime import datetime
from functools import cmp_to_key
from typing import Any, Dict, List, Optional

from spmaudit.constants import (
    GH_TOKEN_COMMAND,
    GITHUB_COMMITS_URL,
    GITHUB_LICENSE_URL,
    GITHUB_README_URL,
    GITHUB_RELEASES_URL,
    GITHUB_TAGS_URL,
    GITHUB_TOKEN_ENV,
    TAGS_PAGE_SIZE,
)
from spmaudit.exceptions import (
    GitHubError,
    NetworkError,
    RateLimitError,
    SPMAuditError,
)
from spmaudit.models.dependency import DependencyRecord
from spmaudit.models.license import LicenseCategory, classify_license
from spmaudit.models.result import SignalStatus, UpdateOutcome
from spmaudit.utils.http import HTTPClient
from spmaudit.utils.logger import get_logger
from spmaudit.utils.version_utils import (
    compare_versions,
    is_newer,
    is_prerelease,
    is_valid_semver,
    normalize_version,
)

logger = get_logger("release_resolver")


def get_github_token() -> Optional[str]:
    """Return a GitHub token from ``GITHUB_TOKEN`` or ``gh auth token``.

    A missing token is not an error: requests then go out unauthenticated
    and are subject to GitHub's lower anonymous rate limit.
    """
    token = os.environ.get(GITHUB_TOKEN_ENV, "").strip()
    if token:
        return token

    try:
        completed = subprocess.run(
            list(GH_TOKEN_COMMAND),
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("gh credential helper unavailable: %s", exc)
        return None

    if completed.returncode != 0:
        return None
    return completed.stdout.strip() or None


def _is_not_found(exc: NetworkError) -> bool:
    return isinstance(exc, GitHubError) and exc.status_code == 404


def describe_failure(exc: SPMAuditError) -> str:
    """Short, user-facing description of a failed lookup."""
    if isinstance(exc, RateLimitError):
        return f"API rate limit exceeded (resets at {exc.reset_at})"
    if isinstance(exc, NetworkError) and exc.status_code is not None:
        return f"API error (status {exc.status_code})"
    return exc.message


class ReleaseResolver:
    """Resolve upstream versions and hygiene signals for GitHub repositories.

    The credential is looked up once, when the resolver is created, and is
    never modified afterwards; it is the only state shared by concurrent
    lookups.

    Args:
        http_client: Shared HTTP client.
        token: GitHub token. When ``None`` and ``discover_token`` is set,
            :func:`get_github_token` is consulted.
        discover_token: Look for a token in the environment and ``gh``.

    Example::

        >>> async with HTTPClient() as http:
        ...     resolver = ReleaseResolver(http)
        ...     await resolver.fetch_latest_version("apple", "swift-log")
        '1.6.1'
    """

    def __init__(
        self,
        http_client: HTTPClient,
        token: Optional[str] = None,
        discover_token: bool = True,
    ) -> None:
        self.http = http_client
        if token is None and discover_token:
            token = get_github_token()
        self._token = token
        logger.debug("GitHub token %s", "configured" if token else "not configured")

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    async def fetch_latest_version(self, owner: str, repo: str) -> Optional[str]:
        """Return the newest stable normalized version, or ``None``.

        Raises:
            NetworkError: On any status other than 200/404, on transport
                failures and on undecodable responses.
        """
        url = GITHUB_RELEASES_URL.format(owner=owner, repo=repo)
        try:
            releases = self._expect_list(await self._get_json(url), url)
        except NetworkError as exc:
            if not _is_not_found(exc):
                raise
            logger.debug("%s/%s has no releases endpoint, using tags", owner, repo)
            return await self._latest_from_tags(owner, repo)

        for release in releases:
            if not isinstance(release, dict) or release.get("prerelease"):
                continue
            tag_name = release.get("tag_name")
            if isinstance(tag_name, str) and tag_name.strip():
                return normalize_version(tag_name)

        logger.debug("%s/%s has no stable release, using tags", owner, repo)
        return await self._latest_from_tags(owner, repo)

    async def fetch_release_versions(self, owner: str, repo: str) -> List[str]:
        """Return normalized tag names of all published releases.

        Falls back to the tag list when the repository has no releases.
        Used to confirm that an explicitly requested version exists.
        """
        url = GITHUB_RELEASES_URL.format(owner=owner, repo=repo)
        try:
            releases = self._expect_list(await self._get_json(url), url)
        except NetworkError as exc:
            if not _is_not_found(exc):
                raise
            releases = []

        versions = [
            normalize_version(release["tag_name"])
            for release in releases
            if isinstance(release, dict) and isinstance(release.get("tag_name"), str)
        ]
        if versions:
            return versions

        return [normalize_version(name) for name in await self._fetch_tag_names(owner, repo)]

    async def check(self, record: DependencyRecord) -> UpdateOutcome:
        """Compare a dependency with its newest upstream release.

        Never raises for lookup failures; they become ``error`` outcomes.
        """
        slug = record.owner_repo
        if slug is None:
            return UpdateOutcome.error("Could not parse GitHub URL")

        owner, repo = slug
        try:
            latest = await self.fetch_latest_version(owner, repo)
        except SPMAuditError as exc:
            logger.debug("Release lookup failed for %s: %s", record.name, exc)
            return UpdateOutcome.error(describe_failure(exc))

        if latest is None:
            return UpdateOutcome.no_releases()
        if is_newer(latest, record.declared_version):
            return UpdateOutcome.update_available(record.declared_version, latest)
        return UpdateOutcome.up_to_date(latest)

    # ------------------------------------------------------------------
    # Remote hygiene
    # ------------------------------------------------------------------

    async def check_readme(self, owner: str, repo: str) -> SignalStatus:
        """Report whether GitHub knows a README for the repository."""
        url = GITHUB_README_URL.format(owner=owner, repo=repo)
        try:
            await self.http.get(url, headers=self._headers())
        except NetworkError as exc:
            if _is_not_found(exc):
                return SignalStatus.MISSING
            logger.debug("README lookup failed for %s/%s: %s", owner, repo, exc)
            return SignalStatus.UNKNOWN
        return SignalStatus.PRESENT

    async def check_license(self, owner: str, repo: str) -> LicenseCategory:
        """Classify the repository's license file as detected by GitHub."""
        url = GITHUB_LICENSE_URL.format(owner=owner, repo=repo)
        try:
            payload = await self._get_json(url)
        except NetworkError as exc:
            if _is_not_found(exc):
                return LicenseCategory.MISSING
            logger.debug("License lookup failed for %s/%s: %s", owner, repo, exc)
            return LicenseCategory.UNKNOWN

        content = payload.get("content") if isinstance(payload, dict) else None
        if not isinstance(content, str):
            return LicenseCategory.UNKNOWN

        try:
            text = base64.b64decode(content).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            return LicenseCategory.UNKNOWN
        return classify_license(text)

    async def fetch_last_commit_date(self, owner: str, repo: str) -> Optional[datetime]:
        """Return the committer date of the newest commit, if available."""
        url = GITHUB_COMMITS_URL.format(owner=owner, repo=repo)
        try:
            commits = await self._get_json(url)
        except NetworkError as exc:
            logger.debug("Commit lookup failed for %s/%s: %s", owner, repo, exc)
            return None

        try:
            raw_date = commits[0]["commit"]["committer"]["date"]
            return datetime.fromisoformat(raw_date.replace("Z", "+00:00"))
        except (IndexError, KeyError, TypeError, AttributeError, ValueError):
            return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    async def _get_json(self, url: str) -> Any:
        return await self.http.get_json(url, headers=self._headers())

    @staticmethod
    def _expect_list(payload: Any, url: str) -> List[Any]:
        if not isinstance(payload, list):
            raise NetworkError(f"Expected JSON array from {url}", url=url)
        return payload

    async def _fetch_tag_names(self, owner: str, repo: str) -> List[str]:
        url = GITHUB_TAGS_URL.format(owner=owner, repo=repo, per_page=TAGS_PAGE_SIZE)
        try:
            tags = self._expect_list(await self._get_json(url), url)
        except NetworkError as exc:
            if _is_not_found(exc):
                return []
            raise

        return [
            tag["name"]
            for tag in tags
            if isinstance(tag, dict) and isinstance(tag.get("name"), str)
        ]

    async def _latest_from_tags(self, owner: str, repo: str) -> Optional[str]:
        candidates = [
            normalize_version(name)
            for name in await self._fetch_tag_names(owner, repo)
            if not is_prerelease(name) and is_valid_semver(name)
        ]
        if not candidates:
            return None

        candidates.sort(key=cmp_to_key(compare_versions), reverse=True)
        return candidates[0]
