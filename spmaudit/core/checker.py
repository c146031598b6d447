"""Concurrent audit of discovered dependencies.

:class:`AuditChecker` launches one task per dependency and waits for all
of them. Each task asks the :class:`~spmaudit.core.release_resolver.ReleaseResolver`
for the upstream outcome and then gathers hygiene signals: the local
checkout first, remote README and license lookups when there is no
checkout, and the date of the last upstream commit.

Tasks never see each other's results and none is ever cancelled. An
exception escaping a task is turned into an ``error`` outcome for that
dependency alone. Completion order is arbitrary; the aggregator restores a
deterministic order afterwards.

Request-level concurrency is bounded by the HTTP client's semaphore, so a
project with hundreds of dependencies does not open hundreds of
connections at once.

Typical usage::

    async with HTTPClient() as http:
        checker = AuditChecker(ReleaseResolver(http))
        results = await checker.check_dependencies(records)
"""

from __future__ import annotations

import httpx
import asyncio
import dataclasses
from typing import Any, List, Optional, Sequence

from spmaudit.constants import SELF_CHECK_TIMEOUT, SELF_RELEASES_URL
from spmaudit.core.hygiene import HygieneSignals, LocalCheckoutInspector, find_checkout
from spmaudit.core.release_resolver import ReleaseResolver
from spmaudit.exceptions import SPMAuditError
from spmaudit.models.dependency import DependencyRecord
from spmaudit.models.license import LicenseCategory
from spmaudit.models.result import AuditResult, SignalStatus, UpdateOutcome
from spmaudit.utils.http import HTTPClient
from spmaudit.utils.logger import get_logger
from spmaudit.utils.version_utils import is_newer, is_prerelease, normalize_version

logger = get_logger("checker")


class AuditChecker:
    """Audit many dependencies concurrently.

    Args:
        resolver: Upstream lookups; its credential is the only state
            shared between tasks.
        check_hygiene: Collect README, license, agent-file and last-commit
            signals in addition to the version outcome.

    Example::

        >>> checker = AuditChecker(resolver)
        >>> results = await checker.check_dependencies(records)
        >>> sum(r.outcome.has_update for r in results)
        3
    """

    def __init__(self, resolver: ReleaseResolver, check_hygiene: bool = True) -> None:
        self.resolver = resolver
        self.check_hygiene = check_hygiene

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def check_dependencies(
        self,
        records: Sequence[DependencyRecord],
    ) -> List[AuditResult]:
        """Audit every record and return one result per record.

        Results are returned in input order; errors for individual
        dependencies are captured in their outcome.
        """
        tasks = [asyncio.create_task(self.audit(record)) for record in records]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        return self._process_results(records, outcomes)

    async def audit(self, record: DependencyRecord) -> AuditResult:
        """Audit a single dependency."""
        outcome = await self.resolver.check(record)
        if not self.check_hygiene:
            return AuditResult(record=record, outcome=outcome)

        signals = LocalCheckoutInspector(find_checkout(record)).inspect()
        readme, license, last_commit = await self._remote_signals(record, signals)

        if signals.swift_tools_version:
            record = dataclasses.replace(
                record, swift_tools_version=signals.swift_tools_version
            )

        return AuditResult(
            record=record,
            outcome=outcome,
            readme=readme,
            license=license,
            claude_file=signals.claude_file,
            agents_file=signals.agents_file,
            last_commit=last_commit,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _remote_signals(
        self,
        record: DependencyRecord,
        signals: HygieneSignals,
    ) -> Any:
        slug = record.owner_repo
        if slug is None:
            return signals.readme, signals.license, None

        owner, repo = slug

        async def _keep(value: Any) -> Any:
            return value

        readme_task = (
            self.resolver.check_readme(owner, repo)
            if signals.readme is SignalStatus.UNKNOWN
            else _keep(signals.readme)
        )
        license_task = (
            self.resolver.check_license(owner, repo)
            if signals.license is LicenseCategory.UNKNOWN
            else _keep(signals.license)
        )
        return await asyncio.gather(
            readme_task,
            license_task,
            self.resolver.fetch_last_commit_date(owner, repo),
        )

    @staticmethod
    def _process_results(
        records: Sequence[DependencyRecord],
        outcomes: List[Any],
    ) -> List[AuditResult]:
        results: List[AuditResult] = []
        for record, outcome in zip(records, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Audit of %s failed: %s", record.name, outcome)
                outcome = AuditResult(
                    record=record,
                    outcome=UpdateOutcome.error(str(outcome) or type(outcome).__name__),
                )
            results.append(outcome)
        return results


async def check_for_tool_update(
    current_version: str,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: float = SELF_CHECK_TIMEOUT,
) -> Optional[str]:
    """Return a newer spm-audit release than ``current_version``, if any.

    Best effort: bounded by ``timeout`` seconds and silent on every
    failure, so a slow or unreachable network never delays an audit.
    """
    try:
        async with HTTPClient(
            timeout=timeout, max_retries=0, transport=transport
        ) as http:
            releases = await asyncio.wait_for(
                http.get_json(SELF_RELEASES_URL), timeout=timeout
            )
    except (SPMAuditError, httpx.HTTPError, asyncio.TimeoutError) as exc:
        logger.debug("Self-update check skipped: %s", exc)
        return None

    if not isinstance(releases, list):
        return None

    for release in releases:
        if not isinstance(release, dict) or release.get("prerelease"):
            continue
        tag_name = release.get("tag_name")
        if not isinstance(tag_name, str) or is_prerelease(tag_name):
            continue
        latest = normalize_version(tag_name)
        return latest if is_newer(latest, current_version) else None

    return None
