from __future__ import annotations

import random
import pytest

from spmaudit.models.dependency import DependencyRecord
from spmaudit.models.result import AuditResult, UpdateOutcome
from spmaudit.core.aggregator import count_updates, group_results, source_display_name


def _result(name: str, source: str, update: bool = False) -> AuditResult:
    record = DependencyRecord.from_url(f"https://github.com/acme/{name}", "1.0.0", source)
    outcome = (
        UpdateOutcome.update_available("1.0.0", "2.0.0")
        if update
        else UpdateOutcome.up_to_date("1.0.0")
    )
    return AuditResult(record=record, outcome=outcome)


RESULTS = [
    _result("zeta", "/w/Lib/Package.swift", update=True),
    _result("alpha", "/w/Lib/Package.swift"),
    _result("beta", "/w/App/Package.swift", update=True),
    _result("gamma", "/w/App.xcodeproj/project.xcworkspace/xcshareddata/swiftpm/Package.resolved"),
]


@pytest.mark.unit
class TestGroupResults:
    def test_groups_sorted_by_path_and_name(self) -> None:
        groups = group_results(RESULTS)

        assert [g.source_file for g in groups] == [
            "/w/App.xcodeproj/project.xcworkspace/xcshareddata/swiftpm/Package.resolved",
            "/w/App/Package.swift",
            "/w/Lib/Package.swift",
        ]
        assert [r.record.name for r in groups[2].results] == ["alpha", "zeta"]

    def test_deterministic_for_any_completion_order(self) -> None:
        expected = group_results(RESULTS)
        shuffled = list(RESULTS)

        for seed in range(5):
            random.Random(seed).shuffle(shuffled)
            assert group_results(shuffled) == expected

    def test_update_counts(self) -> None:
        groups = group_results(RESULTS)

        assert [g.update_count for g in groups] == [0, 1, 1]
        assert count_updates(RESULTS) == 2

    def test_empty(self) -> None:
        assert group_results([]) == []


@pytest.mark.unit
class TestSourceDisplayName:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/w/MyLib/Package.swift", "MyLib (Package.swift)"),
            ("Package.swift", "Package.swift"),
            (
                "/w/App.xcodeproj/project.xcworkspace/xcshareddata/swiftpm/Package.resolved",
                "App (Xcode Project)",
            ),
            ("/w/MyLib/Package.resolved", "Package.resolved"),
            ("/w/other.txt", "/w/other.txt"),
        ],
    )
    def test_labels(self, path: str, expected: str) -> None:
        assert source_display_name(path) == expected

    def test_group_display_name(self) -> None:
        assert group_results(RESULTS)[1].display_name == "App (Package.swift)"
