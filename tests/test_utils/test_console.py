from __future__ import annotations

import sys
import threading
from typing import Generator, List
from unittest.mock import patch

import pytest
from rich.table import Table
from rich.console import Console

from spmaudit.utils.console import (
    SPM_AUDIT_THEME,
    _get_console,
    _should_use_color,
    colorize_update_type,
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def reset_console() -> Generator[None, None, None]:
    """Reset console singleton before and after each test."""
    reconfigure_console()
    yield
    reconfigure_console()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment variables that affect console behavior."""
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("CI", raising=False)


# ==============================================================================
# Theme and color detection
# ==============================================================================


@pytest.mark.unit
class TestThemeConfiguration:
    @pytest.mark.parametrize(
        "style_name",
        ["success", "error", "warning", "info", "dim", "highlight", "header"],
    )
    def test_theme_has_required_styles(self, style_name: str) -> None:
        assert style_name in SPM_AUDIT_THEME.styles


@pytest.mark.unit
class TestShouldUseColor:
    """Tests for color detection precedence."""

    def test_no_color_env_disables_color(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is False

    def test_ci_env_disables_color(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CI", "true")
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is False

    def test_tty_enables_color(self, clean_env: None) -> None:
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is True

    def test_non_tty_disables_color(self, clean_env: None) -> None:
        with patch.object(sys.stdout, "isatty", return_value=False):
            assert _should_use_color() is False

    def test_isatty_raises_os_error(self, clean_env: None) -> None:
        with patch.object(sys.stdout, "isatty", side_effect=OSError("closed")):
            assert _should_use_color() is False

    def test_override_beats_environment(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """``--color`` forces colors even where NO_COLOR is set."""
        monkeypatch.setenv("NO_COLOR", "1")
        reconfigure_console(color=True)
        assert _should_use_color() is True

    def test_override_off(self, clean_env: None) -> None:
        reconfigure_console(color=False)
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is False


# ==============================================================================
# Console lifecycle
# ==============================================================================


@pytest.mark.unit
class TestGetConsole:
    def test_returns_console_instance(self) -> None:
        assert isinstance(_get_console(), Console)

    def test_singleton_returns_same_instance(self) -> None:
        assert _get_console() is _get_console()
        assert get_raw_console() is _get_console()

    def test_reconfigure_clears_console(self) -> None:
        first = _get_console()
        reconfigure_console()
        assert _get_console() is not first

    def test_no_color_console(self) -> None:
        reconfigure_console(color=False)
        assert _get_console().no_color is True

    def test_thread_safety(self) -> None:
        consoles: List[Console] = []

        def worker() -> None:
            consoles.append(_get_console())

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len({id(c) for c in consoles}) == 1


# ==============================================================================
# Status messages
# ==============================================================================


@pytest.mark.unit
class TestStatusMessages:
    def test_print_success(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_success("Operation completed")
            mock_print.assert_called_once_with(
                "[OK] Operation completed", style="success"
            )

    def test_print_success_custom_prefix(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_success("Done", prefix="✓")
            mock_print.assert_called_once_with("✓ Done", style="success")

    def test_print_error(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_error("Something failed")
            mock_print.assert_called_once_with(
                "[ERROR] Something failed", style="error"
            )

    def test_print_warning(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_warning("Careful")
            mock_print.assert_called_once_with("[WARNING] Careful", style="warning")

    def test_print_info(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_info("Checking 3 dependencies...")
            mock_print.assert_called_once_with(
                "Checking 3 dependencies...", style="info"
            )


# ==============================================================================
# Tables
# ==============================================================================


@pytest.mark.unit
class TestPrintTable:
    def test_prints_simple_table(self) -> None:
        data = [
            {"Package": "swift-log", "Current": "1.0.0"},
            {"Package": "swift-nio", "Current": "2.60.0"},
        ]

        with patch.object(Console, "print") as mock_print:
            print_table(data, title="MyLib (Package.swift)")

            assert mock_print.call_count == 1
            table = mock_print.call_args[0][0]
            assert isinstance(table, Table)
            assert table.title == "MyLib (Package.swift)"
            assert table.row_count == 2
            assert [c.header for c in table.columns] == ["Package", "Current"]

    def test_empty_data_prints_nothing(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_table([])
            mock_print.assert_not_called()

    def test_custom_headers_select_columns(self) -> None:
        data = [{"Package": "swift-log", "Current": "1.0.0", "Hidden": "x"}]

        with patch.object(Console, "print") as mock_print:
            print_table(data, headers=["Package", "Current"])

            table = mock_print.call_args[0][0]
            assert [c.header for c in table.columns] == ["Package", "Current"]

    def test_column_styles(self) -> None:
        data = [{"Package": "swift-log"}]
        styles = {"Package": {"style": "bold cyan", "no_wrap": True}}

        with patch.object(Console, "print") as mock_print:
            print_table(data, column_styles=styles)

            column = mock_print.call_args[0][0].columns[0]
            assert column.style == "bold cyan"
            assert column.no_wrap is True

    def test_renders_to_output(self) -> None:
        console = Console(record=True, width=120, no_color=True)
        with patch("spmaudit.utils.console._get_console", return_value=console):
            print_table([{"Package": "swift-log", "Latest": "1.6.1"}])

        text = console.export_text()
        assert "swift-log" in text
        assert "1.6.1" in text


@pytest.mark.unit
class TestColorizeUpdateType:
    @pytest.mark.parametrize(
        "update_type, color",
        [("major", "red"), ("minor", "yellow"), ("patch", "green"), ("downgrade", "red")],
    )
    def test_known_types(self, update_type: str, color: str) -> None:
        assert colorize_update_type(update_type) == f"[{color}]{update_type}[/{color}]"

    def test_unknown_type_unchanged(self) -> None:
        assert colorize_update_type("same") == "same"
