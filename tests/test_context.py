from __future__ import annotations

import click
import pytest
from click.testing import CliRunner

from spmaudit.config import SPMAuditConfig
from spmaudit.context import SPMAuditContext, pass_context


@pytest.mark.unit
class TestSPMAuditContext:
    """Tests for SPMAuditContext class."""

    def test_default_initialization(self) -> None:
        ctx = SPMAuditContext()

        assert ctx.config_path is None
        assert ctx.verbose == 0
        assert ctx.color is True
        assert ctx.config is None

    def test_get_config_falls_back_to_defaults(self) -> None:
        """get_config() creates and caches a default configuration."""
        ctx = SPMAuditContext()

        config = ctx.get_config()

        assert config == SPMAuditConfig()
        assert ctx.get_config() is config

    def test_get_config_returns_loaded_config(self) -> None:
        ctx = SPMAuditContext()
        ctx.config = SPMAuditConfig(include_transitive=True)

        assert ctx.get_config().include_transitive is True

    def test_slots_prevents_arbitrary_attributes(self) -> None:
        ctx = SPMAuditContext()

        with pytest.raises(AttributeError):
            ctx.arbitrary_attribute = "value"  # type: ignore


@pytest.mark.unit
class TestPassContextDecorator:
    def test_injects_existing_context(self) -> None:
        """pass_context hands the object stored on the Click context to the command."""
        seen = []

        @click.command()
        @pass_context
        def command(ctx: SPMAuditContext) -> None:
            seen.append(ctx)

        existing = SPMAuditContext()
        existing.verbose = 2

        result = CliRunner().invoke(command, [], obj=existing)

        assert result.exit_code == 0
        assert seen == [existing]

    def test_creates_context_when_missing(self) -> None:
        seen = []

        @click.command()
        @pass_context
        def command(ctx: SPMAuditContext) -> None:
            seen.append(ctx)

        result = CliRunner().invoke(command, [])

        assert result.exit_code == 0
        assert isinstance(seen[0], SPMAuditContext)
