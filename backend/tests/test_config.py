# backend/tests/test_config.py
"""
Tests for application settings.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from folio_engine.config import Settings


class TestSettingsDefaults:
    """Defaults match the engine constants."""

    def test_accounting_defaults(self, monkeypatch):
        for name in ("ZERO_BALANCE_TOLERANCE", "STALE_AFTER_MINUTES", "DISPLAY_MAX_HOLDINGS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.zero_balance_tolerance == Decimal("0.00000001")
        assert settings.stale_after_minutes == 60
        assert settings.display_max_holdings == 5

    def test_test_environment(self):
        """conftest runs the suite with ENVIRONMENT=test."""
        settings = Settings(_env_file=None)

        assert settings.is_test
        assert not settings.is_production


class TestSettingsFromEnvironment:
    """Values are read from environment variables."""

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("ZERO_BALANCE_TOLERANCE", "0.001")
        monkeypatch.setenv("STALE_AFTER_MINUTES", "15")
        monkeypatch.setenv("DISPLAY_MAX_HOLDINGS", "3")
        monkeypatch.setenv("LOG_FORMAT", "json")

        settings = Settings(_env_file=None)

        assert settings.zero_balance_tolerance == Decimal("0.001")
        assert settings.stale_after_minutes == 15
        assert settings.display_max_holdings == 3
        assert settings.log_format == "json"

    @pytest.mark.parametrize(
        "name, value",
        [
            ("ZERO_BALANCE_TOLERANCE", "-1"),
            ("STALE_AFTER_MINUTES", "0"),
            ("DISPLAY_MAX_HOLDINGS", "0"),
            ("LOG_FORMAT", "xml"),
            ("ENVIRONMENT", "staging"),
        ],
    )
    def test_invalid_values_rejected(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_debug_rejected_in_production(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "true")

        with pytest.raises(ValidationError, match="DEBUG must be disabled"):
            Settings(_env_file=None)

    def test_production_without_debug(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "false")

        assert Settings(_env_file=None).is_production
