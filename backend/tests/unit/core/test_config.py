"""Unit tests for environment-driven configuration getters."""

import pytest

from gym_office.core import config


@pytest.mark.unit
class TestPolicyConfig:
    def test_missing_plan_defaults_to_unrestricted(self, monkeypatch):
        monkeypatch.delenv("ON_MISSING_PLAN", raising=False)
        assert config.get_missing_plan_policy() == "unrestricted"

    def test_missing_plan_deny(self, monkeypatch):
        monkeypatch.setenv("ON_MISSING_PLAN", " DENY ")
        assert config.get_missing_plan_policy() == "deny"

    def test_unknown_missing_plan_value_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv("ON_MISSING_PLAN", "sometimes")

        assert config.get_missing_plan_policy() == "unrestricted"
        assert "Unknown ON_MISSING_PLAN" in caplog.text

    def test_status_policy_defaults_to_permissive(self, monkeypatch):
        monkeypatch.delenv("RENTAL_STATUS_POLICY", raising=False)
        assert config.get_rental_status_policy() == "permissive"

    def test_status_policy_strict(self, monkeypatch):
        monkeypatch.setenv("RENTAL_STATUS_POLICY", "strict")
        assert config.get_rental_status_policy() == "strict"

    def test_unknown_status_policy_falls_back(self, monkeypatch):
        monkeypatch.setenv("RENTAL_STATUS_POLICY", "lenient")
        assert config.get_rental_status_policy() == "permissive"


@pytest.mark.unit
class TestBillingConfig:
    def test_currency_defaults_to_usd(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_INVOICE_CURRENCY", raising=False)
        assert config.get_default_invoice_currency() == "USD"

    def test_currency_is_upper_cased(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_INVOICE_CURRENCY", "eur")
        assert config.get_default_invoice_currency() == "EUR"

    @pytest.mark.parametrize("value", ["EURO", "E1R", ""])
    def test_invalid_currency_falls_back(self, monkeypatch, value):
        monkeypatch.setenv("DEFAULT_INVOICE_CURRENCY", value)
        assert config.get_default_invoice_currency() == "USD"


@pytest.mark.unit
class TestRuntimeFlags:
    @pytest.mark.parametrize(
        "value,expected", [("1", True), ("true", True), ("YES", True), ("0", False), ("off", False)]
    )
    def test_rate_limit_flag(self, monkeypatch, value, expected):
        monkeypatch.setenv("RATE_LIMIT_ENABLED", value)
        assert config.get_rate_limit_enabled() is expected

    def test_flags_default_to_enabled(self, monkeypatch):
        monkeypatch.delenv("METRICS_ENABLED", raising=False)
        monkeypatch.delenv("LOG_TO_FILE", raising=False)

        assert config.get_metrics_enabled() is True
        assert config.get_log_to_file() is True

    def test_is_production(self, monkeypatch):
        monkeypatch.setenv("FLASK_ENV", "production")
        assert config.is_production() is True
        monkeypatch.setenv("FLASK_ENV", "development")
        assert config.is_production() is False

    def test_database_url_from_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg2://u:p@db/gym")
        assert config.get_database_url() == "postgresql+psycopg2://u:p@db/gym"
