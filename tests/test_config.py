"""Tests for EngineConfig environment overrides and the config singleton."""

import pytest

from planshift.recommendation.config import (
    EngineConfig,
    get_config,
    reset_config,
    set_config,
)


class TestEngineConfigDefaults:

    def test_defaults(self):
        cfg = EngineConfig()

        assert cfg.hourly_rate == 50.0
        assert cfg.migration_base_fee == 500.0
        assert cfg.per_user_migration_fee == 50.0
        assert cfg.per_user_migration_cap == 1000.0
        assert cfg.appsumo_window_days == 5
        assert cfg.appsumo_special_discount_pct == 50.0
        assert cfg.new_user_grace_days == 7
        assert cfg.large_team_threshold == 50
        assert cfg.feature_match_floor == 70
        assert cfg.delay_risk_threshold == 70
        assert cfg.parallel_evaluation is False
        assert cfg.max_workers == 4
        assert cfg.trial_offer_days == 30
        assert cfg.delayed_scenario_months == 3


class TestEngineConfigFromEnv:

    def test_numeric_overrides(self, monkeypatch):
        monkeypatch.setenv("PLANSHIFT_HOURLY_RATE", "75.5")
        monkeypatch.setenv("PLANSHIFT_APPSUMO_WINDOW_DAYS", "10")
        monkeypatch.setenv("PLANSHIFT_FEATURE_MATCH_FLOOR", "80")

        cfg = EngineConfig.from_env()

        assert cfg.hourly_rate == 75.5
        assert cfg.appsumo_window_days == 10
        assert cfg.feature_match_floor == 80

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("YES", True), ("false", False), ("off", False),
    ])
    def test_boolean_override(self, monkeypatch, raw, expected):
        monkeypatch.setenv("PLANSHIFT_PARALLEL_EVALUATION", raw)
        assert EngineConfig.from_env().parallel_evaluation is expected

    def test_invalid_number_keeps_default(self, monkeypatch, caplog):
        monkeypatch.setenv("PLANSHIFT_MAX_WORKERS", "many")
        monkeypatch.setenv("PLANSHIFT_HOURLY_RATE", "cheap")

        cfg = EngineConfig.from_env()

        assert cfg.max_workers == 4
        assert cfg.hourly_rate == 50.0
        assert "Invalid integer for PLANSHIFT_MAX_WORKERS" in caplog.text


class TestConfigSingleton:

    def test_get_config_is_cached(self):
        reset_config()
        assert get_config() is get_config()

    def test_set_config_replaces_singleton(self):
        custom = EngineConfig(hourly_rate=100.0)
        set_config(custom)
        assert get_config() is custom

    def test_reset_reloads_from_env(self, monkeypatch):
        set_config(EngineConfig(hourly_rate=100.0))
        monkeypatch.setenv("PLANSHIFT_HOURLY_RATE", "42")
        reset_config()
        assert get_config().hourly_rate == 42.0
