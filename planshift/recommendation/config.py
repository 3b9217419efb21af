# -*- coding: utf-8 -*-
"""
Recommendation Engine Configuration - PlanShift

Centralized configuration for the plan recommendation engine covering:
- Financial constants (hourly rate, migration fees)
- AppSumo migration window and special discount
- Category resolution (new-user grace period)
- Scoring thresholds (large team size, equivalency floor, delay risk)
- Evaluation fan-out (thread pool toggle and size)
- Offer and scenario horizons

All settings can be overridden via environment variables with the
``PLANSHIFT_`` prefix (e.g. ``PLANSHIFT_HOURLY_RATE``).

Example:
    >>> from planshift.recommendation.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.hourly_rate, cfg.appsumo_window_days)

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "PLANSHIFT_"


# ---------------------------------------------------------------------------
# EngineConfig
# ---------------------------------------------------------------------------


@dataclass
class EngineConfig:
    """Complete configuration for the PlanShift recommendation engine.

    All attributes can be overridden via environment variables using the
    ``PLANSHIFT_`` prefix.

    Attributes:
        hourly_rate: Monetary value of one saved working hour.
        migration_base_fee: Base one-off migration cost before the complexity multiplier.
        per_user_migration_fee: Per-user onboarding cost added to the migration cost.
        per_user_migration_cap: Upper bound of the per-user onboarding cost.
        appsumo_window_days: Days after an AppSumo purchase during which the special discount applies.
        appsumo_special_discount_pct: Percentage of the AppSumo special discount.
        new_user_grace_days: Organizations younger than this with no other signal are new users.
        large_team_threshold: User count above which unlimited tiers fit best.
        feature_match_floor: Minimum feature match percent for an equivalent plan.
        delay_risk_threshold: Overall risk score above which migration is delayed.
        parallel_evaluation: Evaluate candidate tiers on a thread pool.
        max_workers: Thread pool size for parallel evaluation.
        trial_offer_days: Validity of the trial conversion offer.
        delayed_scenario_months: Deferral used by the delayed migration scenario.
    """

    # -- Financial constants -------------------------------------------------
    hourly_rate: float = 50.0
    migration_base_fee: float = 500.0
    per_user_migration_fee: float = 50.0
    per_user_migration_cap: float = 1000.0

    # -- AppSumo -------------------------------------------------------------
    appsumo_window_days: int = 5
    appsumo_special_discount_pct: float = 50.0

    # -- Category resolution -------------------------------------------------
    new_user_grace_days: int = 7

    # -- Scoring thresholds --------------------------------------------------
    large_team_threshold: int = 50
    feature_match_floor: int = 70
    delay_risk_threshold: int = 70

    # -- Evaluation fan-out --------------------------------------------------
    parallel_evaluation: bool = False
    max_workers: int = 4

    # -- Offers and scenarios ------------------------------------------------
    trial_offer_days: int = 30
    delayed_scenario_months: int = 3

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build an EngineConfig from environment variables.

        Every field can be overridden via ``PLANSHIFT_<FIELD_UPPER>``.
        Boolean values accept ``true/1/yes`` (case-insensitive).
        Integer values are parsed via ``int()``.
        Float values are parsed via ``float()``.

        Returns:
            Populated EngineConfig instance.
        """
        prefix = _ENV_PREFIX

        def _env(name: str, default: Any = None) -> Optional[str]:
            return os.environ.get(f"{prefix}{name}", default)

        def _bool(name: str, default: bool) -> bool:
            val = _env(name)
            if val is None:
                return default
            return val.lower() in ("true", "1", "yes")

        def _int(name: str, default: int) -> int:
            val = _env(name)
            if val is None:
                return default
            try:
                return int(val)
            except ValueError:
                logger.warning(
                    "Invalid integer for %s%s=%s, using default %d",
                    prefix, name, val, default,
                )
                return default

        def _float(name: str, default: float) -> float:
            val = _env(name)
            if val is None:
                return default
            try:
                return float(val)
            except ValueError:
                logger.warning(
                    "Invalid float for %s%s=%s, using default %.1f",
                    prefix, name, val, default,
                )
                return default

        config = cls(
            hourly_rate=_float("HOURLY_RATE", cls.hourly_rate),
            migration_base_fee=_float(
                "MIGRATION_BASE_FEE", cls.migration_base_fee,
            ),
            per_user_migration_fee=_float(
                "PER_USER_MIGRATION_FEE", cls.per_user_migration_fee,
            ),
            per_user_migration_cap=_float(
                "PER_USER_MIGRATION_CAP", cls.per_user_migration_cap,
            ),
            appsumo_window_days=_int(
                "APPSUMO_WINDOW_DAYS", cls.appsumo_window_days,
            ),
            appsumo_special_discount_pct=_float(
                "APPSUMO_SPECIAL_DISCOUNT_PCT", cls.appsumo_special_discount_pct,
            ),
            new_user_grace_days=_int(
                "NEW_USER_GRACE_DAYS", cls.new_user_grace_days,
            ),
            large_team_threshold=_int(
                "LARGE_TEAM_THRESHOLD", cls.large_team_threshold,
            ),
            feature_match_floor=_int(
                "FEATURE_MATCH_FLOOR", cls.feature_match_floor,
            ),
            delay_risk_threshold=_int(
                "DELAY_RISK_THRESHOLD", cls.delay_risk_threshold,
            ),
            parallel_evaluation=_bool(
                "PARALLEL_EVALUATION", cls.parallel_evaluation,
            ),
            max_workers=_int("MAX_WORKERS", cls.max_workers),
            trial_offer_days=_int("TRIAL_OFFER_DAYS", cls.trial_offer_days),
            delayed_scenario_months=_int(
                "DELAYED_SCENARIO_MONTHS", cls.delayed_scenario_months,
            ),
        )

        logger.info(
            "EngineConfig loaded: hourly_rate=%.2f, appsumo_window=%dd, "
            "match_floor=%d, delay_risk=%d, parallel=%s/%d",
            config.hourly_rate,
            config.appsumo_window_days,
            config.feature_match_floor,
            config.delay_risk_threshold,
            config.parallel_evaluation,
            config.max_workers,
        )
        return config


# ---------------------------------------------------------------------------
# Thread-safe singleton accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[EngineConfig] = None
_config_lock = threading.Lock()


def get_config() -> EngineConfig:
    """Return the singleton EngineConfig, creating from env if needed.

    Returns:
        EngineConfig singleton instance.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = EngineConfig.from_env()
    return _config_instance


def set_config(config: EngineConfig) -> None:
    """Replace the singleton EngineConfig (useful for testing).

    Args:
        config: New configuration to install.
    """
    global _config_instance
    with _config_lock:
        _config_instance = config
    logger.info("EngineConfig replaced programmatically")


def reset_config() -> None:
    """Reset the singleton (primarily for test teardown)."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = [
    "EngineConfig",
    "get_config",
    "set_config",
    "reset_config",
]
