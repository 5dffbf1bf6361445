# -*- coding: utf-8 -*-
"""
Carbon Impact Engine Configuration

Centralized configuration for the carbon impact calculators covering:
- Currency display symbol and calendar constants (days per year)
- CCS defaults (carbon credit price, installation cost per ton)
- MCS defaults (installation cost per ton, methane price, methane GWP)
- Shared defaults (annual maintenance cost, capture efficiency)
- Renewable sizing defaults (credit price per ton, reduction floor)
- Formula version and strict input validation toggle
- Storage backend selection (in-memory or SQLite)
- Provenance tracking and Prometheus metrics toggles
- API prefix, CORS origins and server binding

All settings can be overridden via environment variables with the
``GL_CARBON_IMPACT_`` prefix (e.g. ``GL_CARBON_IMPACT_FORMULA_VERSION``,
``GL_CARBON_IMPACT_STORAGE_BACKEND``).

Environment Variable Reference (GL_CARBON_IMPACT_ prefix):
    GL_CARBON_IMPACT_ENABLED                          - Enable/disable service
    GL_CARBON_IMPACT_LOG_LEVEL                        - Logging level
    GL_CARBON_IMPACT_CURRENCY_SYMBOL                  - Display currency symbol
    GL_CARBON_IMPACT_DAYS_PER_YEAR                    - Days used to annualize
    GL_CARBON_IMPACT_CARBON_CREDIT_PRICE              - Credit price per ton CO2 (CCS, MCS)
    GL_CARBON_IMPACT_CCS_DEFAULT_INSTALLATION_COST_PER_TON
    GL_CARBON_IMPACT_MCS_DEFAULT_INSTALLATION_COST_PER_TON
    GL_CARBON_IMPACT_DEFAULT_ANNUAL_MAINTENANCE_COST  - Maintenance per year
    GL_CARBON_IMPACT_METHANE_MARKET_PRICE             - Methane resale per ton
    GL_CARBON_IMPACT_METHANE_GWP                      - CH4 to CO2e multiplier
    GL_CARBON_IMPACT_DEFAULT_CAPTURE_EFFICIENCY       - Fallback efficiency
    GL_CARBON_IMPACT_RENEWABLE_CARBON_CREDIT_PRICE    - Credit price per ton
    GL_CARBON_IMPACT_MIN_REDUCTION_PER_DAY            - Divide-by-zero floor
    GL_CARBON_IMPACT_FORMULA_VERSION                  - v1 (legacy) or v2
    GL_CARBON_IMPACT_STRICT_VALIDATION                - Validate all calculators
    GL_CARBON_IMPACT_STORAGE_BACKEND                  - memory or sqlite
    GL_CARBON_IMPACT_DATABASE_PATH                    - SQLite database file
    GL_CARBON_IMPACT_ENABLE_PROVENANCE                - SHA-256 provenance chain
    GL_CARBON_IMPACT_GENESIS_HASH                     - Provenance genesis anchor
    GL_CARBON_IMPACT_ENABLE_METRICS                   - Prometheus metrics
    GL_CARBON_IMPACT_API_PREFIX                       - REST route prefix
    GL_CARBON_IMPACT_CORS_ORIGINS                     - Comma-separated origins
    GL_CARBON_IMPACT_SERVER_HOST                      - Bind host
    GL_CARBON_IMPACT_SERVER_PORT                      - Bind port

Example:
    >>> from carbon_impact.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.formula_version, cfg.default_capture_efficiency)
    v1 0.85

    >>> # Override for testing
    >>> from carbon_impact.config import CarbonImpactConfig, set_config, reset_config
    >>> set_config(CarbonImpactConfig(strict_validation=True))
    >>> reset_config()  # teardown

Author: Carbon Impact Team
Date: October 2026
Status: Production Ready
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from carbon_impact.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "GL_CARBON_IMPACT_"

# ---------------------------------------------------------------------------
# Valid enumeration values for configuration validation
# ---------------------------------------------------------------------------

_VALID_LOG_LEVELS = frozenset(
    {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
)

_VALID_FORMULA_VERSIONS = frozenset({"v1", "v2"})

_VALID_STORAGE_BACKENDS = frozenset({"memory", "sqlite"})


# ---------------------------------------------------------------------------
# CarbonImpactConfig
# ---------------------------------------------------------------------------


@dataclass
class CarbonImpactConfig:
    """Complete configuration for the carbon impact engine.

    Attributes are grouped by concern: logging, display, CCS and MCS
    economics, renewable sizing, formula behaviour, storage, provenance,
    metrics and HTTP serving.

    Attributes:
        enabled: Master enable flag for the service.
        log_level: Logging verbosity level.
        currency_symbol: Symbol prefixed to every currency string.
        days_per_year: Days used to convert annual and daily quantities.
        carbon_credit_price: Carbon credit price per ton of CO2 (CCS/MCS).
        ccs_default_installation_cost_per_ton: CCS installation cost default.
        mcs_default_installation_cost_per_ton: MCS installation cost default.
        default_annual_maintenance_cost: Yearly maintenance cost default.
        methane_market_price: Resale price per ton of captured methane.
        methane_gwp: Global-warming-potential multiplier for methane.
        default_capture_efficiency: Efficiency used for unknown technologies.
        renewable_carbon_credit_price: Credit price per ton avoided by
            renewable deployments.
        min_reduction_per_day: Floor applied to daily reduction before it is
            used as a divisor.
        formula_version: ``v1`` reproduces legacy formulas, ``v2`` applies
            the corrected existing-sink and fractional-cost formulas.
        strict_validation: Apply the positive-number guard to the sink, CCS
            and MCS calculators as well as the renewable sizer.
        storage_backend: ``memory`` or ``sqlite``.
        database_path: SQLite file path (``:memory:`` allowed).
        enable_provenance: Record every calculation in the SHA-256 chain.
        genesis_hash: Anchor string for the provenance chain.
        enable_metrics: Record Prometheus metrics.
        api_prefix: Prefix for the REST routes.
        cors_origins: Comma-separated list of allowed CORS origins.
        server_host: Host the HTTP server binds to.
        server_port: Port the HTTP server binds to.
    """

    enabled: bool = True
    log_level: str = "INFO"

    # -- Display --------------------------------------------------------------
    currency_symbol: str = "₹"
    days_per_year: int = 365

    # -- CCS / MCS economics --------------------------------------------------
    carbon_credit_price: float = 1500.0
    ccs_default_installation_cost_per_ton: float = 2000.0
    mcs_default_installation_cost_per_ton: float = 3000.0
    default_annual_maintenance_cost: float = 10_000_000.0
    methane_market_price: float = 500.0
    methane_gwp: float = 25.0
    default_capture_efficiency: float = 0.85

    # -- Renewable sizing -----------------------------------------------------
    renewable_carbon_credit_price: float = 300.0
    min_reduction_per_day: float = 0.01

    # -- Formula behaviour ----------------------------------------------------
    formula_version: str = "v1"
    strict_validation: bool = False

    # -- Storage --------------------------------------------------------------
    storage_backend: str = "memory"
    database_path: str = "carbon_impact.db"

    # -- Provenance / metrics -------------------------------------------------
    enable_provenance: bool = True
    genesis_hash: str = "GL-CARBON-IMPACT-GENESIS"
    enable_metrics: bool = True

    # -- HTTP -----------------------------------------------------------------
    api_prefix: str = ""
    cors_origins: str = "http://localhost:3000,http://localhost:8000"
    server_host: str = "0.0.0.0"
    server_port: int = 8000

    def __post_init__(self) -> None:
        """Validate every field and raise on the first inconsistent config.

        Raises:
            ConfigurationError: Listing every invalid field found.
        """
        errors: List[str] = []

        self.log_level = self.log_level.upper()
        if self.log_level not in _VALID_LOG_LEVELS:
            errors.append(
                f"log_level must be one of {sorted(_VALID_LOG_LEVELS)}, "
                f"got '{self.log_level}'"
            )

        if not self.currency_symbol:
            errors.append("currency_symbol must not be empty")

        for field_name, value in [
            ("days_per_year", self.days_per_year),
            ("methane_gwp", self.methane_gwp),
            ("min_reduction_per_day", self.min_reduction_per_day),
        ]:
            if value <= 0:
                errors.append(f"{field_name} must be > 0, got {value}")

        for field_name, value in [
            ("carbon_credit_price", self.carbon_credit_price),
            (
                "ccs_default_installation_cost_per_ton",
                self.ccs_default_installation_cost_per_ton,
            ),
            (
                "mcs_default_installation_cost_per_ton",
                self.mcs_default_installation_cost_per_ton,
            ),
            (
                "default_annual_maintenance_cost",
                self.default_annual_maintenance_cost,
            ),
            ("methane_market_price", self.methane_market_price),
            (
                "renewable_carbon_credit_price",
                self.renewable_carbon_credit_price,
            ),
        ]:
            if value < 0:
                errors.append(f"{field_name} must be >= 0, got {value}")

        if not (0.0 < self.default_capture_efficiency <= 1.0):
            errors.append(
                f"default_capture_efficiency must be in (0, 1], "
                f"got {self.default_capture_efficiency}"
            )

        if self.formula_version not in _VALID_FORMULA_VERSIONS:
            errors.append(
                f"formula_version must be one of "
                f"{sorted(_VALID_FORMULA_VERSIONS)}, "
                f"got '{self.formula_version}'"
            )

        if self.storage_backend not in _VALID_STORAGE_BACKENDS:
            errors.append(
                f"storage_backend must be one of "
                f"{sorted(_VALID_STORAGE_BACKENDS)}, "
                f"got '{self.storage_backend}'"
            )
        if self.storage_backend == "sqlite" and not self.database_path:
            errors.append("database_path is required for the sqlite backend")

        if self.enable_provenance and not self.genesis_hash:
            errors.append("genesis_hash must not be empty")

        if self.api_prefix and not self.api_prefix.startswith("/"):
            errors.append(
                f"api_prefix must start with '/', got '{self.api_prefix}'"
            )

        if not (0 < self.server_port < 65536):
            errors.append(
                f"server_port must be in 1-65535, got {self.server_port}"
            )

        if errors:
            raise ConfigurationError(
                "CarbonImpactConfig validation failed:\n"
                + "\n".join(f"  - {e}" for e in errors),
                context={"errors": errors},
            )

        logger.debug(
            "CarbonImpactConfig validated: formula_version=%s, "
            "strict_validation=%s, storage_backend=%s, provenance=%s, "
            "metrics=%s",
            self.formula_version,
            self.strict_validation,
            self.storage_backend,
            self.enable_provenance,
            self.enable_metrics,
        )

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> CarbonImpactConfig:
        """Build a CarbonImpactConfig from environment variables.

        Every field can be overridden via ``GL_CARBON_IMPACT_<FIELD_UPPER>``.
        Boolean values accept ``true/1/yes`` (case-insensitive). Malformed
        numeric values fall back to the class-level default and emit a
        WARNING log.

        Returns:
            Populated CarbonImpactConfig instance.
        """
        prefix = _ENV_PREFIX

        def _env(name: str) -> Optional[str]:
            return os.environ.get(f"{prefix}{name}")

        def _bool(name: str, default: bool) -> bool:
            val = _env(name)
            if val is None:
                return default
            return val.strip().lower() in ("true", "1", "yes")

        def _int(name: str, default: int) -> int:
            val = _env(name)
            if val is None:
                return default
            try:
                return int(val.strip())
            except ValueError:
                logger.warning(
                    "Invalid integer for %s%s=%r, using default %d",
                    prefix, name, val, default,
                )
                return default

        def _float(name: str, default: float) -> float:
            val = _env(name)
            if val is None:
                return default
            try:
                return float(val.strip())
            except ValueError:
                logger.warning(
                    "Invalid float for %s%s=%r, using default %f",
                    prefix, name, val, default,
                )
                return default

        def _str(name: str, default: str) -> str:
            val = _env(name)
            if val is None:
                return default
            return val.strip()

        return cls(
            enabled=_bool("ENABLED", cls.enabled),
            log_level=_str("LOG_LEVEL", cls.log_level),
            currency_symbol=_str("CURRENCY_SYMBOL", cls.currency_symbol),
            days_per_year=_int("DAYS_PER_YEAR", cls.days_per_year),
            carbon_credit_price=_float(
                "CARBON_CREDIT_PRICE", cls.carbon_credit_price,
            ),
            ccs_default_installation_cost_per_ton=_float(
                "CCS_DEFAULT_INSTALLATION_COST_PER_TON",
                cls.ccs_default_installation_cost_per_ton,
            ),
            mcs_default_installation_cost_per_ton=_float(
                "MCS_DEFAULT_INSTALLATION_COST_PER_TON",
                cls.mcs_default_installation_cost_per_ton,
            ),
            default_annual_maintenance_cost=_float(
                "DEFAULT_ANNUAL_MAINTENANCE_COST",
                cls.default_annual_maintenance_cost,
            ),
            methane_market_price=_float(
                "METHANE_MARKET_PRICE", cls.methane_market_price,
            ),
            methane_gwp=_float("METHANE_GWP", cls.methane_gwp),
            default_capture_efficiency=_float(
                "DEFAULT_CAPTURE_EFFICIENCY", cls.default_capture_efficiency,
            ),
            renewable_carbon_credit_price=_float(
                "RENEWABLE_CARBON_CREDIT_PRICE",
                cls.renewable_carbon_credit_price,
            ),
            min_reduction_per_day=_float(
                "MIN_REDUCTION_PER_DAY", cls.min_reduction_per_day,
            ),
            formula_version=_str("FORMULA_VERSION", cls.formula_version),
            strict_validation=_bool(
                "STRICT_VALIDATION", cls.strict_validation,
            ),
            storage_backend=_str("STORAGE_BACKEND", cls.storage_backend),
            database_path=_str("DATABASE_PATH", cls.database_path),
            enable_provenance=_bool(
                "ENABLE_PROVENANCE", cls.enable_provenance,
            ),
            genesis_hash=_str("GENESIS_HASH", cls.genesis_hash),
            enable_metrics=_bool("ENABLE_METRICS", cls.enable_metrics),
            api_prefix=_str("API_PREFIX", cls.api_prefix),
            cors_origins=_str("CORS_ORIGINS", cls.cors_origins),
            server_host=_str("SERVER_HOST", cls.server_host),
            server_port=_int("SERVER_PORT", cls.server_port),
        )

    @property
    def allowed_origins(self) -> List[str]:
        """Return the CORS origins as a list."""
        return [
            origin.strip()
            for origin in self.cors_origins.split(",")
            if origin.strip()
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the configuration to a plain dictionary."""
        return {
            "enabled": self.enabled,
            "log_level": self.log_level,
            "currency_symbol": self.currency_symbol,
            "days_per_year": self.days_per_year,
            "carbon_credit_price": self.carbon_credit_price,
            "ccs_default_installation_cost_per_ton": (
                self.ccs_default_installation_cost_per_ton
            ),
            "mcs_default_installation_cost_per_ton": (
                self.mcs_default_installation_cost_per_ton
            ),
            "default_annual_maintenance_cost": (
                self.default_annual_maintenance_cost
            ),
            "methane_market_price": self.methane_market_price,
            "methane_gwp": self.methane_gwp,
            "default_capture_efficiency": self.default_capture_efficiency,
            "renewable_carbon_credit_price": (
                self.renewable_carbon_credit_price
            ),
            "min_reduction_per_day": self.min_reduction_per_day,
            "formula_version": self.formula_version,
            "strict_validation": self.strict_validation,
            "storage_backend": self.storage_backend,
            "database_path": self.database_path,
            "enable_provenance": self.enable_provenance,
            "genesis_hash": self.genesis_hash,
            "enable_metrics": self.enable_metrics,
            "api_prefix": self.api_prefix,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


# ---------------------------------------------------------------------------
# Thread-safe singleton accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[CarbonImpactConfig] = None
_config_lock = threading.Lock()


def get_config() -> CarbonImpactConfig:
    """Return the singleton CarbonImpactConfig, creating from env if needed.

    Uses double-checked locking for thread safety with minimal
    contention on the hot path.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = CarbonImpactConfig.from_env()
    return _config_instance


def set_config(config: CarbonImpactConfig) -> None:
    """Replace the singleton CarbonImpactConfig.

    Primarily intended for testing and dependency injection.

    Args:
        config: New CarbonImpactConfig to install as the singleton.
    """
    global _config_instance
    with _config_lock:
        _config_instance = config
    logger.info(
        "CarbonImpactConfig replaced programmatically: "
        "formula_version=%s, strict_validation=%s, storage_backend=%s",
        config.formula_version,
        config.strict_validation,
        config.storage_backend,
    )


def reset_config() -> None:
    """Reset the singleton so the next get_config() re-reads the env."""
    global _config_instance
    with _config_lock:
        _config_instance = None
    logger.debug("CarbonImpactConfig singleton reset")


__all__ = [
    "CarbonImpactConfig",
    "get_config",
    "set_config",
    "reset_config",
]
