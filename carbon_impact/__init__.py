# -*- coding: utf-8 -*-
"""
Carbon Impact Engine
====================

Impact and financial estimates for carbon-mitigation interventions:

- Vegetation carbon sinks, new and pre-existing, with daily and
  multi-year sequestration
- Renewable deployment sizing (Solar, Wind, Hydropower, HydrogenElectric)
  against a daily CO2 reduction target under a land budget
- Carbon capture and storage (CCS) retrofit economics with
  technology-specific capture efficiency
- Methane capture and storage (MCS) retrofit economics with credit and
  methane resale revenue
- Pluggable calculation store (in-memory or SQLite)
- SHA-256 provenance hashes and chain for every computed record
- Prometheus metrics with gl_ci_ prefix
- Thread-safe configuration with GL_CARBON_IMPACT_ env prefix

Key Components:
    - config: CarbonImpactConfig
    - models: Pydantic v2 frozen records
    - efficiency: technology efficiency and renewable profile tables
    - setup: CarbonImpactService facade and FastAPI wiring
    - main: create_app() and the uvicorn entrypoint

Example:
    >>> from carbon_impact import CarbonImpactService
    >>> service = CarbonImpactService()
    >>> service.calculate_ccs({"annualEmissions": 1000})["data"]["capturedCO2"]
    '850.00 tons'
"""

__version__ = "1.0.0"

from carbon_impact.config import (
    CarbonImpactConfig,
    get_config,
    reset_config,
    set_config,
)
from carbon_impact.exceptions import (
    CarbonImpactError,
    ConfigurationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from carbon_impact.models import (
    CCSRecord,
    DeploymentMode,
    FormulaVersion,
    MCSRecord,
    RenewableAssessment,
    SinkKind,
    SinkRecord,
)
from carbon_impact.setup import (
    CarbonImpactService,
    configure_carbon_impact,
    get_service,
)

__all__ = [
    "__version__",
    "CarbonImpactConfig",
    "get_config",
    "set_config",
    "reset_config",
    "CarbonImpactError",
    "ConfigurationError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
    "CCSRecord",
    "DeploymentMode",
    "FormulaVersion",
    "MCSRecord",
    "RenewableAssessment",
    "SinkKind",
    "SinkRecord",
    "CarbonImpactService",
    "configure_carbon_impact",
    "get_service",
]
