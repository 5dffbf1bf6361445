# -*- coding: utf-8 -*-
"""
Carbon Impact Data Models

Pydantic v2 value records produced by the four calculators:

- SinkRecord: new and pre-existing vegetation carbon sinks
- RenewableAssessment: renewable deployment sizing under a land budget
- CCSRecord: carbon capture retrofit economics
- MCSRecord: methane capture retrofit economics

Records are frozen once computed. They serialize with camelCase aliases
(``capturedCO2``, ``dailySequestrationRate``...) and ``to_document()``
converts non-finite floats to ``None`` so that a record always renders
as valid JSON.

Enumerations:
    SinkKind, DeploymentMode, FormulaVersion

Author: Carbon Impact Team
Date: October 2026
Status: Production Ready
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from carbon_impact.coercion import finite_or_none
from carbon_impact.efficiency import RenewableSource
from carbon_impact.provenance import compute_hash


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Service version string.
VERSION: str = "1.0.0"

#: Collection names used by the calculation store.
COLLECTION_SINKS: str = "sinks"
COLLECTION_EXISTING_SINKS: str = "existing_sinks"
COLLECTION_RENEWABLE: str = "renewable_assessments"
COLLECTION_CCS: str = "ccs_calculations"
COLLECTION_MCS: str = "mcs_calculations"

#: Years covered by the long-run profit projection of CCS and MCS.
PROFIT_PROJECTION_YEARS: int = 10


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SinkKind(str, Enum):
    """Whether a sink is newly planted or already established."""

    NEW = "new"
    EXISTING = "existing"


class DeploymentMode(str, Enum):
    """How a renewable deployment fits the available land.

    FULL: every required unit fits.
    PARTIAL: only the whole units that fit are deployed.
    FRACTIONAL: not even one unit fits; reduction scales with land area.
    """

    FULL = "full"
    PARTIAL = "partial"
    FRACTIONAL = "fractional"


class FormulaVersion(str, Enum):
    """Formula set a record was computed with.

    V1 reproduces the legacy formulas, including the existing-sink total
    that scales with area and the unscaled fractional deployment cost.
    V2 corrects both.
    """

    V1 = "v1"
    V2 = "v2"


# ---------------------------------------------------------------------------
# Base record
# ---------------------------------------------------------------------------


class ImpactRecord(BaseModel):
    """Common behaviour for every computed record."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=True,
    )

    formula_version: FormulaVersion = Field(default=FormulaVersion.V1)
    provenance_hash: str = Field(default="")

    @classmethod
    def sealed(cls, **fields: Any) -> "ImpactRecord":
        """Build a record whose provenance hash covers every given field."""
        fields.pop("provenance_hash", None)
        return cls(**fields, provenance_hash=compute_hash(fields))

    def to_document(self) -> Dict[str, Any]:
        """Return the record as a JSON-safe dict keyed by camelCase names."""
        return finite_or_none(self.model_dump(by_alias=True, mode="python"))


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class SinkRecord(ImpactRecord):
    """A vegetation carbon sink and its sequestration figures.

    Attributes:
        name: Sink name.
        vegetation_type: Vegetation planted or present (forest, mangrove...).
        area_covered: Area in hectares.
        carbon_sequestration_rate: Tons of CO2 per year, per hectare for new
            sinks and for the whole sink for existing ones.
        daily_sequestration_rate: Tons of CO2 sequestered per day.
        total_sequestration: Tons of CO2 over ``timeframe`` years.
        location: Free-form location.
        additional_details: Free-form notes.
        timeframe: Years covered by ``total_sequestration``.
        sink_kind: ``new`` or ``existing``.
    """

    name: Optional[str] = None
    vegetation_type: Optional[str] = None
    area_covered: float
    carbon_sequestration_rate: float
    daily_sequestration_rate: float
    total_sequestration: float
    location: Optional[str] = None
    additional_details: Optional[str] = None
    timeframe: float = 1.0
    sink_kind: SinkKind = SinkKind.NEW


class RenewableAssessment(ImpactRecord):
    """Sizing of a renewable deployment against a CO2 reduction target."""

    solution_name: str
    selected_renewable: RenewableSource
    co2_emissions_per_day: float
    desired_reduction_percentage: float
    available_land: float
    target_co2_reduction: float
    required_units: int
    land_required: float
    deployable_units: int
    deployment_mode: DeploymentMode
    total_reduction_per_day: float
    time_to_achieve_neutrality: int
    implementation_cost: float
    carbon_credit_price: float
    carbon_credits_saved_per_day: float
    carbon_credits_saved_per_year: float
    cost_of_carbon_credits_saved_per_year: float


class CCSRecord(ImpactRecord):
    """Economics of a carbon capture and storage retrofit."""

    mine_name: Optional[str] = None
    annual_emissions: float
    mine_size: Optional[str] = None
    ccs_technology: Optional[str] = None
    installation_cost_per_ton: float
    annual_maintenance_cost: float
    capture_efficiency: float
    efficiency_defaulted: bool = False
    captured_co2: float = Field(alias="capturedCO2")
    installation_cost: float
    maintenance_cost: float
    carbon_credit_price: float
    carbon_credit_revenue: float
    total_cost_for_first_year: float
    total_revenue_for_first_year: float
    net_profit_for_first_year: float
    annual_net_profit: float
    total_profit_for_ten_years: float


class MCSRecord(ImpactRecord):
    """Economics of a methane capture and storage retrofit.

    Revenue has two streams: carbon credits on the CO2 equivalent of the
    captured methane, and resale of the methane itself.
    """

    mine_name: Optional[str] = None
    annual_methane_emissions: float
    mine_size: Optional[str] = None
    mcs_technology: Optional[str] = None
    installation_cost_per_ton: float
    annual_maintenance_cost: float
    capture_efficiency: float
    efficiency_defaulted: bool = False
    captured_methane: float
    methane_gwp: float
    co2_equivalent: float
    methane_market_price: float
    carbon_credit_price: float
    installation_cost: float
    maintenance_cost: float
    carbon_credit_revenue: float
    methane_revenue: float
    total_revenue: float
    total_cost_for_first_year: float
    net_profit_for_first_year: float
    annual_net_profit: float
    total_profit_for_ten_years: float


__all__ = [
    "VERSION",
    "COLLECTION_SINKS",
    "COLLECTION_EXISTING_SINKS",
    "COLLECTION_RENEWABLE",
    "COLLECTION_CCS",
    "COLLECTION_MCS",
    "PROFIT_PROJECTION_YEARS",
    "SinkKind",
    "DeploymentMode",
    "FormulaVersion",
    "ImpactRecord",
    "SinkRecord",
    "RenewableAssessment",
    "CCSRecord",
    "MCSRecord",
]
