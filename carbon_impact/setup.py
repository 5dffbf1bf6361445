# -*- coding: utf-8 -*-
"""
Carbon Impact Service Setup
===========================

Service facade for the carbon impact engine.

Provides ``configure_carbon_impact(app)``, ``get_service()`` and
``get_router()`` for FastAPI integration, plus the
``CarbonImpactService`` facade that drives the four engines:

    1. SinkCalculatorEngine   - New and existing vegetation sinks
    2. RenewableSizerEngine   - Land-constrained renewable sizing
    3. CCSCalculatorEngine    - Carbon capture retrofit economics
    4. MCSCalculatorEngine    - Methane capture retrofit economics

Every operation follows the same path: compute the record, persist it
through the calculation store, append a provenance entry, update metrics,
then format the response payload.

Usage:
    >>> from fastapi import FastAPI
    >>> from carbon_impact.setup import configure_carbon_impact
    >>> app = FastAPI()
    >>> configure_carbon_impact(app)

    >>> from carbon_impact.setup import get_service
    >>> svc = get_service()
    >>> response = svc.calculate_ccs({
    ...     "mineName": "Jharia", "annualEmissions": 1000,
    ...     "ccsTechnology": "Pre-combustion",
    ... })

Author: Carbon Impact Team
Date: October 2026
Status: Production Ready
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from fastapi import FastAPI
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from carbon_impact.ccs_calculator import CCSCalculatorEngine
from carbon_impact.config import CarbonImpactConfig, get_config
from carbon_impact.exceptions import (
    CarbonImpactError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from carbon_impact.formatting import (
    format_currency,
    format_days,
    format_number,
    format_percent,
    format_timeframe,
    format_tons,
)
from carbon_impact.mcs_calculator import MCSCalculatorEngine
from carbon_impact.metrics import MetricsCollector
from carbon_impact.models import (
    COLLECTION_CCS,
    COLLECTION_EXISTING_SINKS,
    COLLECTION_MCS,
    COLLECTION_RENEWABLE,
    COLLECTION_SINKS,
    VERSION,
    CCSRecord,
    ImpactRecord,
    MCSRecord,
    RenewableAssessment,
    SinkRecord,
)
from carbon_impact.provenance import ProvenanceTracker, get_provenance_tracker
from carbon_impact.renewable_sizer import RenewableSizerEngine
from carbon_impact.sink_calculator import SinkCalculatorEngine
from carbon_impact.store import CalculationStore, create_store

logger = logging.getLogger(__name__)

SINK_CREATED_MESSAGE = "Carbon sink created successfully"
EXISTING_SINK_CREATED_MESSAGE = "Existing carbon sink created successfully"
CCS_SUCCESS_MESSAGE = "CCS calculation successful for 1 year and 10 years"
MCS_SUCCESS_MESSAGE = "MCS calculation successful for 1 year and 10 years"

CALCULATORS = ("sink", "existing_sink", "renewable", "ccs", "mcs")


# ===================================================================
# Response models
# ===================================================================


class HealthResponse(BaseModel):
    """Service health check response.

    Attributes:
        status: Overall service status (healthy, unhealthy).
        service: Service identifier.
        version: Service version string.
        formula_version: Formula set applied to new records.
        components: Per-component status.
    """

    model_config = ConfigDict(frozen=True)

    status: str = Field(default="healthy")
    service: str = Field(default="carbon-impact")
    version: str = Field(default=VERSION)
    formula_version: str = Field(default="v1")
    components: Dict[str, str] = Field(default_factory=dict)


class StatsResponse(BaseModel):
    """Service aggregate statistics response.

    Attributes:
        total_calculations: Calculations completed since start.
        failed_calculations: Calculations rejected or failed since start.
        by_calculator: Completed calculations per calculator.
        stored_records: Records held by the calculation store.
        provenance_entries: Entries in the provenance chain.
        uptime_seconds: Service uptime in seconds.
    """

    model_config = ConfigDict(frozen=True)

    total_calculations: int = Field(default=0)
    failed_calculations: int = Field(default=0)
    by_calculator: Dict[str, int] = Field(default_factory=dict)
    stored_records: int = Field(default=0)
    provenance_entries: int = Field(default=0)
    uptime_seconds: float = Field(default=0.0)


# ===================================================================
# CarbonImpactService facade
# ===================================================================

_service_lock = threading.Lock()
_service_instance: Optional["CarbonImpactService"] = None


class CarbonImpactService:
    """Unified facade over the four carbon impact engines.

    Attributes:
        config: CarbonImpactConfig in effect.
        store: CalculationStore records are persisted to.
        provenance: ProvenanceTracker receiving one entry per record.
        metrics: MetricsCollector honouring ``config.enable_metrics``.

    Example:
        >>> service = CarbonImpactService(store=InMemoryCalculationStore())
        >>> response = service.calculate_renewable({
        ...     "solutionName": "Plant A", "co2EmissionsPerDay": 1000,
        ...     "selectedRenewable": "Solar",
        ...     "desiredReductionPercentage": 50, "availableLand": 100,
        ... })
        >>> response["requiredUnits"]
        1250
    """

    def __init__(
        self,
        config: Optional[CarbonImpactConfig] = None,
        store: Optional[CalculationStore] = None,
        provenance: Optional[ProvenanceTracker] = None,
    ) -> None:
        self.config = config if config is not None else get_config()
        self._start_time: float = time.monotonic()

        self.store = store if store is not None else create_store(self.config)
        self.provenance = (
            provenance
            if provenance is not None
            else get_provenance_tracker()
        )

        self._sink_engine = SinkCalculatorEngine(self.config)
        self._renewable_engine = RenewableSizerEngine(self.config)
        self._ccs_engine = CCSCalculatorEngine(self.config)
        self._mcs_engine = MCSCalculatorEngine(self.config)
        self.metrics = MetricsCollector(enabled=self.config.enable_metrics)

        self._stats_lock = threading.Lock()
        self._completed: Dict[str, int] = {name: 0 for name in CALCULATORS}
        self._failed: int = 0

        logger.info(
            "CarbonImpactService created: store=%s formula_version=%s strict=%s",
            type(self.store).__name__,
            self.config.formula_version,
            self.config.strict_validation,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_sink(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Compute and persist a new sink.

        Returns:
            ``{"message", "data": {"sink", "dailySequestrationRate",
            "totalSequestration"}}``.
        """
        record_id, record = self._run(
            "sink", COLLECTION_SINKS, self._sink_engine.create_sink, params,
        )
        return self._sink_response(SINK_CREATED_MESSAGE, record_id, record)

    def create_existing_sink(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Compute and persist a pre-existing sink."""
        record_id, record = self._run(
            "existing_sink",
            COLLECTION_EXISTING_SINKS,
            self._sink_engine.create_existing_sink,
            params,
        )
        return self._sink_response(EXISTING_SINK_CREATED_MESSAGE, record_id, record)

    def calculate_renewable(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Size a renewable deployment and persist the assessment.

        Raises:
            ValidationError: Missing, non-numeric or non-positive inputs.
            NotFoundError: Unknown renewable source.
        """
        record_id, record = self._run(
            "renewable", COLLECTION_RENEWABLE, self._renewable_engine.assess, params,
        )
        symbol = self.config.currency_symbol
        return {
            "id": record_id,
            "solutionName": record.solution_name,
            "selectedRenewable": record.selected_renewable,
            "implementationCost": format_currency(record.implementation_cost, symbol),
            "targetCo2Reduction": format_number(record.target_co2_reduction),
            "totalCo2ReductionPerDay": format_number(record.total_reduction_per_day),
            "landProvided": format_number(record.available_land),
            "landRequired": record.land_required,
            "requiredUnits": record.required_units,
            "deployableUnits": record.deployable_units,
            "deploymentMode": record.deployment_mode,
            "timeToAchieveNeutrality": format_days(record.time_to_achieve_neutrality),
            "timeToAchieveNeutralityDays": record.time_to_achieve_neutrality,
            "carbonCreditsSavedPerDay": format_number(record.carbon_credits_saved_per_day),
            "carbonCreditsSavedPerYear": format_number(record.carbon_credits_saved_per_year),
            "costOfCarbonCreditsSavedPerYear": format_currency(
                record.cost_of_carbon_credits_saved_per_year, symbol,
            ),
            "formulaVersion": record.formula_version,
            "provenanceHash": record.provenance_hash,
        }

    def calculate_ccs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Compute and persist CCS retrofit economics."""
        record_id, record = self._run(
            "ccs", COLLECTION_CCS, self._ccs_engine.calculate, params,
        )
        symbol = self.config.currency_symbol
        data = {
            "id": record_id,
            "mineName": record.mine_name,
            "annualEmissions": record.annual_emissions,
            "mineSize": record.mine_size,
            "ccsTechnology": record.ccs_technology,
            "captureEfficiency": format_percent(record.capture_efficiency),
            "capturedCO2": format_tons(record.captured_co2),
        }
        data.update(self._currency_fields(record, symbol, (
            "installation_cost",
            "maintenance_cost",
            "carbon_credit_revenue",
            "total_cost_for_first_year",
            "total_revenue_for_first_year",
            "net_profit_for_first_year",
            "annual_net_profit",
            "total_profit_for_ten_years",
        )))
        data["record"] = {**record.to_document(), "id": record_id}
        return {"message": CCS_SUCCESS_MESSAGE, "data": data}

    def calculate_mcs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Compute and persist MCS retrofit economics."""
        record_id, record = self._run(
            "mcs", COLLECTION_MCS, self._mcs_engine.calculate, params,
        )
        symbol = self.config.currency_symbol
        data = {
            "id": record_id,
            "mineName": record.mine_name,
            "annualMethaneEmissions": record.annual_methane_emissions,
            "mineSize": record.mine_size,
            "mcsTechnology": record.mcs_technology,
            "captureEfficiency": format_percent(record.capture_efficiency),
            "capturedMethane": format_tons(record.captured_methane),
            "co2Equivalent": format_tons(record.co2_equivalent),
        }
        data.update(self._currency_fields(record, symbol, (
            "installation_cost",
            "maintenance_cost",
            "carbon_credit_revenue",
            "methane_revenue",
            "total_cost_for_first_year",
            "total_revenue",
            "net_profit_for_first_year",
            "annual_net_profit",
            "total_profit_for_ten_years",
        )))
        data["record"] = {**record.to_document(), "id": record_id}
        return {"message": MCS_SUCCESS_MESSAGE, "data": data}

    def health_check(self) -> HealthResponse:
        """Report component status; the store is checked with ``count()``."""
        components: Dict[str, str] = {
            "provenance": "enabled" if self.config.enable_provenance else "disabled",
            "metrics": "enabled" if self.config.enable_metrics else "disabled",
        }
        try:
            self.store.count()
            components["store"] = "available"
        except CarbonImpactError as exc:
            logger.warning("Calculation store health check failed: %s", exc)
            components["store"] = "unavailable"

        return HealthResponse(
            status="healthy" if components["store"] == "available" else "unhealthy",
            formula_version=self.config.formula_version,
            components=components,
        )

    def get_stats(self) -> StatsResponse:
        with self._stats_lock:
            completed = dict(self._completed)
            failed = self._failed
        return StatsResponse(
            total_calculations=sum(completed.values()),
            failed_calculations=failed,
            by_calculator=completed,
            stored_records=self.store.count(),
            provenance_entries=self.provenance.entry_count,
            uptime_seconds=round(time.monotonic() - self._start_time, 3),
        )

    def get_provenance(
        self,
        entity_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Return the provenance log, newest ``limit`` entries last."""
        entries = self.provenance.get_entries(entity_type=entity_type, limit=limit)
        return {
            "valid": self.provenance.verify_chain(),
            "count": len(entries),
            "entries": [entry.to_dict() for entry in entries],
        }

    def get_record_provenance(self, entity_type: str, entity_id: str) -> Dict[str, Any]:
        """Return the provenance entries for one stored record.

        Raises:
            NotFoundError: If nothing was recorded for the record.
        """
        entries = self.provenance.get_entries_for_entity(entity_type, entity_id)
        if not entries:
            raise NotFoundError(
                f"No provenance recorded for {entity_type} {entity_id}",
                context={"reason": "not_found"},
                key=f"{entity_type}:{entity_id}",
            )
        return {
            "entityType": entity_type,
            "entityId": entity_id,
            "entries": [entry.to_dict() for entry in entries],
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(
        self,
        calculator: str,
        collection: str,
        compute: Callable[[Mapping[str, Any]], ImpactRecord],
        params: Mapping[str, Any],
    ) -> Tuple[str, ImpactRecord]:
        t0 = time.monotonic()
        try:
            record = compute(params)
        except (ValidationError, NotFoundError) as exc:
            reason = exc.context.get("reason", "not_found")
            self._record_failure(calculator)
            self.metrics.record_validation_failure(calculator, reason)
            logger.info("%s request rejected: %s", calculator, exc.message)
            raise
        except Exception:
            self._record_failure(calculator)
            logger.error("%s calculation failed", calculator, exc_info=True)
            raise

        document = record.to_document()
        try:
            record_id = self.store.create(collection, document)
        except PersistenceError:
            self._record_failure(calculator)
            self.metrics.record_persistence_failure(collection)
            logger.error("Persisting %s record failed", calculator, exc_info=True)
            raise
        except Exception as exc:
            self._record_failure(calculator)
            self.metrics.record_persistence_failure(collection)
            logger.error("Persisting %s record failed", calculator, exc_info=True)
            raise PersistenceError(
                f"Failed to persist record to {collection}",
                calculator=calculator,
                collection=collection,
                cause=exc,
            ) from exc

        if self.config.enable_provenance:
            self.provenance.record(
                entity_type=calculator,
                action="calculate",
                entity_id=record_id,
                data=document,
                metadata={"provenance_hash": record.provenance_hash},
            )

        with self._stats_lock:
            self._completed[calculator] += 1

        elapsed = time.monotonic() - t0
        self._record_success_metrics(calculator, record, elapsed)
        logger.info(
            "Calculated %s %s in %.3f ms (hash=%s)",
            calculator, record_id, elapsed * 1000.0, record.provenance_hash[:16],
        )
        return record_id, record

    def _record_failure(self, calculator: str) -> None:
        with self._stats_lock:
            self._failed += 1
        self.metrics.record_calculation(calculator, "failed")

    def _record_success_metrics(
        self, calculator: str, record: ImpactRecord, elapsed: float,
    ) -> None:
        self.metrics.record_calculation(calculator, "completed")
        self.metrics.observe_duration(calculator, elapsed)

        if isinstance(record, SinkRecord):
            self.metrics.record_tons(calculator, "CO2", record.total_sequestration)
        elif isinstance(record, RenewableAssessment):
            self.metrics.record_tons(
                calculator, "CO2", record.carbon_credits_saved_per_year,
            )
        elif isinstance(record, CCSRecord):
            self.metrics.record_tons(calculator, "CO2", record.captured_co2)
            self.metrics.record_efficiency_lookup("ccs", not record.efficiency_defaulted)
        elif isinstance(record, MCSRecord):
            self.metrics.record_tons(calculator, "CH4", record.captured_methane)
            self.metrics.record_tons(calculator, "CO2e", record.co2_equivalent)
            self.metrics.record_efficiency_lookup("mcs", not record.efficiency_defaulted)

    @staticmethod
    def _sink_response(
        message: str, record_id: str, record: ImpactRecord,
    ) -> Dict[str, Any]:
        daily = format_number(record.daily_sequestration_rate)
        total = format_number(record.total_sequestration)
        years = format_timeframe(record.timeframe)
        return {
            "message": message,
            "data": {
                "sink": {**record.to_document(), "id": record_id},
                "dailySequestrationRate": f"{daily} tons of CO2 per hectare per day",
                "totalSequestration": f"{total} tons of CO2 over {years} year(s)",
            },
        }

    @staticmethod
    def _currency_fields(
        record: ImpactRecord, symbol: str, names: Tuple[str, ...],
    ) -> Dict[str, str]:
        return {
            to_camel(name): format_currency(getattr(record, name), symbol)
            for name in names
        }


# ===================================================================
# Module-level helpers
# ===================================================================


def get_service() -> CarbonImpactService:
    """Get or create the singleton CarbonImpactService instance.

    Uses double-checked locking for thread safety with minimal
    contention on the hot path.
    """
    global _service_instance
    if _service_instance is None:
        with _service_lock:
            if _service_instance is None:
                _service_instance = CarbonImpactService()
    return _service_instance


def reset_service() -> None:
    """Drop the singleton; the next get_service() builds a fresh one."""
    global _service_instance
    with _service_lock:
        if _service_instance is not None:
            _service_instance.store.close()
        _service_instance = None


def get_router() -> Any:
    """Return the carbon impact APIRouter."""
    from carbon_impact.api.router import create_router

    return create_router()


def configure_carbon_impact(
    app: FastAPI,
    config: Optional[CarbonImpactConfig] = None,
    store: Optional[CalculationStore] = None,
) -> CarbonImpactService:
    """Configure the carbon impact service on a FastAPI application.

    Creates the service singleton, stores it in ``app.state`` and mounts
    the API router under ``config.api_prefix``.
    """
    global _service_instance

    service = CarbonImpactService(config=config, store=store)

    with _service_lock:
        _service_instance = service

    app.state.carbon_impact_service = service
    app.include_router(get_router(), prefix=service.config.api_prefix)

    logger.info(
        "Carbon impact service configured (prefix=%r)",
        service.config.api_prefix,
    )
    return service


__all__ = [
    "CarbonImpactService",
    "configure_carbon_impact",
    "get_service",
    "reset_service",
    "get_router",
    "HealthResponse",
    "StatsResponse",
    "SINK_CREATED_MESSAGE",
    "EXISTING_SINK_CREATED_MESSAGE",
    "CCS_SUCCESS_MESSAGE",
    "MCS_SUCCESS_MESSAGE",
]
