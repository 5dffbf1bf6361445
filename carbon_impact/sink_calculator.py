# -*- coding: utf-8 -*-
"""
Sink Calculator Engine

Sequestration figures for vegetation carbon sinks.

New sinks take a per-hectare annual rate:

    daily = areaCovered * rate / 365
    total = areaCovered * rate * timeframe

Existing sinks take a whole-sink annual rate, so the daily figure does not
scale with area. Under formula version ``v1`` the total still does:

    daily = rate / 365
    total = areaCovered * rate * timeframe      (v1)
    total = rate * timeframe                    (v2)

In permissive mode (the default) inputs are not validated: a non-numeric
area or rate becomes NaN and flows through to the record. With
``strict_validation`` the shared positive-number guard runs first.

Example:
    >>> engine = SinkCalculatorEngine()
    >>> record = engine.create_sink({
    ...     "name": "North Grove", "vegetationType": "forest",
    ...     "areaCovered": 10, "carbonSequestrationRate": 3.65,
    ... })
    >>> round(record.daily_sequestration_rate, 4)
    0.1

Author: Carbon Impact Team
Date: October 2026
Status: Production Ready
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from carbon_impact.coercion import (
    as_text,
    coerce_number,
    guard_positive_inputs,
    parse_number,
)
from carbon_impact.config import CarbonImpactConfig, get_config
from carbon_impact.models import FormulaVersion, SinkKind, SinkRecord

logger = logging.getLogger(__name__)

SINK_REQUIRED_FIELDS = (
    "name",
    "vegetationType",
    "areaCovered",
    "carbonSequestrationRate",
)
SINK_NUMERIC_FIELDS = ("areaCovered", "carbonSequestrationRate")


class SinkCalculatorEngine:
    """Computes SinkRecords for new and pre-existing sinks."""

    def __init__(self, config: Optional[CarbonImpactConfig] = None) -> None:
        self._config = config or get_config()

    def create_sink(self, params: Mapping[str, Any]) -> SinkRecord:
        """Compute a newly planted sink."""
        return self._calculate(params, SinkKind.NEW)

    def create_existing_sink(self, params: Mapping[str, Any]) -> SinkRecord:
        """Compute a pre-existing sink whose rate covers the whole area."""
        return self._calculate(params, SinkKind.EXISTING)

    def _calculate(self, params: Mapping[str, Any], kind: SinkKind) -> SinkRecord:
        calculator = "sink" if kind is SinkKind.NEW else "existing_sink"

        if self._config.strict_validation:
            parsed = guard_positive_inputs(
                params, SINK_REQUIRED_FIELDS, SINK_NUMERIC_FIELDS, calculator,
            )
            area = parsed["areaCovered"]
            rate = parsed["carbonSequestrationRate"]
        else:
            area = parse_number(params.get("areaCovered"))
            rate = parse_number(params.get("carbonSequestrationRate"))

        # Zero falls back to one year along with missing values.
        timeframe = coerce_number(params.get("timeframe"), 1.0) or 1.0
        days = self._config.days_per_year
        version = FormulaVersion(self._config.formula_version)

        if kind is SinkKind.NEW:
            daily = area * rate / days
            total = area * rate * timeframe
        else:
            daily = rate / days
            if version is FormulaVersion.V2:
                total = rate * timeframe
            else:
                total = area * rate * timeframe

        record = SinkRecord.sealed(
            name=as_text(params.get("name")),
            vegetation_type=as_text(params.get("vegetationType")),
            area_covered=area,
            carbon_sequestration_rate=rate,
            daily_sequestration_rate=daily,
            total_sequestration=total,
            location=as_text(params.get("location")),
            additional_details=as_text(params.get("additionalDetails")),
            timeframe=timeframe,
            sink_kind=kind,
            formula_version=version,
        )
        logger.debug(
            "%s sink computed: daily=%s total=%s timeframe=%s",
            kind.value, daily, total, timeframe,
        )
        return record


__all__ = [
    "SINK_REQUIRED_FIELDS",
    "SINK_NUMERIC_FIELDS",
    "SinkCalculatorEngine",
]
