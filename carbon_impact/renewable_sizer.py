# -*- coding: utf-8 -*-
"""
Renewable Deployment Sizer Engine

Sizes a renewable deployment against a daily CO2 reduction target and
arbitrates it against the land actually available.

Algorithm:
    1. target = co2EmissionsPerDay * desiredReductionPercentage / 100
    2. requiredUnits = ceil(target / co2ReductionPerUnit)
       landRequired = requiredUnits * landRequirementPerUnit
    3. FULL: land suffices, every required unit is deployed.
    4. PARTIAL: deployableUnits = floor(availableLand / landPerUnit) > 0.
       FRACTIONAL: not one unit fits; reduction is prorated by area.
    5. timeToAchieveNeutrality = ceil(target / reductionPerDay), with the
       reduction clamped to ``min_reduction_per_day`` when it is not positive.
    6. Credits: one credit per ton, valued at the renewable credit price.

Quotients fed to ceil/floor are rounded to 9 decimals first, so binary
representation error does not add a spurious unit (500 / 0.4 is 1250,
not 1251).
A target or quotient that overflows to infinity raises ``ValidationError``
with reason ``non_finite`` rather than producing an unbounded sizing.

Author: Carbon Impact Team
Date: October 2026
Status: Production Ready
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from carbon_impact.coercion import as_text, guard_positive_inputs
from carbon_impact.config import CarbonImpactConfig, get_config
from carbon_impact.efficiency import get_renewable_profile
from carbon_impact.exceptions import ValidationError
from carbon_impact.models import DeploymentMode, FormulaVersion, RenewableAssessment

logger = logging.getLogger(__name__)

RENEWABLE_REQUIRED_FIELDS = (
    "solutionName",
    "co2EmissionsPerDay",
    "selectedRenewable",
    "desiredReductionPercentage",
    "availableLand",
)
RENEWABLE_NUMERIC_FIELDS = (
    "co2EmissionsPerDay",
    "desiredReductionPercentage",
    "availableLand",
)

_QUOTIENT_PRECISION = 9

NON_FINITE_MESSAGE = "Inputs are out of range for sizing a deployment."


def _require_finite(**values: float) -> None:
    """Raise ValidationError if any sizing figure overflowed to infinity."""
    overflowed = sorted(name for name, value in values.items() if not math.isfinite(value))
    if overflowed:
        raise ValidationError(
            NON_FINITE_MESSAGE,
            calculator="renewable",
            context={"reason": "non_finite"},
            invalid_fields={name: "not finite" for name in overflowed},
        )


def _quotient(numerator: float, denominator: float, name: str) -> float:
    quotient = numerator / denominator
    _require_finite(**{name: quotient})
    return round(quotient, _QUOTIENT_PRECISION)


def _ceil_div(numerator: float, denominator: float, name: str) -> int:
    return math.ceil(_quotient(numerator, denominator, name))


def _floor_div(numerator: float, denominator: float, name: str) -> int:
    return math.floor(_quotient(numerator, denominator, name))


class RenewableSizerEngine:
    """Computes RenewableAssessments.

    Validation always runs: missing, non-numeric and non-positive inputs
    raise ``ValidationError``, an unknown source raises ``NotFoundError``.
    """

    def __init__(self, config: Optional[CarbonImpactConfig] = None) -> None:
        self._config = config or get_config()

    def assess(self, params: Mapping[str, Any]) -> RenewableAssessment:
        parsed = guard_positive_inputs(
            params,
            RENEWABLE_REQUIRED_FIELDS,
            RENEWABLE_NUMERIC_FIELDS,
            calculator="renewable",
        )
        profile = get_renewable_profile(params.get("selectedRenewable"))

        emissions = parsed["co2EmissionsPerDay"]
        percentage = parsed["desiredReductionPercentage"]
        available_land = parsed["availableLand"]
        version = FormulaVersion(self._config.formula_version)

        target = emissions * percentage / 100
        _require_finite(targetCo2Reduction=target)
        required_units = _ceil_div(
            target, profile.co2_reduction_per_unit, "requiredUnits",
        )
        land_required = round(
            required_units * profile.land_requirement_per_unit,
            _QUOTIENT_PRECISION,
        )

        if available_land >= land_required:
            mode = DeploymentMode.FULL
            deployable_units = required_units
            reduction_per_day = required_units * profile.co2_reduction_per_unit
            implementation_cost = required_units * profile.cost_per_unit
        else:
            deployable_units = _floor_div(
                available_land, profile.land_requirement_per_unit, "deployableUnits",
            )
            reduction_per_day = deployable_units * profile.co2_reduction_per_unit
            implementation_cost = deployable_units * profile.cost_per_unit
            if reduction_per_day > 0:
                mode = DeploymentMode.PARTIAL
            else:
                mode = DeploymentMode.FRACTIONAL
                reduction_per_day = available_land * profile.reduction_per_hectare
                if version is FormulaVersion.V2:
                    fraction = available_land / profile.land_requirement_per_unit
                    implementation_cost = fraction * profile.cost_per_unit

        if reduction_per_day <= 0:
            reduction_per_day = self._config.min_reduction_per_day

        days_to_neutrality = _ceil_div(
            target, reduction_per_day, "timeToAchieveNeutrality",
        )

        credit_price = self._config.renewable_carbon_credit_price
        credits_per_day = reduction_per_day
        credits_per_year = credits_per_day * self._config.days_per_year
        credit_value_per_year = credits_per_year * credit_price
        _require_finite(
            implementationCost=implementation_cost,
            costOfCarbonCreditsSavedPerYear=credit_value_per_year,
        )

        assessment = RenewableAssessment.sealed(
            solution_name=as_text(params.get("solutionName")),
            selected_renewable=profile.source,
            co2_emissions_per_day=emissions,
            desired_reduction_percentage=percentage,
            available_land=available_land,
            target_co2_reduction=target,
            required_units=required_units,
            land_required=land_required,
            deployable_units=deployable_units,
            deployment_mode=mode,
            total_reduction_per_day=reduction_per_day,
            time_to_achieve_neutrality=days_to_neutrality,
            implementation_cost=implementation_cost,
            carbon_credit_price=credit_price,
            carbon_credits_saved_per_day=credits_per_day,
            carbon_credits_saved_per_year=credits_per_year,
            cost_of_carbon_credits_saved_per_year=credit_value_per_year,
            formula_version=version,
        )
        logger.debug(
            "Renewable sizing %s: mode=%s required=%d deployable=%d days=%d",
            profile.source.value, mode.value, required_units,
            deployable_units, days_to_neutrality,
        )
        return assessment


__all__ = [
    "RENEWABLE_REQUIRED_FIELDS",
    "RENEWABLE_NUMERIC_FIELDS",
    "NON_FINITE_MESSAGE",
    "RenewableSizerEngine",
]
