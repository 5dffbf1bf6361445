# -*- coding: utf-8 -*-
"""
Technology Efficiency Tables

Read-only lookup tables used by the calculators:

- CCS capture efficiency by capture technology
  (Post-combustion 85%, Pre-combustion 90%, Oxy-fuel combustion 95%)
- MCS capture efficiency by methane technology
  (Flaring 90%, CatalyticOxidation 85%, MembraneSeparation 92%)
- Renewable source profiles (CO2 avoided, land footprint, cost and
  deployment time multiplier per capacity unit)

Capture-efficiency lookups are permissive: an unknown technology resolves
to the configured default efficiency. Renewable lookups are strict: an
unknown source raises ``NotFoundError``.

Tables are exposed as ``types.MappingProxyType`` so they cannot be
mutated at runtime.

Example:
    >>> from carbon_impact.efficiency import CCS_CAPTURE_EFFICIENCY, lookup_efficiency
    >>> lookup_efficiency(CCS_CAPTURE_EFFICIENCY, "Pre-combustion", 0.85)
    (0.9, True)
    >>> lookup_efficiency(CCS_CAPTURE_EFFICIENCY, "Plasma", 0.85)
    (0.85, False)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Tuple

from carbon_impact.exceptions import NotFoundError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class CCSTechnology(str, Enum):
    """Carbon capture retrofit technologies."""

    POST_COMBUSTION = "Post-combustion"
    PRE_COMBUSTION = "Pre-combustion"
    OXY_FUEL_COMBUSTION = "Oxy-fuel combustion"


class MCSTechnology(str, Enum):
    """Methane capture retrofit technologies."""

    FLARING = "Flaring"
    CATALYTIC_OXIDATION = "CatalyticOxidation"
    MEMBRANE_SEPARATION = "MembraneSeparation"


class RenewableSource(str, Enum):
    """Renewable sources the deployment sizer can size."""

    SOLAR = "Solar"
    WIND = "Wind"
    HYDROPOWER = "Hydropower"
    HYDROGEN_ELECTRIC = "HydrogenElectric"


# ---------------------------------------------------------------------------
# Capture efficiency tables
# ---------------------------------------------------------------------------

#: CCS capture efficiency (fraction of annual CO2 captured).
CCS_CAPTURE_EFFICIENCY: Mapping[str, float] = MappingProxyType({
    CCSTechnology.POST_COMBUSTION.value: 0.85,
    CCSTechnology.PRE_COMBUSTION.value: 0.90,
    CCSTechnology.OXY_FUEL_COMBUSTION.value: 0.95,
})

#: MCS capture efficiency (fraction of annual methane captured).
MCS_CAPTURE_EFFICIENCY: Mapping[str, float] = MappingProxyType({
    MCSTechnology.FLARING.value: 0.90,
    MCSTechnology.CATALYTIC_OXIDATION.value: 0.85,
    MCSTechnology.MEMBRANE_SEPARATION.value: 0.92,
})


# ---------------------------------------------------------------------------
# Renewable profiles
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RenewableProfile:
    """Per-unit characteristics of a renewable source.

    Attributes:
        source: Renewable source this profile describes.
        co2_reduction_per_unit: Tons of CO2 avoided per unit per day.
        land_requirement_per_unit: Hectares occupied by one unit.
        cost_per_unit: Installed cost of one unit.
        time_multiplier: Relative deployment time of the technology.
    """

    source: RenewableSource
    co2_reduction_per_unit: float
    land_requirement_per_unit: float
    cost_per_unit: float
    time_multiplier: float

    @property
    def reduction_per_hectare(self) -> float:
        """CO2 avoided per hectare per day at full density."""
        return self.co2_reduction_per_unit / self.land_requirement_per_unit


RENEWABLE_PROFILES: Mapping[str, RenewableProfile] = MappingProxyType({
    RenewableSource.SOLAR.value: RenewableProfile(
        source=RenewableSource.SOLAR,
        co2_reduction_per_unit=0.4,
        land_requirement_per_unit=0.01,
        cost_per_unit=8_000.0,
        time_multiplier=1.5,
    ),
    RenewableSource.WIND.value: RenewableProfile(
        source=RenewableSource.WIND,
        co2_reduction_per_unit=1.5,
        land_requirement_per_unit=0.05,
        cost_per_unit=300_000.0,
        time_multiplier=2.0,
    ),
    RenewableSource.HYDROPOWER.value: RenewableProfile(
        source=RenewableSource.HYDROPOWER,
        co2_reduction_per_unit=5.0,
        land_requirement_per_unit=2.0,
        cost_per_unit=5_000_000.0,
        time_multiplier=3.0,
    ),
    RenewableSource.HYDROGEN_ELECTRIC.value: RenewableProfile(
        source=RenewableSource.HYDROGEN_ELECTRIC,
        co2_reduction_per_unit=3.0,
        land_requirement_per_unit=1.0,
        cost_per_unit=2_000_000.0,
        time_multiplier=2.5,
    ),
})

RENEWABLE_NOT_FOUND_MESSAGE = "Selected renewable energy source not found."


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def _normalize_key(name: Any) -> Any:
    if isinstance(name, Enum):
        return name.value
    return name


def lookup_efficiency(
    table: Mapping[str, float],
    technology: Any,
    default: float,
) -> Tuple[float, bool]:
    """Resolve a capture efficiency, falling back to ``default``.

    Matching is exact and case-sensitive on the technology name.

    Args:
        table: One of the capture efficiency tables.
        technology: Technology name or enum member from the request.
        default: Efficiency for unrecognized technologies.

    Returns:
        Tuple of (efficiency, matched) where ``matched`` is False when
        the default was applied.
    """
    key = _normalize_key(technology)
    if isinstance(key, str) and key in table:
        return table[key], True

    logger.warning(
        "Unrecognized capture technology %r, using default efficiency %.2f",
        technology, default,
    )
    return default, False


def get_renewable_profile(source: Any) -> RenewableProfile:
    """Return the profile for ``source``.

    Raises:
        NotFoundError: If the source is not one of the known renewables.
    """
    key = _normalize_key(source)
    if isinstance(key, str) and key in RENEWABLE_PROFILES:
        return RENEWABLE_PROFILES[key]
    raise NotFoundError(
        RENEWABLE_NOT_FOUND_MESSAGE,
        calculator="renewable",
        key=str(source),
        valid_keys=sorted(RENEWABLE_PROFILES),
    )


__all__ = [
    "CCSTechnology",
    "MCSTechnology",
    "RenewableSource",
    "CCS_CAPTURE_EFFICIENCY",
    "MCS_CAPTURE_EFFICIENCY",
    "RenewableProfile",
    "RENEWABLE_PROFILES",
    "RENEWABLE_NOT_FOUND_MESSAGE",
    "lookup_efficiency",
    "get_renewable_profile",
]
