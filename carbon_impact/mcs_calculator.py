# -*- coding: utf-8 -*-
"""
MCS Economics Calculator Engine

Economics of a methane capture and storage retrofit. Captured methane
earns twice: carbon credits on its CO2 equivalent (GWP 25) and resale of
the gas itself.

    capturedMethane   = annualMethaneEmissions * captureEfficiency
    co2Equivalent     = capturedMethane * methaneGwp
    installationCost  = capturedMethane * installationCostPerTon
    totalRevenue      = co2Equivalent * creditPrice + capturedMethane * methanePrice

Cost and profit lines mirror the CCS calculator using ``totalRevenue``.

Author: Carbon Impact Team
Date: October 2026
Status: Production Ready
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from carbon_impact.coercion import as_text, coerce_number, guard_positive_inputs
from carbon_impact.config import CarbonImpactConfig, get_config
from carbon_impact.efficiency import MCS_CAPTURE_EFFICIENCY, lookup_efficiency
from carbon_impact.models import PROFIT_PROJECTION_YEARS, FormulaVersion, MCSRecord

logger = logging.getLogger(__name__)

MCS_REQUIRED_FIELDS = ("mineName", "annualMethaneEmissions", "mcsTechnology")
MCS_NUMERIC_FIELDS = ("annualMethaneEmissions",)


class MCSCalculatorEngine:
    """Computes MCSRecords."""

    def __init__(self, config: Optional[CarbonImpactConfig] = None) -> None:
        self._config = config or get_config()

    def calculate(self, params: Mapping[str, Any]) -> MCSRecord:
        cfg = self._config
        if cfg.strict_validation:
            guard_positive_inputs(
                params, MCS_REQUIRED_FIELDS, MCS_NUMERIC_FIELDS, calculator="mcs",
            )

        technology = params.get("mcsTechnology")
        efficiency, matched = lookup_efficiency(
            MCS_CAPTURE_EFFICIENCY, technology, cfg.default_capture_efficiency,
        )

        annual_methane = coerce_number(params.get("annualMethaneEmissions"), 0.0)
        cost_per_ton = coerce_number(
            params.get("installationCostPerTon"),
            cfg.mcs_default_installation_cost_per_ton,
        )
        maintenance = coerce_number(
            params.get("annualMaintenanceCost"),
            cfg.default_annual_maintenance_cost,
        )

        captured = annual_methane * efficiency
        co2e = captured * cfg.methane_gwp
        installation = captured * cost_per_ton
        credit_revenue = co2e * cfg.carbon_credit_price
        methane_revenue = captured * cfg.methane_market_price
        total_revenue = credit_revenue + methane_revenue

        first_year_cost = installation + maintenance
        first_year_net = total_revenue - first_year_cost
        annual_net = total_revenue - maintenance
        ten_year = first_year_net + annual_net * (PROFIT_PROJECTION_YEARS - 1)

        return MCSRecord.sealed(
            mine_name=as_text(params.get("mineName")),
            annual_methane_emissions=annual_methane,
            mine_size=as_text(params.get("mineSize")),
            mcs_technology=as_text(technology),
            installation_cost_per_ton=cost_per_ton,
            annual_maintenance_cost=maintenance,
            capture_efficiency=efficiency,
            efficiency_defaulted=not matched,
            captured_methane=captured,
            methane_gwp=cfg.methane_gwp,
            co2_equivalent=co2e,
            methane_market_price=cfg.methane_market_price,
            carbon_credit_price=cfg.carbon_credit_price,
            installation_cost=installation,
            maintenance_cost=maintenance,
            carbon_credit_revenue=credit_revenue,
            methane_revenue=methane_revenue,
            total_revenue=total_revenue,
            total_cost_for_first_year=first_year_cost,
            net_profit_for_first_year=first_year_net,
            annual_net_profit=annual_net,
            total_profit_for_ten_years=ten_year,
            formula_version=FormulaVersion(cfg.formula_version),
        )


__all__ = [
    "MCS_REQUIRED_FIELDS",
    "MCS_NUMERIC_FIELDS",
    "MCSCalculatorEngine",
]
