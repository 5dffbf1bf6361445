# -*- coding: utf-8 -*-
"""
CCS Economics Calculator Engine

First-year and ten-year economics of retrofitting a carbon capture and
storage unit onto an emitting site.

Formulas:
    capturedCO2              = annualEmissions * captureEfficiency
    installationCost         = capturedCO2 * installationCostPerTon
    carbonCreditRevenue      = capturedCO2 * carbonCreditPrice
    totalCostForFirstYear    = installationCost + annualMaintenanceCost
    netProfitForFirstYear    = carbonCreditRevenue - totalCostForFirstYear
    annualNetProfit          = carbonCreditRevenue - annualMaintenanceCost
    totalProfitForTenYears   = netProfitForFirstYear + annualNetProfit * 9

An unrecognized technology is not an error: the configured default
efficiency applies and the record is flagged ``efficiency_defaulted``.

Author: Carbon Impact Team
Date: October 2026
Status: Production Ready
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from carbon_impact.coercion import as_text, coerce_number, guard_positive_inputs
from carbon_impact.config import CarbonImpactConfig, get_config
from carbon_impact.efficiency import CCS_CAPTURE_EFFICIENCY, lookup_efficiency
from carbon_impact.models import PROFIT_PROJECTION_YEARS, CCSRecord, FormulaVersion

logger = logging.getLogger(__name__)

CCS_REQUIRED_FIELDS = ("mineName", "annualEmissions", "ccsTechnology")
CCS_NUMERIC_FIELDS = ("annualEmissions",)


class CCSCalculatorEngine:
    """Computes CCSRecords."""

    def __init__(self, config: Optional[CarbonImpactConfig] = None) -> None:
        self._config = config or get_config()

    def calculate(self, params: Mapping[str, Any]) -> CCSRecord:
        cfg = self._config
        if cfg.strict_validation:
            guard_positive_inputs(
                params, CCS_REQUIRED_FIELDS, CCS_NUMERIC_FIELDS, calculator="ccs",
            )

        technology = params.get("ccsTechnology")
        efficiency, matched = lookup_efficiency(
            CCS_CAPTURE_EFFICIENCY, technology, cfg.default_capture_efficiency,
        )

        annual_emissions = coerce_number(params.get("annualEmissions"), 0.0)
        cost_per_ton = coerce_number(
            params.get("installationCostPerTon"),
            cfg.ccs_default_installation_cost_per_ton,
        )
        maintenance = coerce_number(
            params.get("annualMaintenanceCost"),
            cfg.default_annual_maintenance_cost,
        )
        credit_price = cfg.carbon_credit_price

        captured = annual_emissions * efficiency
        installation = captured * cost_per_ton
        credit_revenue = captured * credit_price
        first_year_cost = installation + maintenance
        first_year_revenue = credit_revenue
        first_year_net = first_year_revenue - first_year_cost
        annual_net = credit_revenue - maintenance
        ten_year = first_year_net + annual_net * (PROFIT_PROJECTION_YEARS - 1)

        return CCSRecord.sealed(
            mine_name=as_text(params.get("mineName")),
            annual_emissions=annual_emissions,
            mine_size=as_text(params.get("mineSize")),
            ccs_technology=as_text(technology),
            installation_cost_per_ton=cost_per_ton,
            annual_maintenance_cost=maintenance,
            capture_efficiency=efficiency,
            efficiency_defaulted=not matched,
            captured_co2=captured,
            installation_cost=installation,
            maintenance_cost=maintenance,
            carbon_credit_price=credit_price,
            carbon_credit_revenue=credit_revenue,
            total_cost_for_first_year=first_year_cost,
            total_revenue_for_first_year=first_year_revenue,
            net_profit_for_first_year=first_year_net,
            annual_net_profit=annual_net,
            total_profit_for_ten_years=ten_year,
            formula_version=FormulaVersion(cfg.formula_version),
        )


__all__ = [
    "CCS_REQUIRED_FIELDS",
    "CCS_NUMERIC_FIELDS",
    "CCSCalculatorEngine",
]
