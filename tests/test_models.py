"""Tests for the record models and display formatting."""

import math

import pytest
from pydantic import ValidationError as PydanticValidationError

from carbon_impact.formatting import (
    format_currency,
    format_days,
    format_number,
    format_percent,
    format_timeframe,
    format_tons,
)
from carbon_impact.models import CCSRecord, SinkKind, SinkRecord
from carbon_impact.provenance import compute_hash


def _sink(**overrides):
    fields = dict(
        name="Grove", vegetation_type="Forest", area_covered=10.0,
        carbon_sequestration_rate=3.65, daily_sequestration_rate=0.1,
        total_sequestration=36.5, timeframe=1.0, sink_kind=SinkKind.NEW,
    )
    fields.update(overrides)
    return SinkRecord.sealed(**fields)


class TestImpactRecord:

    def test_records_are_frozen(self):
        record = _sink()
        with pytest.raises(PydanticValidationError):
            record.total_sequestration = 0.0

    def test_document_uses_camel_case(self):
        document = _sink().to_document()
        assert document["dailySequestrationRate"] == 0.1
        assert document["vegetationType"] == "Forest"
        assert document["sinkKind"] == "new"
        assert document["formulaVersion"] == "v1"
        assert "daily_sequestration_rate" not in document

    def test_sealed_hash_is_deterministic(self):
        assert _sink().provenance_hash == _sink().provenance_hash
        assert len(_sink().provenance_hash) == 64

    def test_sealed_hash_changes_with_inputs(self):
        assert _sink().provenance_hash != _sink(area_covered=11.0).provenance_hash

    def test_sealed_ignores_supplied_hash(self):
        assert _sink(provenance_hash="forged").provenance_hash == _sink().provenance_hash

    def test_non_finite_values_become_none(self):
        document = _sink(area_covered=float("nan"), total_sequestration=float("inf")).to_document()
        assert document["areaCovered"] is None
        assert document["totalSequestration"] is None

    def test_nan_and_null_hash_alike(self):
        assert compute_hash({"a": float("nan")}) == compute_hash({"a": None})

    def test_accepts_alias_on_construction(self):
        record = CCSRecord(
            annualEmissions=1, installationCostPerTon=1, annualMaintenanceCost=1,
            captureEfficiency=0.9, capturedCO2=0.9, installationCost=0.9,
            maintenanceCost=1, carbonCreditPrice=1500, carbonCreditRevenue=1350,
            totalCostForFirstYear=1.9, totalRevenueForFirstYear=1350,
            netProfitForFirstYear=1348.1, annualNetProfit=1349,
            totalProfitForTenYears=13489.1,
        )
        assert record.captured_co2 == 0.9


class TestFormatting:

    @pytest.mark.parametrize("value,expected", [
        (10_000_000, "₹10,000,000.00"),
        (1234.5, "₹1,234.50"),
        (0, "₹0.00"),
        (-88_950_000, "-₹88,950,000.00"),
        (float("nan"), "₹NaN"),
        (float("inf"), "₹Infinity"),
        (float("-inf"), "-₹Infinity"),
    ])
    def test_currency(self, value, expected):
        assert format_currency(value) == expected

    def test_currency_symbol_override(self):
        assert format_currency(5, "$") == "$5.00"

    def test_number(self):
        assert format_number(36.5) == "36.50"
        assert format_number(1 / 3, decimals=4) == "0.3333"
        assert format_number(math.nan) == "NaN"
        assert format_number(math.inf) == "Infinity"
        assert format_number(-math.inf) == "-Infinity"
        assert format_tons(math.inf) == "Infinity tons"

    def test_percent_and_tons(self):
        assert format_percent(0.85) == "85.00%"
        assert format_percent(math.inf) == "Infinity%"
        assert format_tons(900) == "900.00 tons"

    def test_days(self):
        assert format_days(1) == "1 day"
        assert format_days(4) == "4 days"

    def test_timeframe(self):
        assert format_timeframe(1.0) == "1"
        assert format_timeframe(2.5) == "2.5"
