"""Tests for the SinkCalculatorEngine."""

import math

import pytest

from carbon_impact.coercion import MISSING_FIELDS_MESSAGE, NON_NUMERIC_MESSAGE
from carbon_impact.exceptions import ValidationError
from carbon_impact.models import SinkKind
from carbon_impact.sink_calculator import SinkCalculatorEngine


class TestCreateSink:
    """New sinks scale both daily and total figures with area."""

    def test_daily_and_total(self, config, sink_payload):
        record = SinkCalculatorEngine(config).create_sink(sink_payload)
        assert record.daily_sequestration_rate == pytest.approx(10 * 3.65 / 365)
        assert record.total_sequestration == pytest.approx(36.5)
        assert record.timeframe == 1.0
        assert record.sink_kind == SinkKind.NEW.value

    @pytest.mark.parametrize("area,rate,timeframe", [
        (1, 1, 1), (12.5, 4.2, 3), (250, 0.8, 10),
    ])
    def test_formulas_hold_for_positive_inputs(self, config, area, rate, timeframe):
        record = SinkCalculatorEngine(config).create_sink({
            "name": "s", "vegetationType": "v",
            "areaCovered": area, "carbonSequestrationRate": rate,
            "timeframe": timeframe,
        })
        assert record.daily_sequestration_rate == pytest.approx(area * rate / 365)
        assert record.total_sequestration == pytest.approx(area * rate * timeframe)
        assert record.daily_sequestration_rate >= 0
        assert record.total_sequestration >= 0

    @pytest.mark.parametrize("timeframe", [None, "", 0, "0", "abc"])
    def test_timeframe_defaults_to_one_year(self, config, sink_payload, timeframe):
        sink_payload["timeframe"] = timeframe
        record = SinkCalculatorEngine(config).create_sink(sink_payload)
        assert record.timeframe == 1.0

    def test_numeric_strings_accepted(self, config):
        record = SinkCalculatorEngine(config).create_sink({
            "name": "s", "vegetationType": "v",
            "areaCovered": "20", "carbonSequestrationRate": "2", "timeframe": "5",
        })
        assert record.total_sequestration == pytest.approx(200)

    def test_non_numeric_input_propagates_nan(self, config, sink_payload):
        sink_payload["areaCovered"] = "lots"
        record = SinkCalculatorEngine(config).create_sink(sink_payload)
        assert math.isnan(record.area_covered)
        assert math.isnan(record.daily_sequestration_rate)
        assert math.isnan(record.total_sequestration)
        document = record.to_document()
        assert document["areaCovered"] is None
        assert document["dailySequestrationRate"] is None

    def test_passthrough_fields_kept(self, config, sink_payload):
        record = SinkCalculatorEngine(config).create_sink(sink_payload)
        assert record.name == "North Grove"
        assert record.vegetation_type == "Tropical forest"
        assert record.location == "Jharkhand"
        assert record.additional_details == "Planted 2024"


class TestCreateExistingSink:
    """Existing sinks take a whole-sink rate; only the total scales with area."""

    PAYLOAD = {
        "name": "Old Mangrove", "vegetationType": "Mangrove",
        "areaCovered": 10, "carbonSequestrationRate": 365, "timeframe": 2,
    }

    def test_daily_ignores_area(self, config):
        record = SinkCalculatorEngine(config).create_existing_sink(self.PAYLOAD)
        assert record.daily_sequestration_rate == pytest.approx(1.0)
        assert record.sink_kind == SinkKind.EXISTING.value

    def test_v1_total_scales_with_area(self, config):
        record = SinkCalculatorEngine(config).create_existing_sink(self.PAYLOAD)
        assert record.total_sequestration == pytest.approx(10 * 365 * 2)
        assert record.formula_version == "v1"

    def test_v2_total_ignores_area(self, v2_config):
        record = SinkCalculatorEngine(v2_config).create_existing_sink(self.PAYLOAD)
        assert record.total_sequestration == pytest.approx(365 * 2)
        assert record.daily_sequestration_rate == pytest.approx(1.0)
        assert record.formula_version == "v2"

    def test_daily_independent_of_area(self, config):
        engine = SinkCalculatorEngine(config)
        small = engine.create_existing_sink({**self.PAYLOAD, "areaCovered": 1})
        large = engine.create_existing_sink({**self.PAYLOAD, "areaCovered": 1000})
        assert small.daily_sequestration_rate == large.daily_sequestration_rate
        assert large.total_sequestration > small.total_sequestration


class TestStrictValidation:

    def test_non_numeric_rejected(self, strict_config, sink_payload):
        sink_payload["areaCovered"] = "lots"
        with pytest.raises(ValidationError) as exc_info:
            SinkCalculatorEngine(strict_config).create_sink(sink_payload)
        assert exc_info.value.message == NON_NUMERIC_MESSAGE
        assert exc_info.value.calculator == "sink"

    def test_missing_name_rejected(self, strict_config, sink_payload):
        del sink_payload["name"]
        with pytest.raises(ValidationError) as exc_info:
            SinkCalculatorEngine(strict_config).create_existing_sink(sink_payload)
        assert exc_info.value.message == MISSING_FIELDS_MESSAGE
        assert exc_info.value.calculator == "existing_sink"

    def test_valid_payload_passes(self, strict_config, sink_payload):
        record = SinkCalculatorEngine(strict_config).create_sink(sink_payload)
        assert record.total_sequestration == pytest.approx(36.5)
