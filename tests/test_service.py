"""Tests for the CarbonImpactService facade."""

import pytest
from prometheus_client import REGISTRY

from carbon_impact.config import CarbonImpactConfig
from carbon_impact.exceptions import NotFoundError, PersistenceError, ValidationError
from carbon_impact.metrics import MetricsCollector
from carbon_impact.models import COLLECTION_CCS, COLLECTION_RENEWABLE, COLLECTION_SINKS
from carbon_impact.provenance import ProvenanceTracker
from carbon_impact.setup import (
    CCS_SUCCESS_MESSAGE,
    EXISTING_SINK_CREATED_MESSAGE,
    MCS_SUCCESS_MESSAGE,
    SINK_CREATED_MESSAGE,
    CarbonImpactService,
    get_service,
    reset_service,
)
from carbon_impact.store import InMemoryCalculationStore


class BrokenStore(InMemoryCalculationStore):
    """Store whose writes always fail with a driver-level error."""

    def create(self, collection, record):
        raise RuntimeError("disk full")


class TestSinkOperations:

    def test_create_sink_response(self, service, store, sink_payload):
        response = service.create_sink(sink_payload)
        assert response["message"] == SINK_CREATED_MESSAGE
        data = response["data"]
        assert data["dailySequestrationRate"] == "0.10 tons of CO2 per hectare per day"
        assert data["totalSequestration"] == "36.50 tons of CO2 over 1 year(s)"
        assert data["sink"]["name"] == "North Grove"
        assert store.get(COLLECTION_SINKS, data["sink"]["id"]) is not None

    def test_create_existing_sink_response(self, service, sink_payload):
        sink_payload["timeframe"] = 3
        response = service.create_existing_sink(sink_payload)
        assert response["message"] == EXISTING_SINK_CREATED_MESSAGE
        assert response["data"]["totalSequestration"].endswith("over 3 year(s)")
        assert response["data"]["sink"]["sinkKind"] == "existing"


class TestRenewableOperation:

    def test_formatted_fields(self, service, solar_payload):
        response = service.calculate_renewable(solar_payload)
        assert response["implementationCost"] == "₹10,000,000.00"
        assert response["requiredUnits"] == 1250
        assert response["landRequired"] == pytest.approx(12.5)
        assert response["deploymentMode"] == "full"
        assert response["timeToAchieveNeutrality"] == "1 day"
        assert response["carbonCreditsSavedPerYear"] == "182500.00"
        assert response["costOfCarbonCreditsSavedPerYear"] == "₹54,750,000.00"
        assert response["selectedRenewable"] == "Solar"

    def test_assessment_persisted(self, service, store, solar_payload):
        response = service.calculate_renewable(solar_payload)
        stored = store.get(COLLECTION_RENEWABLE, response["id"])
        assert stored["provenanceHash"] == response["provenanceHash"]

    def test_rejection_counted_and_not_stored(self, service, store, solar_payload):
        solar_payload["selectedRenewable"] = "Geothermal"
        with pytest.raises(NotFoundError):
            service.calculate_renewable(solar_payload)
        del solar_payload["availableLand"]
        with pytest.raises(ValidationError):
            service.calculate_renewable(solar_payload)
        stats = service.get_stats()
        assert stats.failed_calculations == 2
        assert stats.total_calculations == 0
        assert store.count() == 0


class TestCaptureOperations:

    def test_ccs_response(self, service, ccs_payload):
        response = service.calculate_ccs(ccs_payload)
        assert response["message"] == CCS_SUCCESS_MESSAGE
        data = response["data"]
        assert data["captureEfficiency"] == "90.00%"
        assert data["capturedCO2"] == "900.00 tons"
        assert data["installationCost"] == "₹1,800,000.00"
        assert data["carbonCreditRevenue"] == "₹1,350,000.00"
        assert data["record"]["capturedCO2"] == pytest.approx(900)
        assert data["record"]["id"] == data["id"]

    def test_mcs_response(self, service, mcs_payload):
        response = service.calculate_mcs(mcs_payload)
        assert response["message"] == MCS_SUCCESS_MESSAGE
        data = response["data"]
        assert data["capturedMethane"] == "90.00 tons"
        assert data["co2Equivalent"] == "2250.00 tons"
        assert data["totalRevenue"] == "₹3,420,000.00"
        assert data["totalProfitForTenYears"] == "-₹66,070,000.00"

    def test_identical_inputs_give_identical_hashes(self, service, ccs_payload):
        first = service.calculate_ccs(ccs_payload)["data"]
        second = service.calculate_ccs(ccs_payload)["data"]
        assert first["id"] != second["id"]
        assert first["record"]["provenanceHash"] == second["record"]["provenanceHash"]


class TestPersistenceFailures:

    def test_store_error_wrapped(self, config, ccs_payload):
        service = CarbonImpactService(
            config=config, store=BrokenStore(), provenance=ProvenanceTracker(),
        )
        with pytest.raises(PersistenceError) as exc_info:
            service.calculate_ccs(ccs_payload)
        exc = exc_info.value
        assert exc.context["collection"] == COLLECTION_CCS
        assert exc.context["cause_type"] == "RuntimeError"
        assert exc.calculator == "ccs"
        assert service.provenance.entry_count == 0
        assert service.get_stats().failed_calculations == 1

    def test_health_reports_unavailable_store(self, config):
        class UnreadableStore(InMemoryCalculationStore):
            def count(self, collection=None):
                raise PersistenceError("read failed")

        service = CarbonImpactService(
            config=config, store=UnreadableStore(), provenance=ProvenanceTracker(),
        )
        health = service.health_check()
        assert health.status == "unhealthy"
        assert health.components["store"] == "unavailable"


class TestProvenanceAndStats:

    def test_one_chain_entry_per_record(self, service, sink_payload, ccs_payload, mcs_payload):
        service.create_sink(sink_payload)
        service.calculate_ccs(ccs_payload)
        service.calculate_mcs(mcs_payload)
        assert service.provenance.entry_count == 3
        assert service.provenance.verify_chain() is True

    def test_provenance_can_be_disabled(self, store, ccs_payload):
        service = CarbonImpactService(
            config=CarbonImpactConfig(enable_provenance=False),
            store=store, provenance=ProvenanceTracker(),
        )
        service.calculate_ccs(ccs_payload)
        assert service.provenance.entry_count == 0

    def test_stats(self, service, sink_payload, solar_payload):
        service.create_sink(sink_payload)
        service.calculate_renewable(solar_payload)
        stats = service.get_stats()
        assert stats.total_calculations == 2
        assert stats.by_calculator["sink"] == 1
        assert stats.by_calculator["renewable"] == 1
        assert stats.stored_records == 2
        assert stats.provenance_entries == 2

    def test_health(self, service):
        health = service.health_check()
        assert health.status == "healthy"
        assert health.service == "carbon-impact"
        assert health.components == {
            "provenance": "enabled", "metrics": "enabled", "store": "available",
        }


class TestUnexpectedFailures:

    def test_engine_error_counted_and_logged(self, service, ccs_payload, caplog, monkeypatch):
        def explode(params):
            raise ZeroDivisionError("division by zero")

        monkeypatch.setattr(service._ccs_engine, "calculate", explode)
        with caplog.at_level("ERROR", logger="carbon_impact.setup"):
            with pytest.raises(ZeroDivisionError):
                service.calculate_ccs(ccs_payload)
        assert service.get_stats().failed_calculations == 1
        assert service.get_stats().total_calculations == 0
        assert "ccs calculation failed" in caplog.text
        assert service.provenance.entry_count == 0


def _completed_ccs() -> float:
    return REGISTRY.get_sample_value(
        "gl_ci_calculations_total", {"calculator": "ccs", "status": "completed"},
    ) or 0.0


class TestMetricsToggle:

    def test_enabled_service_records(self, service, ccs_payload):
        before = _completed_ccs()
        service.calculate_ccs(ccs_payload)
        assert _completed_ccs() == before + 1

    def test_disabled_service_records_nothing(self, store, ccs_payload):
        service = CarbonImpactService(
            config=CarbonImpactConfig(enable_metrics=False),
            store=store, provenance=ProvenanceTracker(),
        )
        assert service.metrics.enabled is False
        before = _completed_ccs()
        service.calculate_ccs(ccs_payload)
        assert _completed_ccs() == before
        assert service.health_check().components["metrics"] == "disabled"

    def test_collector_flag(self):
        before = _completed_ccs()
        MetricsCollector(enabled=False).record_calculation("ccs", "completed")
        assert _completed_ccs() == before
        MetricsCollector(enabled=True).record_calculation("ccs", "completed")
        assert _completed_ccs() == before + 1


class TestProvenanceQueries:

    def test_log_with_filter_and_limit(self, service, sink_payload, ccs_payload):
        service.create_sink(sink_payload)
        first = service.calculate_ccs(ccs_payload)["data"]["id"]
        second = service.calculate_ccs(ccs_payload)["data"]["id"]

        log = service.get_provenance()
        assert log["valid"] is True
        assert log["count"] == 3

        recent = service.get_provenance(entity_type="ccs", limit=1)
        assert [e["entity_id"] for e in recent["entries"]] == [second]
        assert first != second

    def test_record_provenance(self, service, solar_payload):
        service.calculate_renewable(solar_payload)
        record_id = service.provenance.get_entries()[0].entity_id
        result = service.get_record_provenance("renewable", record_id)
        assert result["entityId"] == record_id
        assert len(result["entries"]) == 1
        assert result["entries"][0]["metadata"]["provenance_hash"]

    def test_unknown_record_not_found(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.get_record_provenance("ccs", "missing")
        assert exc_info.value.context["key"] == "ccs:missing"

class TestSingleton:

    def test_get_service_is_cached(self):
        assert get_service() is get_service()

    def test_reset_service(self):
        first = get_service()
        reset_service()
        assert get_service() is not first
