# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from carbon_impact.config import CarbonImpactConfig, reset_config
from carbon_impact.main import create_app
from carbon_impact.provenance import ProvenanceTracker, reset_provenance_tracker
from carbon_impact.setup import CarbonImpactService, reset_service
from carbon_impact.store import InMemoryCalculationStore


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Every test starts from fresh config, provenance and service singletons."""
    reset_config()
    reset_provenance_tracker()
    reset_service()
    yield
    reset_service()
    reset_provenance_tracker()
    reset_config()


@pytest.fixture
def config() -> CarbonImpactConfig:
    return CarbonImpactConfig()


@pytest.fixture
def strict_config() -> CarbonImpactConfig:
    return CarbonImpactConfig(strict_validation=True)


@pytest.fixture
def v2_config() -> CarbonImpactConfig:
    return CarbonImpactConfig(formula_version="v2")


@pytest.fixture
def store() -> InMemoryCalculationStore:
    return InMemoryCalculationStore()


@pytest.fixture
def service(config, store) -> CarbonImpactService:
    return CarbonImpactService(config=config, store=store, provenance=ProvenanceTracker())


@pytest.fixture
def client(config, store):
    app = create_app(config, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sink_payload() -> Dict[str, Any]:
    return {
        "name": "North Grove",
        "vegetationType": "Tropical forest",
        "areaCovered": 10,
        "carbonSequestrationRate": 3.65,
        "location": "Jharkhand",
        "additionalDetails": "Planted 2024",
    }


@pytest.fixture
def solar_payload() -> Dict[str, Any]:
    return {
        "solutionName": "Plant A rooftop",
        "co2EmissionsPerDay": 1000,
        "selectedRenewable": "Solar",
        "desiredReductionPercentage": 50,
        "availableLand": 100,
    }


@pytest.fixture
def ccs_payload() -> Dict[str, Any]:
    return {
        "mineName": "Jharia",
        "annualEmissions": 1000,
        "mineSize": "Large",
        "ccsTechnology": "Pre-combustion",
    }


@pytest.fixture
def mcs_payload() -> Dict[str, Any]:
    return {
        "mineName": "Raniganj",
        "annualMethaneEmissions": 100,
        "mineSize": "Medium",
        "mcsTechnology": "Flaring",
    }
