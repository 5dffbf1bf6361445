# -*- coding: utf-8 -*-
"""
Carbon Impact API Routes

REST endpoints over the CarbonImpactService facade:

    POST /sinks            New vegetation sink              201
    POST /existing-sinks   Pre-existing vegetation sink     201
    POST /renewable        Renewable deployment sizing      200
    POST /ccs              Carbon capture economics         201
    POST /mcs              Methane capture economics        201
    GET  /health           Service health                   200
    GET  /stats            Calculation counters             200
    GET  /provenance       Provenance log and verification  200
    GET  /provenance/{entity_type}/{entity_id}
                           Entries for one record           200

Request bodies are flat JSON objects with camelCase keys. Engine errors
map to JSON bodies by status: 400 and 404 return ``{"error": ...}``,
500 returns ``{"message": "Server error", "error": ...}``.

Author: Carbon Impact Team
Date: October 2026
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from carbon_impact.exceptions import CarbonImpactError
from carbon_impact.setup import (
    CarbonImpactService,
    HealthResponse,
    StatsResponse,
    get_service,
)

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"


def _service(request: Request) -> CarbonImpactService:
    service = getattr(request.app.state, "carbon_impact_service", None)
    return service if service is not None else get_service()


def error_response(exc: CarbonImpactError) -> JSONResponse:
    """Render a CarbonImpactError with its mapped status code."""
    if exc.status_code >= 500:
        content = {"message": SERVER_ERROR_MESSAGE, "error": exc.message}
    else:
        content = {"error": exc.message}
    return JSONResponse(status_code=exc.status_code, content=content)


def _dispatch(
    operation: Callable[[Dict[str, Any]], Dict[str, Any]],
    payload: Optional[Dict[str, Any]],
    success_status: int,
) -> JSONResponse:
    try:
        result = operation(payload or {})
    except CarbonImpactError as exc:
        if exc.status_code >= 500:
            logger.error("Request failed: %s", exc, exc_info=True)
        return error_response(exc)
    return JSONResponse(status_code=success_status, content=result)


def create_router() -> APIRouter:
    """Build the carbon impact APIRouter."""
    router = APIRouter(tags=["Carbon Impact"])

    @router.post(
        "/sinks",
        status_code=status.HTTP_201_CREATED,
        summary="Create a new vegetation carbon sink",
    )
    def create_sink(
        payload: Optional[Dict[str, Any]] = Body(default=None),
        service: CarbonImpactService = Depends(_service),
    ) -> JSONResponse:
        return _dispatch(service.create_sink, payload, status.HTTP_201_CREATED)

    @router.post(
        "/existing-sinks",
        status_code=status.HTTP_201_CREATED,
        summary="Register a pre-existing vegetation carbon sink",
    )
    def create_existing_sink(
        payload: Optional[Dict[str, Any]] = Body(default=None),
        service: CarbonImpactService = Depends(_service),
    ) -> JSONResponse:
        return _dispatch(
            service.create_existing_sink, payload, status.HTTP_201_CREATED,
        )

    @router.post(
        "/renewable",
        status_code=status.HTTP_200_OK,
        summary="Size a renewable deployment against a reduction target",
        responses={
            400: {"description": "Missing, non-numeric or non-positive input"},
            404: {"description": "Unknown renewable source"},
        },
    )
    def calculate_renewable(
        payload: Optional[Dict[str, Any]] = Body(default=None),
        service: CarbonImpactService = Depends(_service),
    ) -> JSONResponse:
        return _dispatch(service.calculate_renewable, payload, status.HTTP_200_OK)

    @router.post(
        "/ccs",
        status_code=status.HTTP_201_CREATED,
        summary="Carbon capture and storage retrofit economics",
    )
    def calculate_ccs(
        payload: Optional[Dict[str, Any]] = Body(default=None),
        service: CarbonImpactService = Depends(_service),
    ) -> JSONResponse:
        return _dispatch(service.calculate_ccs, payload, status.HTTP_201_CREATED)

    @router.post(
        "/mcs",
        status_code=status.HTTP_201_CREATED,
        summary="Methane capture and storage retrofit economics",
    )
    def calculate_mcs(
        payload: Optional[Dict[str, Any]] = Body(default=None),
        service: CarbonImpactService = Depends(_service),
    ) -> JSONResponse:
        return _dispatch(service.calculate_mcs, payload, status.HTTP_201_CREATED)

    @router.get("/health", response_model=HealthResponse, tags=["Health"])
    def health(service: CarbonImpactService = Depends(_service)) -> HealthResponse:
        return service.health_check()

    @router.get("/stats", response_model=StatsResponse)
    def stats(service: CarbonImpactService = Depends(_service)) -> StatsResponse:
        return service.get_stats()

    @router.get("/provenance", summary="Provenance log with chain verification")
    def provenance_log(
        entity_type: Optional[str] = Query(default=None, alias="entityType"),
        limit: Optional[int] = Query(default=None, ge=1),
        service: CarbonImpactService = Depends(_service),
    ) -> Dict[str, Any]:
        return service.get_provenance(entity_type=entity_type, limit=limit)

    @router.get(
        "/provenance/{entity_type}/{entity_id}",
        summary="Provenance entries for one stored record",
        responses={404: {"description": "No provenance for the record"}},
    )
    def record_provenance(
        entity_type: str,
        entity_id: str,
        service: CarbonImpactService = Depends(_service),
    ) -> JSONResponse:
        try:
            result = service.get_record_provenance(entity_type, entity_id)
        except CarbonImpactError as exc:
            return error_response(exc)
        return JSONResponse(status_code=status.HTTP_200_OK, content=result)

    return router


__all__ = ["create_router", "error_response", "SERVER_ERROR_MESSAGE"]
