#!/usr/bin/env python3
"""
Carbon Impact Engine - FastAPI Entrypoint

Builds the HTTP application: CORS, the carbon impact routes, the
Prometheus ``/metrics`` endpoint and a catch-all 500 handler.

Run with::

    python -m carbon_impact.main
"""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from carbon_impact.api.router import SERVER_ERROR_MESSAGE
from carbon_impact.config import CarbonImpactConfig, get_config
from carbon_impact.models import VERSION
from carbon_impact.setup import configure_carbon_impact
from carbon_impact.store import CalculationStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_app(
    config: Optional[CarbonImpactConfig] = None,
    store: Optional[CalculationStore] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Configuration; the process-wide config when omitted.
        store: Calculation store override, mainly for tests.
    """
    config = config if config is not None else get_config()

    app = FastAPI(
        title="Carbon Impact Engine",
        description=(
            "Sequestration, capture economics and renewable deployment "
            "sizing for carbon-mitigation interventions"
        ),
        version=VERSION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    configure_carbon_impact(app, config=config, store=store)

    @app.get("/metrics", tags=["Observability"])
    def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": SERVER_ERROR_MESSAGE, "error": str(exc)},
        )

    return app


def main() -> None:
    config = get_config()
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    if not config.enabled:
        logger.warning("Carbon impact service is disabled; not starting")
        return

    logger.info(
        "Starting Carbon Impact Engine on %s:%d", config.server_host, config.server_port,
    )
    uvicorn.run(
        create_app(config),
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
