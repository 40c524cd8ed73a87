"""
FastAPI application factory and API package.

Run with:
    uvicorn pipe_pricing.api:app --reload --port 8000

Or via main.py:
    python -m pipe_pricing --serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pipe_pricing.config import get_settings
from pipe_pricing.api.routes import health_router, variable_router
from pipe_pricing.api.formula_routes import coefficient_router, formula_router
from pipe_pricing.api.quote_routes import history_router, price_matrix_router, quote_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="Chimney Cap Pricing API",
        description="Formula-driven pricing for chimney caps, boxes, flashings and add-ons",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(formula_router, prefix="/api/formulas", tags=["Formulas"])
    application.include_router(coefficient_router, prefix="/api/coefficients", tags=["Formulas"])
    application.include_router(variable_router, prefix="/api/variables", tags=["Variables"])
    application.include_router(quote_router, prefix="/api/quote", tags=["Quote"])
    application.include_router(history_router, prefix="/api/history", tags=["History"])
    application.include_router(price_matrix_router, prefix="/api/price-matrix", tags=["Quote"])

    logger.info(f"Created {settings.app_name} API (storage: {settings.storage_backend})")
    return application


# Module-level instance for `uvicorn pipe_pricing.api:app`
app = create_app()
