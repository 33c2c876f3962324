"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from rate_truth.api.middleware import RequestIDMiddleware, MetricsMiddleware
from rate_truth.api.v1 import analysis, irr, rates
from rate_truth.infrastructure.observability.logging import setup_logging
from rate_truth.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Rate Truth Engine",
        description="Exact APR verification for AI-extracted loan offers",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(analysis.router, prefix="/v1", tags=["analysis"])
    app.include_router(irr.router, prefix="/v1", tags=["irr"])
    app.include_router(rates.router, prefix="/v1", tags=["rates"])

    return app


app = create_app()
