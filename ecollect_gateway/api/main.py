"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from ecollect_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from ecollect_gateway.api.v1 import accounts, notes, sms_logs, chat
from ecollect_gateway.infrastructure.observability.logging import setup_logging
from ecollect_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="eCollect Gateway",
        description="Collections account aggregation, risk scoring and agent assistant",
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
        return {"status": "ok", "service": settings.service_name, "store": settings.store_backend}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(accounts.router, prefix="/v1", tags=["accounts"])
    app.include_router(notes.router, prefix="/v1", tags=["notes"])
    app.include_router(sms_logs.router, prefix="/v1", tags=["sms"])
    app.include_router(chat.router, prefix="/v1", tags=["assistant"])

    return app


app = create_app()
