"""
FastAPI Application Factory

Creates and configures the report API application.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from northwind_analytics.config import get_settings
from northwind_analytics.data.loader import load_snapshot_from_directory
from northwind_analytics.errors import (
    NorthwindAnalyticsError,
    SchemaMismatchError,
    TypeMismatchError,
    UnknownReportError,
)
from northwind_analytics.reports import ReportRunner
from northwind_analytics.serving.registry import SnapshotRegistry
from .routes import health_router, reports_router

logger = structlog.get_logger(__name__)

ERROR_STATUS = {
    UnknownReportError: 404,
    SchemaMismatchError: 422,
    TypeMismatchError: 422,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the default snapshot from REPORTS_DATA_PATH when configured."""
    settings = get_settings()
    data_path = settings.reports.data_path
    if data_path and not len(app.state.registry):
        snapshot = load_snapshot_from_directory(
            data_path,
            snapshot_id=settings.reports.default_snapshot_id,
        )
        app.state.registry.register(snapshot, make_default=True)
    logger.info("Report API started", snapshots=app.state.registry.ids())
    yield
    logger.info("Shutting down...")


async def analytics_error_handler(request: Request, exc: NorthwindAnalyticsError) -> JSONResponse:
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        500,
    )
    logger.warning(
        "Request failed",
        path=request.url.path,
        error=exc.code,
        message=exc.message,
    )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def create_api_app(
    registry: Optional[SnapshotRegistry] = None,
    runner: Optional[ReportRunner] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.
    
    Args:
        registry: Snapshot registry to serve (a new, empty one by default)
        runner: Report runner (configured from settings by default)
    
    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()
    app = FastAPI(
        title="Northwind Analytics API",
        description="Business reports over the Northwind Traders dataset",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )
    if registry is None:
        registry = SnapshotRegistry(settings.reports.default_snapshot_id)
    app.state.registry = registry
    app.state.runner = runner or ReportRunner()
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    
    app.add_exception_handler(NorthwindAnalyticsError, analytics_error_handler)
    
    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])
    
    return app
