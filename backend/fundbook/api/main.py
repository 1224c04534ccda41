"""
FastAPI application entry point.

API server for the Fundbook NAV and snapshot engine.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fundbook.core.config import settings
from fundbook.core.errors import FundbookError
from fundbook.core.logging import get_logger, setup_logging
from fundbook.core.database import close_db

# Setup logging
setup_logging()
logger = get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Fund bookkeeping - NAV, ownership and performance-fee snapshots",
    debug=settings.DEBUG,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FundbookError)
async def fundbook_error_handler(request: Request, exc: FundbookError) -> JSONResponse:
    """Render every fundbook error as {"error": {code, message, details}}."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.on_event("shutdown")
async def shutdown() -> None:
    """Run on application shutdown."""
    await close_db()


@app.get("/health")
@app.get("/api/v1/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


from fundbook.api.fund import router as fund_router
from fundbook.api.snapshots import router as snapshots_router, investors_router
from fundbook.api.assets import router as assets_router
from fundbook.api.reports import router as reports_router

app.include_router(fund_router, prefix="/api/v1", tags=["fund"])
app.include_router(snapshots_router, prefix="/api/v1/snapshots", tags=["snapshots"])
app.include_router(investors_router, prefix="/api/v1/investors", tags=["investors"])
app.include_router(assets_router, prefix="/api/v1/assets", tags=["assets"])
app.include_router(reports_router, prefix="/api/v1/reports", tags=["reports"])
