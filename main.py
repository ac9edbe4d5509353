"""
Shopify Bulk Inventory — Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog
from datetime import datetime

from config import settings
from exceptions import AppError

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Report whether the Shopify credentials are present
    Shutdown: Nothing to release (clients are per request)
    """
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug
    )

    if settings.shopify_configured:
        logger.info(
            "shopify_configured",
            api_version=settings.shopify_api_version
        )
    else:
        logger.warning("shopify_not_configured")

    yield

    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Shopify Bulk Inventory",
    description="Bulk export and import of product inventory quantities via Excel",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "https://admin.shopify.com",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Basic health status and whether Shopify is configured
    """
    return {
        "status": "healthy" if settings.shopify_configured else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
        "shopify_configured": settings.shopify_configured,
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Shopify Bulk Inventory API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "locations": "/api/locations",
            "products": "/api/products",
            "import": "/api/inventory/import",
            "import_rows": "/api/inventory/import/rows",
            "import_report": "/api/inventory/import/report",
            "export": "/api/inventory/export",
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """
    Application errors raised outside route bodies (e.g. in dependencies).
    """
    logger.warning(
        "app_error",
        path=request.url.path,
        code=exc.code,
        error=exc.message
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.utcnow().isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.locations import router as locations_router
from routes.inventory import router as inventory_router
from routes.products import router as products_router

app.include_router(locations_router, prefix="/api/locations", tags=["Locations"])
app.include_router(inventory_router, prefix="/api/inventory", tags=["Inventory"])
app.include_router(products_router, prefix="/api/products", tags=["Products"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
