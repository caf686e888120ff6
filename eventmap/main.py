"""
Event Map Service - FastAPI Backend
Geo-located events in named collections, with ordered curation
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from contextlib import asynccontextmanager
import logging
import time

from eventmap.config import get_settings
from eventmap.database import init_db, close_db, health_check as db_health_check
from eventmap.errors import EventMapError
from eventmap.logging_config import setup_logging
from eventmap.routers import collections, events
from eventmap.services import NominatimGeocoder, OSRMRouter
from eventmap.utils.metrics import get_metrics, get_content_type, record_http_request

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown"""
    setup_logging(settings)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"CORS Origins: {settings.cors_origins_list}")

    await init_db()
    app.state.geocoder = NominatimGeocoder.from_settings(settings)
    app.state.router = OSRMRouter.from_settings(settings)
    logger.info(f"Geocoder: {settings.geocoder_url}, router: {settings.router_url}")

    yield

    await app.state.geocoder.close()
    await app.state.router.close()
    await close_db()
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.app_name,
    description="Geo-located events organized into switchable collections",
    version=settings.app_version,
    lifespan=lifespan
)

# CORS middleware - MUST be added before exception handlers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def track_requests(request: Request, call_next):
    """Record request count and duration per route template"""
    start = time.time()
    response = await call_next(request)
    route = request.scope.get("route")
    endpoint = getattr(route, "path", "unmatched")
    record_http_request(request.method, endpoint, response.status_code, time.time() - start)
    return response


@app.exception_handler(EventMapError)
async def event_map_error_handler(request: Request, exc: EventMapError):
    """Engine errors carry their own status and payload"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Global exception handler to ensure proper error responses
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and return proper JSON response"""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": f"Internal server error: {str(exc)}"}
    )

# Include routers
app.include_router(collections.router, prefix="/api/collections", tags=["Collections"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint"""
    db = await db_health_check()
    return JSONResponse(
        status_code=200 if db["healthy"] else 503,
        content={
            "status": "healthy" if db["healthy"] else "degraded",
            "version": settings.app_version,
            "database": db
        }
    )


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(
        content=get_metrics(),
        media_type=get_content_type()
    )


def run():
    """Console entry point"""
    import uvicorn
    uvicorn.run(
        "eventmap.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )


if __name__ == "__main__":
    run()
