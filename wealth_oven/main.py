"""
Main FastAPI Application
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from wealth_oven.api import admin, auctions, auth, bids, dashboard, funnels, leads, payments
from wealth_oven.core.config import get_settings
from wealth_oven.core.logging_config import setup_logging
from wealth_oven.core.metrics import render_metrics
from wealth_oven.infrastructure.cache import get_cache_manager
from wealth_oven.infrastructure.database import SessionLocal, engine, init_db
from wealth_oven.middleware.rate_limiter import limiter, rate_limit_handler
from wealth_oven.middleware.tracing import TracingMiddleware
from wealth_oven.services import ServiceError

settings = get_settings()

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    init_db()

    cache_manager = get_cache_manager()
    cache_health = cache_manager.health_check()
    if cache_health["status"] == "healthy":
        db = SessionLocal()
        try:
            warmed = cache_manager.auctions.warm_active(db)
        finally:
            db.close()
        logger.info(f"Cache ready ({warmed} active auctions warmed)")
    else:
        logger.warning(f"Cache {cache_health['status']}; reads go to the database")

    yield

    logger.info("Shutting down")
    engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Funnel marketplace: auctions, buy-now, leasing and lead capture",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# Rate limiter state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Service exceptions -> HTTP status from the exception class"""
    if exc.status_code >= 500:
        logger.error(f"Service error on {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


app.add_middleware(TracingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# INCLUDE ROUTERS
# ============================================================================
app.include_router(auth.router)
app.include_router(auctions.router)
app.include_router(bids.router)
app.include_router(funnels.router)
app.include_router(leads.router)
app.include_router(payments.router)
app.include_router(dashboard.router)
app.include_router(admin.router)


# ============================================================================
# HEALTH & METRICS
# ============================================================================
@app.get("/health", tags=["health"])
def health_check():
    db_status = "healthy"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": db_status,
        "cache": get_cache_manager().health_check()["status"],
    }


@app.get("/metrics", tags=["health"])
def metrics():
    payload, content_type = render_metrics()
    return Response(content=payload, media_type=content_type)


@app.get("/", tags=["root"])
def root():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
    }
