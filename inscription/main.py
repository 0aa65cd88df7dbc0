from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from inscription.core.config import (
    APP_NAME,
    APP_VERSION,
    CORS_ORIGINS,
    DEBUG,
    ENVIRONMENT,
    LOG_FORMAT,
    LOG_LEVEL,
    validate_config,
)
from inscription.core.database import db_manager
from inscription.core.error_handlers import setup_exception_handlers
from inscription.core.init_db import init_database
from inscription.core.limits import limiter, rate_limit_handler
from inscription.core.logging_utils import (
    error_tracker,
    get_logger,
    log_business_event,
    setup_logging,
)
from inscription.core.middleware import setup_middleware
from inscription.registration.routers import disciplines, plans, registrations

setup_logging(LOG_LEVEL, LOG_FORMAT)
logger = get_logger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{APP_NAME} {APP_VERSION} starting ({ENVIRONMENT})")
    try:
        validate_config()
        await init_database()
    except Exception as e:
        logger.error(f"Startup aborted: {type(e).__name__} - {e}")
        error_tracker.track_error("STARTUP_ERROR", str(e), {"version": APP_VERSION})
        raise

    log_business_event(
        "application_started", "system", 0, {"environment": ENVIRONMENT}
    )
    yield

    await db_manager.close_connections()
    logger.info(f"{APP_NAME} stopped")


app = FastAPI(
    title=APP_NAME,
    description="Sports club registration: members, disciplines and subscription plans",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Idempotency-Key", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

setup_exception_handlers(app)
setup_middleware(app, {"slow_request_threshold": 2.0})

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

for module in (disciplines, plans, registrations):
    app.include_router(module.router, prefix=API_PREFIX)


@app.get("/health", tags=["System"])
async def health_check():
    """Service status; ``degraded`` when the database does not answer"""
    database_connected = await db_manager.is_connected()
    return {
        "status": "healthy" if database_connected else "degraded",
        "version": APP_VERSION,
        "environment": ENVIRONMENT,
        "database_connected": database_connected,
        "errors": error_tracker.get_stats()["total_errors"],
    }
