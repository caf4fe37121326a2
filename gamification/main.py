"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gamification.config import get_settings
from gamification.routers import health, missions, progression
from gamification.utils.exceptions import (
    InvariantViolationError,
    LockTimeoutError,
    PersistenceError,
)
from gamification.version import APP_VERSION

# Create logs directory if it doesn't exist
logs_dir = Path("logs")
logs_dir.mkdir(exist_ok=True)

log_file = logs_dir / "gamification.log"
sql_log_file = logs_dir / "gamification_sql.log"

# General logs (1MB max size, keep 5 backup files)
rotating_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

# SQL logs (1MB max size, keep 5 backup files)
sql_rotating_handler = RotatingFileHandler(sql_log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
sql_rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

# Force=True overrides any existing configuration (e.g., from uvicorn)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        rotating_handler,
    ],
    force=True,
)

logger = logging.getLogger(__name__)

uvicorn_access_logger = logging.getLogger("uvicorn.access")
uvicorn_access_logger.setLevel(logging.INFO)
if rotating_handler not in uvicorn_access_logger.handlers:
    uvicorn_access_logger.addHandler(rotating_handler)

# SQLAlchemy engine logs go to their own file only
sqlalchemy_logger = logging.getLogger("sqlalchemy.engine.Engine")
sqlalchemy_logger.handlers.clear()
sqlalchemy_logger.addHandler(sql_rotating_handler)
sqlalchemy_logger.setLevel(logging.INFO)
sqlalchemy_logger.propagate = False


class SQLTransactionFilter(logging.Filter):
    def filter(self, record):
        if record.levelno == logging.INFO and hasattr(record, 'getMessage'):
            message = record.getMessage()

            if any(keyword in message for keyword in ['ROLLBACK', 'BEGIN', 'COMMIT', 'generated in']):
                return False

            # Collapse multi-line statements onto one line
            if any(kw in message for kw in ['SELECT', 'DELETE', 'INSERT', 'UPDATE']):
                record.msg = ' '.join(message.split())
                record.args = ()

        return True


sqlalchemy_logger.addFilter(SQLTransactionFilter())

settings = get_settings()


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """Manage application startup and shutdown tasks."""
    logger.info("=" * 60)
    logger.info("Gamification API Starting")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Database: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'SQLite'}")
    logger.info(f"Redis: {'Enabled' if settings.redis_url else 'In-Memory Fallback'}")
    logger.info(f"Engine timezone: {settings.engine_timezone}")
    logger.info("=" * 60)

    try:
        yield
    finally:
        logger.info("Gamification API Shutting Down... Goodbye!")


app = FastAPI(
    title="Gamification API",
    description="Daily missions, rewards and progression",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with readable messages."""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field_path = " -> ".join(str(x) for x in loc[1:]) if len(loc) > 1 else "unknown field"
        errors.append({
            "field": field_path,
            "message": error.get("msg", "Validation error"),
            "type": error.get("type", "unknown"),
        })

    return JSONResponse(status_code=422, content={"detail": "validation_error", "errors": errors})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(LockTimeoutError)
async def lock_timeout_handler(request: Request, exc: LockTimeoutError):
    logger.warning(f"Lock timeout on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "player_busy"}, headers={"Retry-After": "1"})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    return JSONResponse(status_code=503, content={"detail": "storage_unavailable"})


@app.exception_handler(InvariantViolationError)
async def invariant_violation_handler(request: Request, exc: InvariantViolationError):
    logger.error(f"Invariant violation on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "corrupt_player_state"})


app.include_router(missions.router, prefix="/missions", tags=["missions"])
app.include_router(progression.router, prefix="/progression", tags=["progression"])
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Gamification API",
        "version": APP_VERSION,
        "environment": settings.environment,
        "docs": "/docs",
    }
