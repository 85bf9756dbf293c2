import logging
import sys
import time
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

import click
import uvicorn
from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import Base, SessionLocal, engine, safe_db_url
from app.core.decorator import DBException
from app.core.init import initialize_application
from app.core.limiter import custom_rate_limit_exceeded_handler, limiter
from app.core.schedular import shutdown_scheduler, start_scheduler
from app.models import *
from app.routers import routes

# ============================================================================
# Directory Setup
# ============================================================================
BASE_DIR = Path(__file__).parent
LOG_FILE = Path(settings.log_file)
if not LOG_FILE.is_absolute():
    LOG_FILE = BASE_DIR / LOG_FILE
LOG_FILE.parent.mkdir(parents=True, exist_ok=True)


# ============================================================================
# Logging Configuration
# ============================================================================
def setup_logging():
    """Configure logging for the application."""
    log_level = logging.DEBUG if settings.debug else logging.INFO
    log_format = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] %(message)s"

    handlers = [
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(
            LOG_FILE,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        ),
    ]

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )

    # Suppress verbose third-party logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    return logging.getLogger(__name__)


logger = setup_logging()


# ============================================================================
# Application Lifespan
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown."""
    logger.info("Starting application...")
    logger.info(f"Database: {safe_db_url}")

    scheduler = None
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("✓ Database tables ready")

        db = SessionLocal()
        try:
            initialize_application(db)
        finally:
            db.close()

        if settings.scheduler_enabled:
            scheduler = start_scheduler()

        logger.info("✓ Application startup completed successfully")

    except Exception as e:
        logger.error(f"✗ Failed during startup: {e}", exc_info=True)
        raise

    yield  # Application is running

    # Shutdown
    logger.info("Shutting down application...")
    shutdown_scheduler(scheduler)
    logger.info("✓ Application shutdown completed")


# ============================================================================
# FastAPI Application
# ============================================================================
app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    debug=settings.debug,
    lifespan=lifespan,
)

# ============================================================================
# Middleware Configuration
# ============================================================================
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.4f}"
    return response


# ============================================================================
# Exception Handlers
# ============================================================================
@app.exception_handler(DBException)
async def db_exception_handler(request: Request, exc: DBException):
    logger.error(f"Database exception: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "type": "database_error"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    details = []
    for error in exc.errors():
        details.append(
            {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "")),
                "type": error.get("type"),
            }
        )
    return JSONResponse(
        status_code=400,
        content={"error": "Validation error", "details": details},
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"SQLAlchemy error: {type(exc).__name__}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Database error occurred",
            "type": str(type(exc).__name__),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}", exc_info=exc
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded_handler)


# ============================================================================
# Health Check Endpoints
# ============================================================================
@app.get("/")
async def root():
    """Root endpoint with basic application info."""
    return {
        "app_name": settings.app_name,
        "version": settings.app_version,
        "status": "healthy",
        "environment": "production" if settings.production else "development",
    }


@app.get("/health")
@limiter.limit("10/minute")
async def health_check(request: Request):
    """Detailed health check endpoint."""
    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
        db_status = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "timestamp": time.time(),
        "environment": "production" if settings.production else "development",
        "database": db_status,
    }


# ============================================================================
# Routes
# ============================================================================
for router in routes:
    app.include_router(router)

logger.info(f"✓ Registered {len(routes)} routers")


# ============================================================================
# CLI Commands
# ============================================================================
@click.group()
def cli():
    """Training platform management CLI."""
    pass


def run_migrations(revision: str = "head"):
    alembic_cfg = Config(str(BASE_DIR / "alembic.ini"))
    try:
        command.upgrade(alembic_cfg, revision)
    except Exception as e:
        logger.error(f"Migration to {revision} failed: {e}", exc_info=True)
        raise click.ClickException(f"Migration failed: {e}")
    logger.info(f"Database migrated to {revision}")


def gunicorn_command(host: str, port: int, workers: int) -> list:
    return [
        "gunicorn",
        "main:app",
        "--worker-class",
        "uvicorn.workers.UvicornWorker",
        "--workers",
        str(workers),
        "--bind",
        f"{host}:{port}",
        "--access-logfile",
        "-",
        "--error-logfile",
        "-",
        "--log-level",
        settings.log_level,
        "--timeout",
        "120",
        "--graceful-timeout",
        "30",
    ]


@cli.command()
@click.option("--revision", default="head", help="Alembic revision to upgrade to")
def migrate(revision: str):
    """Apply database migrations."""
    run_migrations(revision)
    click.echo(f"Migrated to {revision}")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to run the server on")
@click.option("--reload", is_flag=True, help="Enable auto-reload (development only)")
def dev(host: str, port: int, reload: bool):
    """Run development server with Uvicorn."""
    logger.info(f"Starting development server on {host}:{port} (reload={reload})")
    uvicorn.run("main:app", host=host, port=port, reload=reload, log_level="debug")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to run the server on")
@click.option("--workers", default=4, help="Number of worker processes")
@click.option("--skip-migrations", is_flag=True, help="Start without migrating")
def prod(host: str, port: int, workers: int, skip_migrations: bool):
    """Migrate, then run the production server with Gunicorn."""
    import subprocess

    if not skip_migrations:
        run_migrations()

    logger.info(f"Starting Gunicorn on {host}:{port} with {workers} workers")
    try:
        subprocess.run(gunicorn_command(host, port, workers), check=True)
    except subprocess.CalledProcessError as e:
        logger.error(f"Gunicorn exited with {e.returncode}")
        raise click.ClickException(str(e))
    except FileNotFoundError:
        raise click.ClickException("Gunicorn not installed")


@cli.command()
def info():
    """Display application information."""
    click.echo(f"Application: {settings.app_name}")
    click.echo(f"Version: {settings.app_version}")
    click.echo(f"Debug Mode: {settings.debug}")
    click.echo(f"Database: {safe_db_url}")
    click.echo(f"Scheduler Enabled: {settings.scheduler_enabled}")
    click.echo(f"Log File: {LOG_FILE}")


@cli.command("repair-linked-courses")
@click.option("--dry-run", is_flag=True, help="Report without changing anything")
def repair_linked_courses(dry_run: bool):
    """Remove orphaned linked-course cart entries and restore missing ones."""
    from app.services.linked_course import LinkedCourseRepairService

    db = SessionLocal()
    try:
        result = LinkedCourseRepairService(db).repair(dry_run=dry_run)
    finally:
        db.close()

    click.echo(f"Orphaned companions found: {result['orphaned_found']}")
    click.echo(f"Missing companions found: {result['missing_found']}")
    if not dry_run:
        click.echo(f"Removed: {result['orphaned_removed']}")
        click.echo(f"Unlinked: {result['orphaned_unlinked']}")
        click.echo(f"Restored: {result['companions_restored']}")


if __name__ == "__main__":
    cli()
