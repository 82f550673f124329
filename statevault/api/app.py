"""FastAPI application for statevault."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import dataclasses
import logging

from statevault.config import StatevaultConfig
from statevault.backup import BackupManager, BackupStore, RetentionSweeper, TempStore
from .config import Settings, settings as default_settings
from .exceptions import register_exception_handlers
from .responses import EnvelopeJSONResponse
from .middleware import BodySizeLimitMiddleware, SecurityHeadersMiddleware
from .routers import backup, frontend

# Configure statevault logger with app-managed pattern
# This ensures INFO logs are visible regardless of uvicorn's logging config
import sys
import os

statevault_logger = logging.getLogger("statevault")
statevault_logger.setLevel(logging.INFO)

# App-managed pattern: attach our own handler and don't propagate
statevault_logger.propagate = False

# Clear any existing handlers to avoid duplicates
statevault_logger.handlers.clear()

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)

formatter = logging.Formatter(
    '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_handler.setFormatter(formatter)
statevault_logger.addHandler(console_handler)

# Optional: Allow disabling app-managed logging via env var for production
if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
    statevault_logger.handlers.clear()
    statevault_logger.propagate = True  # Fall back to server-managed pattern

logger = logging.getLogger(__name__)


def build_config(settings: Settings) -> StatevaultConfig:
    """Start from the environment config and override with API settings."""
    config = StatevaultConfig.from_env()

    storage_config = dataclasses.replace(
        config.storage,
        temp_dir=settings.temp_dir,
        backup_dir=settings.backup_dir,
    )
    sweeper_config = dataclasses.replace(
        config.sweeper,
        interval_seconds=settings.cleanup_interval_seconds,
        max_age_seconds=settings.temp_max_age_seconds,
    )
    return dataclasses.replace(config, storage=storage_config, sweeper=sweeper_config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage store and sweeper lifecycle."""
    config = build_config(app.state.settings)
    logger.info(
        f"Initializing stores (temp={config.storage.temp_dir}, backups={config.storage.backup_dir})"
    )

    try:
        temp_store = TempStore(config.storage.temp_dir)
        backup_store = BackupStore(config.storage.backup_dir)
    except OSError as e:
        logger.error(f"Error creating directories: {e}")
        raise

    app.state.backup_manager = BackupManager(temp_store, backup_store)
    app.state.sweeper = RetentionSweeper(
        temp_store,
        interval=config.sweeper.interval_seconds,
        max_age=config.sweeper.max_age_seconds,
    )
    app.state.sweeper.start()

    yield

    # Cleanup
    logger.info("Shutting down statevault...")
    await app.state.sweeper.stop()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or default_settings

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        default_response_class=EnvelopeJSONResponse,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )
    app.state.settings = settings
    app.state.api_prefix = settings.api_prefix
    app.state.dist_dir = settings.dist_dir

    # Middleware added last runs first
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_size=settings.max_body_bytes)

    register_exception_handlers(app)

    # Include routers (order matters - the SPA catch-all goes last)
    app.include_router(backup.router, prefix=settings.api_prefix)
    app.include_router(frontend.router)

    logger.info(f"Server configured on port {settings.port}")
    return app


# Create default app instance
app = create_app()
