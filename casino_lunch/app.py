"""
Casino Lunch backend - application entry point
Lunch reservation service for the employee cafeteria

Main modules:
- email/password authentication and employee profiles
- selection calendar with the 48 hour and weekend rules
- pending selection and batch confirmation
- confirmed reservations: cancel, period cancel, menu change
- business action audit log

Stack: FastAPI + DuckDB + JWT
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .config.settings import Settings, settings as default_settings
from .core.database import DatabaseManager, db_manager, path_from_url
from .core.error_handler import (
    application_error_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .core.exceptions import BaseApplicationError
from .core.logging_config import configure_logging
from .core.security import SecurityManager
from .gateways import DuckDBPersistenceGateway, LocalIdentityGateway
from .services import WorkspaceRegistry

logger = logging.getLogger(__name__)


def create_app(config: Settings = None, db: DatabaseManager = None) -> FastAPI:
    """Create the FastAPI application"""
    config = config or default_settings
    if db is None and config is not default_settings:
        db = DatabaseManager(path_from_url(config.database_url))
    db = db or db_manager
    security = SecurityManager(
        config.jwt_secret_key, config.jwt_algorithm, config.jwt_expire_hours
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(config.log_level)
        try:
            db.init_database()
            logger.info("Database initialized at %s", db.db_path)
        except Exception as e:
            # Keep serving; the connection is retried lazily on first use
            logger.error("Database initialization failed: %s", e)

        yield

        db.close()

    app = FastAPI(
        title=config.api_title,
        version=config.api_version,
        description="Casino lunch reservation API",
        debug=config.debug,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseApplicationError, application_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.state.settings = config
    app.state.db = db
    app.state.registry = WorkspaceRegistry(
        DuckDBPersistenceGateway(db),
        lambda: LocalIdentityGateway(db, security),
        security,
    )

    app.include_router(api_router, prefix=config.api_prefix)

    @app.get("/health")
    async def health_check():
        try:
            db.execute_one("SELECT 1")
            return {
                "status": "healthy",
                "version": config.api_version,
                "database": "connected"
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "version": config.api_version,
                "database": f"error: {str(e)}"
            }

    @app.get("/")
    async def root():
        return {
            "name": config.api_title,
            "version": config.api_version,
            "description": "Casino lunch reservation API"
        }

    return app


app = create_app()
