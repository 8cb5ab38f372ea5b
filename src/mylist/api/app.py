"""FastAPI application factory for the list service.

Creates the application with:
- /api/mylist routers and health probes
- Lifecycle management for the database, Redis and the invalidation listener
- Structured logging with correlation IDs
- Uniform failure bodies for every error
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ExceptionHandler

from mylist.api.errors import (
    generic_exception_handler,
    http_exception_handler,
    mylist_exception_handler,
    request_validation_handler,
)
from mylist.api.middleware import CorrelationMiddleware
from mylist.api.routers import health, mylist
from mylist.cache.redis import close_redis, get_redis
from mylist.config import settings
from mylist.core.errors import MyListError
from mylist.lists.runtime import start_runtime, stop_runtime
from mylist.observability import configure_logging
from mylist.persistence.db import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup:
    - Configure structured logging
    - Create tables if missing
    - Connect to Redis and start the invalidation listener

    On shutdown:
    - Stop the invalidation listener
    - Close Redis and database connections
    """
    configure_logging(
        json_format=settings.env != "dev",
        level=settings.log_level,
    )

    logger.info(f"Starting {settings.app_name} ({settings.env}, instance {settings.instance_id})")
    await init_db()
    await get_redis()
    await start_runtime()
    logger.info(f"{settings.app_name} startup complete")

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await stop_runtime()
    await close_redis()
    await close_db()
    logger.info(f"{settings.app_name} shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="MyList",
        description="Personal saved-items list for the content catalog",
        version="1.0.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "user-id", "x-request-id", "x-correlation-id"],
    )

    app.add_exception_handler(MyListError, cast(ExceptionHandler, mylist_exception_handler))
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, request_validation_handler)
    )
    app.add_exception_handler(
        StarletteHTTPException, cast(ExceptionHandler, http_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    app.include_router(mylist.router)

    return app
