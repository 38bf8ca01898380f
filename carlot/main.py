from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from carlot import __version__
from carlot.core.db import create_tables, dispose_engine
from carlot.core.environment import auto_create_tables, validate_env
from carlot.core.logging import setup_logging
from carlot.exceptions import (
    APIError,
    ValidationError,
    api_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from carlot.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from carlot.routers import arb, auth, dropdowns, health, messages, metrics, tasks, users, vehicles
from carlot.store.notifications import change_feed

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # fail fast: a half-configured backend must not start serving
    validate_env()

    if auto_create_tables():
        await create_tables()
    app.state.change_feed = change_feed
    logger.info("carlot API started", extra={"version": __version__})

    try:
        yield
    finally:
        # teardown on shutdown
        await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(title="Carlot Inventory API", version=__version__, lifespan=lifespan)
    app.state.change_feed = change_feed
    app.state.limiter = limiter

    # Register exception handlers
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(APIError, api_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],   # Allows POST, GET, PATCH, OPTIONS, etc
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(metrics.router)
    app.include_router(auth.router)
    app.include_router(users.status_router)
    app.include_router(users.router)
    app.include_router(vehicles.router)
    app.include_router(arb.router)
    app.include_router(tasks.router)
    app.include_router(dropdowns.router)
    app.include_router(messages.router)
    return app


app = create_app()


@app.get("/", tags=["root"])
def root():
    return {"name": "carlot", "version": __version__}
