"""FastAPI application entry point for the SmartFunds mission engine.

The application lifespan loads configuration, configures logging and
builds the mission engine once; routes reach it through
``app.state.mission_container``.

Run with:
    uvicorn smartfunds.api.main:app
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from smartfunds import __version__
from smartfunds.api.middleware import LoggingMiddleware
from smartfunds.api.routes.health import router as health_router
from smartfunds.api.routes.missions import (
    mission_request_validation_handler,
    router as missions_router,
)
from smartfunds.bootstrap.logging import configure_structlog
from smartfunds.bootstrap.mission_engine import build_mission_engine
from smartfunds.config.mission_config import MissionEngineConfig


def create_app(config: MissionEngineConfig | None = None) -> FastAPI:
    """Create the API application.

    Args:
        config: Mission engine configuration. When None, it is read from
            the environment (after loading a .env file) at startup.

    Returns:
        The FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        resolved = config
        if resolved is None:
            load_dotenv()
            resolved = MissionEngineConfig.from_environment()
        configure_structlog(resolved.environment)
        container = await build_mission_engine(resolved)
        app.state.mission_container = container
        try:
            yield
        finally:
            await container.close()

    app = FastAPI(
        title="SmartFunds Mission Engine API",
        description="Mission lifecycle state machine with an append-only audit ledger",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(LoggingMiddleware)
    app.add_exception_handler(RequestValidationError, mission_request_validation_handler)
    app.include_router(health_router)
    app.include_router(missions_router)
    return app


app = create_app()
