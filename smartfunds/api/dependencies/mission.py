"""Mission API dependencies.

The lifecycle engine is built once by the application lifespan and stored
on ``app.state.mission_container``; this dependency hands it to routes.
Tests replace it through ``app.dependency_overrides``.
"""

from fastapi import HTTPException, Request

from smartfunds.application.services.lifecycle_engine import LifecycleEngine


def get_lifecycle_engine(request: Request) -> LifecycleEngine:
    """Get the application's lifecycle engine.

    Raises:
        HTTPException: 503 if the application has not finished starting.
    """
    container = getattr(request.app.state, "mission_container", None)
    if container is None:
        raise HTTPException(status_code=503, detail="Mission engine not initialized")
    return container.engine
