"""Mission lifecycle API routes.

FastAPI router exposing the lifecycle engine over HTTP.

Status code mapping:
- 201: mission created
- 400: validation error, unknown to_status, or invalid transition
- 404: mission not found

Error bodies are RFC 7807 problem details carried in HTTPException.detail.
Malformed request bodies on these routes are also reported as 400 by
mission_request_validation_handler, which the application registers.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.responses import Response

from smartfunds.api.dependencies.mission import get_lifecycle_engine
from smartfunds.api.models.mission import (
    AuditLogEntryResponse,
    CreateMissionRequest,
    MissionErrorResponse,
    MissionResponse,
    TransitionMissionRequest,
)
from smartfunds.application.services.lifecycle_engine import LifecycleEngine
from smartfunds.domain.errors.mission import (
    InvalidTransitionError,
    MissionNotFoundError,
    MissionValidationError,
)
from smartfunds.domain.models.mission import MissionCreateRequest, MissionStatus

router = APIRouter(prefix="/v1/missions", tags=["missions"])

_ERROR_BASE = "urn:smartfunds:mission"


def _problem(
    request: Request,
    status: int,
    slug: str,
    title: str,
    detail: str,
    details: dict[str, Any] | None = None,
) -> HTTPException:
    body: dict[str, Any] = {
        "type": f"{_ERROR_BASE}:{slug}",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": str(request.url),
    }
    if details is not None:
        body["details"] = details
    return HTTPException(status_code=status, detail=body)


def _not_found(request: Request, error: MissionNotFoundError) -> HTTPException:
    return _problem(
        request,
        404,
        "not-found",
        "Mission Not Found",
        str(error),
        {"mission_id": error.mission_id},
    )


async def mission_request_validation_handler(
    request: Request, exc: RequestValidationError
) -> Response:
    """Report malformed mission request bodies as 400 problem details.

    Requests outside the mission routes keep FastAPI's default 422 response.
    """
    if not request.url.path.startswith(router.prefix):
        return await request_validation_exception_handler(request, exc)

    errors = jsonable_encoder(exc.errors())
    first_location = errors[0]["loc"] if errors else []
    field = str(first_location[-1]) if first_location else "body"
    problem = _problem(
        request,
        400,
        "invalid-request",
        "Invalid Request",
        f"{field} is required or has the wrong type",
        {"field": field, "errors": errors},
    )
    return JSONResponse(status_code=400, content={"detail": problem.detail})


@router.post(
    "",
    response_model=MissionResponse,
    status_code=201,
    responses={400: {"model": MissionErrorResponse, "description": "Invalid mission data"}},
    summary="Create a mission",
)
async def create_mission(
    request_data: CreateMissionRequest,
    request: Request,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
) -> MissionResponse:
    """Create a mission in INTAKE and record the creation in the audit ledger."""
    try:
        mission = await engine.create(
            MissionCreateRequest(
                offering_name=request_data.offering_name,
                asset_type=request_data.asset_type,
                target_raise=request_data.target_raise,
                jurisdiction=request_data.jurisdiction,
            ),
            actor=request_data.actor,
        )
    except MissionValidationError as e:
        raise _problem(
            request, 400, "invalid-mission", "Invalid Mission", str(e), {"field": e.field}
        ) from None
    return MissionResponse.from_domain(mission)


@router.get("", response_model=list[MissionResponse], summary="List missions")
async def list_missions(
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
) -> list[MissionResponse]:
    """List all missions in creation order."""
    return [MissionResponse.from_domain(m) for m in await engine.list()]


@router.get(
    "/{mission_id}",
    response_model=MissionResponse,
    responses={404: {"model": MissionErrorResponse, "description": "Mission not found"}},
    summary="Get a mission",
)
async def get_mission(
    mission_id: str,
    request: Request,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
) -> MissionResponse:
    """Get one mission by id."""
    mission = await engine.get(mission_id)
    if mission is None:
        raise _not_found(request, MissionNotFoundError(mission_id))
    return MissionResponse.from_domain(mission)


@router.post(
    "/{mission_id}/transition",
    response_model=MissionResponse,
    responses={
        400: {"model": MissionErrorResponse, "description": "Invalid transition"},
        404: {"model": MissionErrorResponse, "description": "Mission not found"},
    },
    summary="Transition a mission",
)
async def transition_mission(
    mission_id: str,
    request_data: TransitionMissionRequest,
    request: Request,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
) -> MissionResponse:
    """Move a mission to the next lifecycle status."""
    try:
        to_status = MissionStatus(request_data.to_status)
    except ValueError:
        raise _problem(
            request,
            400,
            "invalid-status",
            "Invalid Status",
            "Invalid to_status",
            {"to_status": request_data.to_status},
        ) from None

    try:
        mission = await engine.transition(
            mission_id=mission_id,
            to_status=to_status,
            actor=request_data.actor,
            metadata=request_data.metadata,
        )
    except InvalidTransitionError as e:
        raise _problem(
            request,
            400,
            "invalid-transition",
            "Invalid Transition",
            str(e),
            {"from": e.from_status.value, "to": e.to_status.value},
        ) from None
    except MissionNotFoundError as e:
        raise _not_found(request, e) from None
    except MissionValidationError as e:
        raise _problem(
            request,
            400,
            "invalid-transition-request",
            "Invalid Transition Request",
            str(e),
            {"field": e.field},
        ) from None
    return MissionResponse.from_domain(mission)


@router.get(
    "/{mission_id}/audit",
    response_model=list[AuditLogEntryResponse],
    responses={404: {"model": MissionErrorResponse, "description": "Mission not found"}},
    summary="Get a mission's audit log",
)
async def get_mission_audit_log(
    mission_id: str,
    request: Request,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
) -> list[AuditLogEntryResponse]:
    """Get a mission's audit ledger in timestamp order."""
    try:
        entries = await engine.get_audit_log(mission_id)
    except MissionNotFoundError as e:
        raise _not_found(request, e) from None
    return [AuditLogEntryResponse.from_domain(entry) for entry in entries]
