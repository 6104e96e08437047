# meetcoord/api/routes/meeting_requests.py
from datetime import date as date_type
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from meetcoord.api.dependencies.repository import get_meeting_request_repository
from meetcoord.core.errors import (
    ConcurrentModificationError,
    InvalidTimeError,
    InvalidTransitionError,
    InvalidWindowError,
    MeetingRequestError,
    MeetingRequestNotFoundError,
)
from meetcoord.repositories.meeting_requests import MeetingRequestRepository
from meetcoord.schemas.meeting_request import (
    AcceptPayload,
    ConflictCheckPayload,
    ConflictCheckResult,
    MeetingRequest,
    MeetingRequestCreate,
    MeetingRequestDisplay,
    RejectPayload,
    ReschedulePayload,
    RescheduleResult,
)
from meetcoord.schemas.statistics import MeetingStatistics
from meetcoord.services import meeting_requests as service
from meetcoord.services.meeting_display import MeetingDisplayFormatter

router = APIRouter(prefix="/meeting-requests", tags=["Meeting Requests"])


def _to_http_exception(exc: MeetingRequestError) -> HTTPException:
    """
    Translate a domain error into the HTTP status the API exposes for it.
    """
    if isinstance(exc, MeetingRequestNotFoundError):
        status = HTTPStatus.NOT_FOUND
    elif isinstance(exc, (InvalidTimeError, InvalidWindowError)):
        status = HTTPStatus.UNPROCESSABLE_ENTITY
    elif isinstance(exc, (InvalidTransitionError, ConcurrentModificationError)):
        status = HTTPStatus.CONFLICT
    else:
        status = HTTPStatus.BAD_REQUEST
    return HTTPException(status_code=status, detail=str(exc))


@router.post(
    "",
    response_model=MeetingRequest,
    status_code=HTTPStatus.CREATED,
    summary="Propose a new meeting",
    description=(
        "Create a meeting request in PENDING state.\n\n"
        "Times are accepted as `HH:mm` or `HH:mm:ss`. The end time must be "
        "strictly after the start time."
    ),
    responses={
        422: {"description": "Malformed time or end not after start."},
    },
)
async def create_meeting_request(
    payload: MeetingRequestCreate,
    repo: MeetingRequestRepository = Depends(get_meeting_request_repository),
) -> MeetingRequest:
    try:
        return await service.create_meeting_request(repo, payload)
    except MeetingRequestError as exc:
        raise _to_http_exception(exc) from exc


@router.get(
    "",
    response_model=list[MeetingRequest],
    summary="List meeting requests",
    description=(
        "Return meeting requests ordered by original date, optionally filtered "
        "by responder, requester and status. The status filter is "
        "case-insensitive and `ALL` keeps every status."
    ),
)
async def list_meeting_requests(
    responder_ref: str | None = Query(default=None),
    requester_ref: str | None = Query(default=None),
    status: str | None = Query(default=None, examples=["PENDING", "ALL"]),
    repo: MeetingRequestRepository = Depends(get_meeting_request_repository),
) -> list[MeetingRequest]:
    return await service.list_meeting_requests(
        repo,
        responder_ref=responder_ref,
        requester_ref=requester_ref,
        status=status,
    )


@router.get(
    "/display",
    response_model=list[MeetingRequestDisplay],
    summary="List display-ready meeting requests",
    description=(
        "Display projections of the matching requests, ordered by the start "
        "of their effective window. A missing start time sorts as 09:00."
    ),
)
async def list_meeting_request_displays(
    responder_ref: str | None = Query(default=None),
    requester_ref: str | None = Query(default=None),
    status: str | None = Query(default=None, examples=["PENDING", "ALL"]),
    repo: MeetingRequestRepository = Depends(get_meeting_request_repository),
) -> list[MeetingRequestDisplay]:
    requests = await service.list_meeting_requests(
        repo,
        responder_ref=responder_ref,
        requester_ref=requester_ref,
        status=status,
    )
    return MeetingDisplayFormatter.build_many(requests)


@router.get(
    "/statistics",
    response_model=MeetingStatistics,
    summary="Summarize meeting requests",
    description=(
        "Count requests per status and the number whose effective date falls "
        "within `[today, today + 7 days]`.\n\n"
        "`today` defaults to the server's current date when omitted."
    ),
)
async def get_meeting_statistics(
    today: date_type | None = Query(
        default=None,
        description="Reference date in ISO format (YYYY-MM-DD).",
    ),
    responder_ref: str | None = Query(default=None),
    requester_ref: str | None = Query(default=None),
    repo: MeetingRequestRepository = Depends(get_meeting_request_repository),
) -> MeetingStatistics:
    return await service.summarize_meeting_requests(
        repo,
        today=today or date_type.today(),
        responder_ref=responder_ref,
        requester_ref=requester_ref,
    )


@router.post(
    "/conflicts",
    response_model=ConflictCheckResult,
    summary="Check a candidate window for conflicts",
    description=(
        "Advisory check of a candidate window against the responder's "
        "non-rejected requests. Touching windows do not conflict."
    ),
)
async def check_conflicts(
    payload: ConflictCheckPayload,
    repo: MeetingRequestRepository = Depends(get_meeting_request_repository),
) -> ConflictCheckResult:
    try:
        return await service.check_conflicts(
            repo,
            responder_ref=payload.responder_ref,
            meeting_date=payload.meeting_date,
            start_time=payload.start_time,
            end_time=payload.end_time,
            exclude_id=payload.exclude_id,
        )
    except MeetingRequestError as exc:
        raise _to_http_exception(exc) from exc


@router.get(
    "/{request_id}",
    response_model=MeetingRequest,
    summary="Get a meeting request",
    responses={404: {"description": "No meeting request exists with the given id."}},
)
async def get_meeting_request(
    request_id: str = Path(..., description="Identifier of the meeting request."),
    repo: MeetingRequestRepository = Depends(get_meeting_request_repository),
) -> MeetingRequest:
    try:
        return await service.get_meeting_request(repo, request_id)
    except MeetingRequestError as exc:
        raise _to_http_exception(exc) from exc


@router.get(
    "/{request_id}/display",
    response_model=MeetingRequestDisplay,
    summary="Get display-ready fields for a meeting request",
)
async def get_meeting_request_display(
    request_id: str = Path(..., description="Identifier of the meeting request."),
    repo: MeetingRequestRepository = Depends(get_meeting_request_repository),
) -> MeetingRequestDisplay:
    try:
        request = await service.get_meeting_request(repo, request_id)
    except MeetingRequestError as exc:
        raise _to_http_exception(exc) from exc
    return MeetingDisplayFormatter.build_display(request)


@router.post(
    "/{request_id}/accept",
    response_model=MeetingRequest,
    summary="Accept a meeting request",
    responses={
        404: {"description": "No meeting request exists with the given id."},
        409: {"description": "Request is terminal, or was modified concurrently."},
    },
)
async def accept_meeting_request(
    request_id: str = Path(..., description="Identifier of the meeting request."),
    payload: AcceptPayload | None = None,
    repo: MeetingRequestRepository = Depends(get_meeting_request_repository),
) -> MeetingRequest:
    meeting_link = payload.meeting_link if payload else None
    try:
        return await service.accept_meeting_request(repo, request_id, meeting_link=meeting_link)
    except MeetingRequestError as exc:
        raise _to_http_exception(exc) from exc


@router.post(
    "/{request_id}/reject",
    response_model=MeetingRequest,
    summary="Reject a meeting request",
    responses={
        404: {"description": "No meeting request exists with the given id."},
        409: {"description": "Request is terminal, or was modified concurrently."},
    },
)
async def reject_meeting_request(
    request_id: str = Path(..., description="Identifier of the meeting request."),
    payload: RejectPayload | None = None,
    repo: MeetingRequestRepository = Depends(get_meeting_request_repository),
) -> MeetingRequest:
    reason = payload.reason if payload else None
    try:
        return await service.reject_meeting_request(repo, request_id, reason=reason)
    except MeetingRequestError as exc:
        raise _to_http_exception(exc) from exc


@router.post(
    "/{request_id}/reschedule",
    response_model=RescheduleResult,
    summary="Counter-propose a new window",
    description=(
        "Move a PENDING request to RESCHEDULED with a new window. Supply either "
        "`end_time` or `duration_minutes` (default 60).\n\n"
        "Only one reschedule round is supported. The returned `has_conflict` "
        "flag is advisory and never blocks the reschedule."
    ),
    responses={
        404: {"description": "No meeting request exists with the given id."},
        409: {"description": "Request is not PENDING, or was modified concurrently."},
        422: {"description": "Malformed time or end not after start."},
    },
)
async def reschedule_meeting_request(
    payload: ReschedulePayload,
    request_id: str = Path(..., description="Identifier of the meeting request."),
    repo: MeetingRequestRepository = Depends(get_meeting_request_repository),
) -> RescheduleResult:
    try:
        return await service.reschedule_meeting_request(repo, request_id, payload)
    except MeetingRequestError as exc:
        raise _to_http_exception(exc) from exc
