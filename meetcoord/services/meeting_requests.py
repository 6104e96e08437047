# meetcoord/services/meeting_requests.py
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date as date_type

from meetcoord.core.errors import MeetingRequestNotFoundError
from meetcoord.repositories.meeting_requests import MeetingRequestRepository
from meetcoord.schemas.meeting_request import (
    ConflictCheckResult,
    MeetingRequest,
    MeetingRequestCreate,
    MeetingRequestStatus,
    ReschedulePayload,
    RescheduleResult,
    TimeWindow,
)
from meetcoord.schemas.statistics import MeetingStatistics
from meetcoord.services.conflict_detector import ConflictDetector
from meetcoord.services.meeting_lifecycle import MeetingLifecycle
from meetcoord.services.meeting_statistics import filter_by_status, summarize
from meetcoord.services.time_utils import parse_time_of_day

logger = logging.getLogger(__name__)


async def create_meeting_request(
    repo: MeetingRequestRepository,
    payload: MeetingRequestCreate,
) -> MeetingRequest:
    """
    Validate and persist a new PENDING meeting request.

    Raises InvalidTimeError / InvalidWindowError before anything is stored.
    """
    request = MeetingLifecycle.create_request(
        requester_ref=payload.requester_ref,
        responder_ref=payload.responder_ref,
        meeting_date=payload.meeting_date,
        start=payload.start_time,
        end=payload.end_time,
        title=payload.title,
        subject_ref=payload.subject_ref,
        note=payload.note,
        requester_name=payload.requester_name,
        responder_name=payload.responder_name,
        subject_title=payload.subject_title,
    )
    stored = await repo.add(request)
    logger.info(
        "Meeting request %s created by %s for %s on %s",
        stored.id,
        stored.requester_ref,
        stored.responder_ref,
        stored.original_date.isoformat(),
    )
    return stored


async def get_meeting_request(
    repo: MeetingRequestRepository,
    request_id: str,
) -> MeetingRequest:
    request = await repo.get(request_id)
    if request is None:
        raise MeetingRequestNotFoundError(request_id)
    return request


async def _apply_transition(
    repo: MeetingRequestRepository,
    request_id: str,
    transition: Callable[[MeetingRequest], MeetingRequest],
) -> MeetingRequest:
    """
    Read, transition a copy, then write guarded by the version that was read.

    InvalidTransitionError, InvalidTimeError and InvalidWindowError abort
    before the store is touched. ConcurrentModificationError propagates so
    the caller can refetch and retry.
    """
    current = await get_meeting_request(repo, request_id)
    expected_version = current.version

    candidate = transition(current.model_copy(deep=True))
    return await repo.update(candidate, expected_version=expected_version)


async def accept_meeting_request(
    repo: MeetingRequestRepository,
    request_id: str,
    meeting_link: str | None = None,
) -> MeetingRequest:
    return await _apply_transition(
        repo,
        request_id,
        lambda r: MeetingLifecycle.accept(r, meeting_link=meeting_link),
    )


async def reject_meeting_request(
    repo: MeetingRequestRepository,
    request_id: str,
    reason: str | None = None,
) -> MeetingRequest:
    return await _apply_transition(
        repo,
        request_id,
        lambda r: MeetingLifecycle.reject(r, reason=reason),
    )


async def reschedule_meeting_request(
    repo: MeetingRequestRepository,
    request_id: str,
    payload: ReschedulePayload,
) -> RescheduleResult:
    """
    Apply the responder's counter-proposal and report, advisorily, whether the
    new window collides with the responder's other commitments.

    The conflict flag never blocks the reschedule; the caller decides.
    """
    def _transition(request: MeetingRequest) -> MeetingRequest:
        if payload.end_time is not None:
            return MeetingLifecycle.reschedule(
                request,
                new_date=payload.meeting_date,
                new_start=payload.start_time,
                new_end=payload.end_time,
                note=payload.note,
            )
        return MeetingLifecycle.reschedule_for_duration(
            request,
            new_date=payload.meeting_date,
            new_start=payload.start_time,
            duration_minutes=payload.duration_minutes,
            note=payload.note,
        )

    updated = await _apply_transition(repo, request_id, _transition)

    existing = await repo.list(responder_ref=updated.responder_ref)
    has_conflict = ConflictDetector.has_conflict(
        MeetingLifecycle.effective_window(updated),
        existing,
        exclude_id=updated.id,
    )
    if has_conflict:
        logger.info(
            "Rescheduled meeting request %s overlaps another commitment of %s",
            updated.id,
            updated.responder_ref,
        )
    return RescheduleResult(request=updated, has_conflict=has_conflict)


async def check_conflicts(
    repo: MeetingRequestRepository,
    responder_ref: str,
    meeting_date: date_type,
    start_time: str,
    end_time: str,
    exclude_id: str | None = None,
) -> ConflictCheckResult:
    """
    Check a candidate window against the responder's current requests.
    """
    candidate = TimeWindow(
        day=meeting_date,
        start=parse_time_of_day(start_time),
        end=parse_time_of_day(end_time),
    )
    existing = await repo.list(responder_ref=responder_ref)
    conflicts = ConflictDetector.find_conflicts(candidate, existing, exclude_id=exclude_id)
    return ConflictCheckResult(
        has_conflict=bool(conflicts),
        conflicting_ids=[r.id for r in conflicts],
    )


async def summarize_meeting_requests(
    repo: MeetingRequestRepository,
    today: date_type,
    responder_ref: str | None = None,
    requester_ref: str | None = None,
) -> MeetingStatistics:
    requests = await repo.list(responder_ref=responder_ref, requester_ref=requester_ref)
    return summarize(requests, today=today)


async def list_meeting_requests(
    repo: MeetingRequestRepository,
    responder_ref: str | None = None,
    requester_ref: str | None = None,
    status: MeetingRequestStatus | str | None = None,
) -> list[MeetingRequest]:
    """
    List requests for the given parties. `status` is matched
    case-insensitively and "ALL" (or None) keeps every status.
    """
    requests = await repo.list(responder_ref=responder_ref, requester_ref=requester_ref)
    return filter_by_status(requests, status)
