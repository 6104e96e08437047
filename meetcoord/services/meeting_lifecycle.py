# meetcoord/services/meeting_lifecycle.py
from __future__ import annotations

import logging
import uuid
from datetime import date as date_type
from datetime import datetime, time, timezone

from meetcoord.core.config import get_settings
from meetcoord.core.errors import InvalidTransitionError, InvalidWindowError
from meetcoord.schemas.meeting_request import (
    MeetingRequest,
    MeetingRequestStatus,
    TimeWindow,
)
from meetcoord.services.time_utils import add_minutes, combine, parse_time_of_day

logger = logging.getLogger(__name__)

DEFAULT_RESCHEDULE_NOTE = "Meeting has been rescheduled"

ALLOWED_TRANSITIONS: dict[MeetingRequestStatus, frozenset[MeetingRequestStatus]] = {
    MeetingRequestStatus.PENDING: frozenset(
        {
            MeetingRequestStatus.ACCEPTED,
            MeetingRequestStatus.REJECTED,
            MeetingRequestStatus.RESCHEDULED,
        }
    ),
    MeetingRequestStatus.RESCHEDULED: frozenset(
        {
            MeetingRequestStatus.ACCEPTED,
            MeetingRequestStatus.REJECTED,
        }
    ),
    MeetingRequestStatus.ACCEPTED: frozenset(),
    MeetingRequestStatus.REJECTED: frozenset(),
}


def _validate_window(day: date_type, start: time, end: time) -> None:
    if combine(day, end) <= combine(day, start):
        raise InvalidWindowError(
            f"End time {end.isoformat()} must be after start time {start.isoformat()}"
        )


class MeetingLifecycle:
    """
    Owns the meeting request state machine.

    This is the only component allowed to change `status`, the rescheduled
    fields or the note of a request. Every transition validates first and
    mutates second, so a failed call leaves the request untouched.

    Transitions
    -----------
    PENDING      -> ACCEPTED | REJECTED | RESCHEDULED
    RESCHEDULED  -> ACCEPTED | REJECTED
    ACCEPTED, REJECTED are terminal.

    Only one reschedule round is supported; a rejected counter-proposal
    requires a fresh request.
    """

    @staticmethod
    def create_request(
        requester_ref: str,
        responder_ref: str,
        meeting_date: date_type,
        start: str | time,
        end: str | time,
        title: str = "Meeting Request",
        subject_ref: str | None = None,
        note: str | None = None,
        requester_name: str | None = None,
        responder_name: str | None = None,
        subject_title: str | None = None,
        request_id: str | None = None,
        created_at: datetime | None = None,
    ) -> MeetingRequest:
        """
        Build a new PENDING meeting request.

        Raises
        ------
        InvalidTimeError
            If `start` or `end` is a malformed time string.
        InvalidWindowError
            If `end` is not strictly after `start`.
        """
        start_time = parse_time_of_day(start)
        end_time = parse_time_of_day(end)
        _validate_window(meeting_date, start_time, end_time)

        return MeetingRequest(
            id=request_id or str(uuid.uuid4()),
            requester_ref=requester_ref,
            responder_ref=responder_ref,
            subject_ref=subject_ref,
            title=title or "Meeting Request",
            original_date=meeting_date,
            original_start=start_time,
            original_end=end_time,
            status=MeetingRequestStatus.PENDING,
            note=note,
            created_at=created_at or datetime.now(tz=timezone.utc),
            requester_name=requester_name,
            responder_name=responder_name,
            subject_title=subject_title,
        )

    @staticmethod
    def can_transition(
        current: MeetingRequestStatus,
        target: MeetingRequestStatus,
    ) -> bool:
        return target in ALLOWED_TRANSITIONS.get(current, frozenset())

    @staticmethod
    def _ensure_transition(
        request: MeetingRequest,
        target: MeetingRequestStatus,
    ) -> None:
        if not MeetingLifecycle.can_transition(request.status, target):
            raise InvalidTransitionError(
                request_id=request.id,
                current=request.status.value,
                target=target.value,
            )

    @staticmethod
    def accept(
        request: MeetingRequest,
        meeting_link: str | None = None,
    ) -> MeetingRequest:
        """
        Accept a PENDING or RESCHEDULED request.

        The effective window at the moment of acceptance becomes final.
        If a meeting link or location is given it is stored in the note.
        """
        MeetingLifecycle._ensure_transition(request, MeetingRequestStatus.ACCEPTED)

        previous = request.status
        request.status = MeetingRequestStatus.ACCEPTED
        if meeting_link:
            request.note = f"Meeting Link: {meeting_link}"

        logger.info("Meeting request %s: %s -> ACCEPTED", request.id, previous.value)
        return request

    @staticmethod
    def reject(
        request: MeetingRequest,
        reason: str | None = None,
    ) -> MeetingRequest:
        """
        Reject a PENDING or RESCHEDULED request. A rejected request frees its slot.
        """
        MeetingLifecycle._ensure_transition(request, MeetingRequestStatus.REJECTED)

        previous = request.status
        request.status = MeetingRequestStatus.REJECTED
        request.note = reason

        logger.info("Meeting request %s: %s -> REJECTED", request.id, previous.value)
        return request

    @staticmethod
    def reschedule(
        request: MeetingRequest,
        new_date: date_type,
        new_start: str | time,
        new_end: str | time,
        note: str | None = None,
    ) -> MeetingRequest:
        """
        Record the responder's counter-proposal. Valid only from PENDING.

        Original fields are left untouched for audit.

        Raises
        ------
        InvalidTransitionError
            If the request is not PENDING (including a second reschedule).
        InvalidTimeError / InvalidWindowError
            If the proposed window is malformed.
        """
        MeetingLifecycle._ensure_transition(request, MeetingRequestStatus.RESCHEDULED)

        start_time = parse_time_of_day(new_start)
        end_time = parse_time_of_day(new_end)
        _validate_window(new_date, start_time, end_time)

        request.status = MeetingRequestStatus.RESCHEDULED
        request.rescheduled_date = new_date
        request.rescheduled_start = start_time
        request.rescheduled_end = end_time
        request.note = note or DEFAULT_RESCHEDULE_NOTE

        logger.info(
            "Meeting request %s: PENDING -> RESCHEDULED (%s %s-%s)",
            request.id,
            new_date.isoformat(),
            start_time.isoformat(),
            end_time.isoformat(),
        )
        return request

    @staticmethod
    def reschedule_for_duration(
        request: MeetingRequest,
        new_date: date_type,
        new_start: str | time,
        duration_minutes: int | None = None,
        note: str | None = None,
    ) -> MeetingRequest:
        """
        Reschedule using a start time and a length instead of an end time.
        """
        MeetingLifecycle._ensure_transition(request, MeetingRequestStatus.RESCHEDULED)

        minutes = duration_minutes
        if minutes is None:
            minutes = get_settings().DEFAULT_DURATION_MINUTES
        start_time = parse_time_of_day(new_start)
        end_time = add_minutes(new_date, start_time, minutes)
        return MeetingLifecycle.reschedule(
            request,
            new_date=new_date,
            new_start=start_time,
            new_end=end_time,
            note=note,
        )

    @staticmethod
    def effective_window(request: MeetingRequest) -> TimeWindow:
        """
        Return the window currently in force for `request`.

        Rescheduled values win whenever they are populated; missing rescheduled
        times fall back to the original ones. This is the only place that
        distinguishes original from rescheduled data.
        """
        if request.rescheduled_date is not None:
            return TimeWindow(
                day=request.rescheduled_date,
                start=request.rescheduled_start or request.original_start,
                end=request.rescheduled_end or request.original_end,
            )
        return TimeWindow(
            day=request.original_date,
            start=request.original_start,
            end=request.original_end,
        )
