# meetcoord/services/meeting_statistics.py
from __future__ import annotations

from collections.abc import Iterable
from datetime import date as date_type
from datetime import timedelta

from meetcoord.core.config import get_settings
from meetcoord.schemas.meeting_request import MeetingRequest, MeetingRequestStatus
from meetcoord.schemas.statistics import MeetingStatistics
from meetcoord.services.meeting_lifecycle import MeetingLifecycle


def summarize(
    requests: Iterable[MeetingRequest] | None,
    today: date_type,
    window_days: int | None = None,
) -> MeetingStatistics:
    """
    Summarize meeting requests by status and by proximity to `today`.

    Steps
    -----
    1) Count requests per status (PENDING, ACCEPTED, REJECTED, RESCHEDULED).
    2) Count requests whose effective date falls within
       [today, today + window_days], both ends inclusive.

    `today` is supplied by the caller; the wall clock is never read here.
    Empty or None input yields all-zero counts.
    """
    days = window_days if window_days is not None else get_settings().UPCOMING_WINDOW_DAYS
    horizon = today + timedelta(days=days)

    counts = {
        MeetingRequestStatus.PENDING: 0,
        MeetingRequestStatus.ACCEPTED: 0,
        MeetingRequestStatus.REJECTED: 0,
        MeetingRequestStatus.RESCHEDULED: 0,
    }
    total = 0
    within_next_week = 0

    for request in requests or ():
        total += 1
        counts[request.status] += 1

        effective_day = MeetingLifecycle.effective_window(request).day
        if today <= effective_day <= horizon:
            within_next_week += 1

    return MeetingStatistics(
        total=total,
        pending=counts[MeetingRequestStatus.PENDING],
        accepted=counts[MeetingRequestStatus.ACCEPTED],
        rejected=counts[MeetingRequestStatus.REJECTED],
        rescheduled=counts[MeetingRequestStatus.RESCHEDULED],
        within_next_week=within_next_week,
    )


def filter_by_status(
    requests: Iterable[MeetingRequest] | None,
    status: MeetingRequestStatus | str | None,
) -> list[MeetingRequest]:
    """
    Keep requests with the given status. None or "ALL" keeps everything.
    """
    items = list(requests or ())
    if status is None:
        return items

    wanted = status.value if isinstance(status, MeetingRequestStatus) else str(status).upper()
    if wanted == "ALL":
        return items
    return [r for r in items if r.status.value == wanted]
