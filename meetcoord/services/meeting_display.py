# meetcoord/services/meeting_display.py
from __future__ import annotations

from collections.abc import Iterable

from meetcoord.schemas.meeting_request import MeetingRequest, MeetingRequestDisplay
from meetcoord.services.meeting_lifecycle import MeetingLifecycle
from meetcoord.services.time_utils import (
    combine,
    duration_minutes,
    format_date,
    format_duration,
    format_window,
    parse_time_or_default,
)

NO_NOTES = "No additional notes"
UNKNOWN_CLIENT = "Unknown Client"
UNKNOWN_RESPONDER = "Unknown Responder"
UNKNOWN_CASE = "Unknown Case"


class MeetingDisplayFormatter:
    """
    Builds display-ready projections of meeting requests.

    Purely cosmetic: partial or malformed time data degrades to placeholders
    ("Time TBD", a 60 minute duration, a 09:00 start for ordering) and never
    raises.
    """

    @staticmethod
    def build_display(request: MeetingRequest) -> MeetingRequestDisplay:
        window = MeetingLifecycle.effective_window(request)
        minutes = duration_minutes(window.day, window.start, window.end)

        return MeetingRequestDisplay(
            id=request.id,
            title=request.title or "Meeting Request",
            status=request.status,
            display_date=format_date(window.day),
            display_time=format_window(window.start, window.end),
            starts_at=combine(window.day, parse_time_or_default(window.start)),
            duration=format_duration(minutes),
            is_rescheduled=request.is_rescheduled,
            note=request.note or NO_NOTES,
            requester_name=request.requester_name or UNKNOWN_CLIENT,
            responder_name=request.responder_name or UNKNOWN_RESPONDER,
            subject_title=request.subject_title or UNKNOWN_CASE,
        )

    @staticmethod
    def build_many(requests: Iterable[MeetingRequest] | None) -> list[MeetingRequestDisplay]:
        """
        Project every request, ordered by effective start.
        """
        displays = [MeetingDisplayFormatter.build_display(r) for r in requests or ()]
        return sorted(displays, key=lambda d: (d.starts_at, d.id))
