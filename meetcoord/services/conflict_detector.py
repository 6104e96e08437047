# meetcoord/services/conflict_detector.py
from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta

from meetcoord.core.config import get_settings
from meetcoord.schemas.meeting_request import (
    MeetingRequest,
    MeetingRequestStatus,
    TimeWindow,
)
from meetcoord.services.meeting_lifecycle import MeetingLifecycle
from meetcoord.services.time_utils import combine


class ConflictDetector:
    """
    Advisory overlap check of a candidate window against existing requests.

    Rules
    -----
    - REJECTED requests never conflict (a rejected request frees its slot).
    - The request with `exclude_id` is ignored, so a request being
      rescheduled does not conflict with itself.
    - Windows are half-open: touching windows (10:00 end / 10:00 start) do
      not overlap.
    - A zero-length window overlaps nothing unless `apply_duration_fallback`
      is set, in which case missing or non-positive windows are widened to the
      configured default duration first.

    The detector takes no locks; it works on whatever snapshot it is given.
    """

    @staticmethod
    def _bounds(
        window: TimeWindow,
        apply_duration_fallback: bool = False,
    ) -> tuple[datetime, datetime] | None:
        if window.start is None:
            return None

        start = combine(window.day, window.start)
        end = combine(window.day, window.end) if window.end is not None else start

        if apply_duration_fallback and end <= start:
            end = start + timedelta(minutes=get_settings().DEFAULT_DURATION_MINUTES)
        return start, end

    @staticmethod
    def windows_overlap(
        a: TimeWindow,
        b: TimeWindow,
        apply_duration_fallback: bool = False,
    ) -> bool:
        """
        `a.start < b.end and a.end > b.start`. Symmetric in `a` and `b`.

        A window without a start time cannot be placed and a zero-length
        window has no extent; neither overlaps anything. An inverted window
        goes through the formula unchanged.
        """
        a_bounds = ConflictDetector._bounds(a, apply_duration_fallback)
        b_bounds = ConflictDetector._bounds(b, apply_duration_fallback)
        if a_bounds is None or b_bounds is None:
            return False

        a_start, a_end = a_bounds
        b_start, b_end = b_bounds
        if a_end == a_start or b_end == b_start:
            return False
        return a_start < b_end and a_end > b_start

    @staticmethod
    def _iter_conflicts(
        candidate: TimeWindow,
        existing: Iterable[MeetingRequest] | None,
        exclude_id: str | None,
        apply_duration_fallback: bool,
    ) -> Iterator[MeetingRequest]:
        for request in existing or ():
            if request.status == MeetingRequestStatus.REJECTED:
                continue
            if exclude_id is not None and request.id == exclude_id:
                continue

            window = MeetingLifecycle.effective_window(request)
            if ConflictDetector.windows_overlap(
                candidate, window, apply_duration_fallback
            ):
                yield request

    @staticmethod
    def has_conflict(
        candidate: TimeWindow,
        existing: Iterable[MeetingRequest] | None,
        exclude_id: str | None = None,
        apply_duration_fallback: bool = False,
    ) -> bool:
        """
        True on the first overlapping request found, False otherwise.
        """
        for _ in ConflictDetector._iter_conflicts(
            candidate, existing, exclude_id, apply_duration_fallback
        ):
            return True
        return False

    @staticmethod
    def find_conflicts(
        candidate: TimeWindow,
        existing: Iterable[MeetingRequest] | None,
        exclude_id: str | None = None,
        apply_duration_fallback: bool = False,
    ) -> list[MeetingRequest]:
        """
        Return every request whose effective window overlaps `candidate`.
        """
        return list(
            ConflictDetector._iter_conflicts(
                candidate, existing, exclude_id, apply_duration_fallback
            )
        )
