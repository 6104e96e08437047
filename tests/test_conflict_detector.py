# tests/test_conflict_detector.py
from datetime import date, datetime, time, timezone

import pytest

from meetcoord.schemas.meeting_request import (
    MeetingRequest,
    MeetingRequestStatus,
    TimeWindow,
)
from meetcoord.services.conflict_detector import ConflictDetector

DAY = date(2025, 6, 17)


def _request(
    request_id: str,
    start: time | None,
    end: time | None,
    status: MeetingRequestStatus = MeetingRequestStatus.ACCEPTED,
    day: date = DAY,
    **extra,
) -> MeetingRequest:
    return MeetingRequest(
        id=request_id,
        requester_ref="client-1",
        responder_ref="lawyer-1",
        original_date=day,
        original_start=start,
        original_end=end,
        status=status,
        created_at=datetime(2025, 6, 1, tzinfo=timezone.utc),
        **extra,
    )


def _window(start: time, end: time | None, day: date = DAY) -> TimeWindow:
    return TimeWindow(day=day, start=start, end=end)


def test_partial_overlap_is_a_conflict():
    """
    A occupies 09:00-10:00 (ACCEPTED); 09:30-10:30 overlaps it.
    """
    existing = [_request("A", time(9, 0), time(10, 0))]
    assert ConflictDetector.has_conflict(_window(time(9, 30), time(10, 30)), existing) is True


def test_touching_windows_do_not_conflict():
    existing = [_request("A", time(9, 0), time(10, 0))]
    assert ConflictDetector.has_conflict(_window(time(10, 0), time(11, 0)), existing) is False
    assert ConflictDetector.has_conflict(_window(time(8, 0), time(9, 0)), existing) is False


def test_containing_and_contained_windows_conflict():
    existing = [_request("A", time(9, 0), time(10, 0))]
    assert ConflictDetector.has_conflict(_window(time(8, 0), time(11, 0)), existing)
    assert ConflictDetector.has_conflict(_window(time(9, 15), time(9, 45)), existing)


def test_different_day_never_conflicts():
    existing = [_request("A", time(9, 0), time(10, 0))]
    candidate = _window(time(9, 0), time(10, 0), day=date(2025, 6, 18))
    assert ConflictDetector.has_conflict(candidate, existing) is False


@pytest.mark.parametrize(
    "a, b",
    [
        ((time(9, 0), time(10, 0)), (time(9, 30), time(10, 30))),
        ((time(9, 0), time(10, 0)), (time(10, 0), time(11, 0))),
        ((time(8, 0), time(12, 0)), (time(9, 0), time(10, 0))),
        ((time(9, 0), time(9, 0)), (time(8, 0), time(10, 0))),
        ((time(13, 0), time(14, 0)), (time(9, 0), time(10, 0))),
    ],
)
def test_overlap_is_symmetric(a, b):
    wa = _window(*a)
    wb = _window(*b)
    assert ConflictDetector.windows_overlap(wa, wb) == ConflictDetector.windows_overlap(wb, wa)


def test_request_does_not_conflict_with_itself_when_excluded():
    existing = [_request("A", time(9, 0), time(10, 0), status=MeetingRequestStatus.PENDING)]
    candidate = _window(time(9, 0), time(10, 0))

    assert ConflictDetector.has_conflict(candidate, existing, exclude_id="A") is False


def test_rejected_requests_free_their_slot():
    existing = [_request("A", time(9, 0), time(10, 0), status=MeetingRequestStatus.REJECTED)]
    assert ConflictDetector.has_conflict(_window(time(9, 0), time(10, 0)), existing) is False


def test_pending_and_rescheduled_requests_still_block():
    pending = [_request("P", time(9, 0), time(10, 0), status=MeetingRequestStatus.PENDING)]
    assert ConflictDetector.has_conflict(_window(time(9, 0), time(10, 0)), pending)


def test_rescheduled_request_is_checked_against_its_new_window():
    moved = _request(
        "R",
        time(9, 0),
        time(10, 0),
        status=MeetingRequestStatus.RESCHEDULED,
        rescheduled_date=DAY,
        rescheduled_start=time(15, 0),
        rescheduled_end=time(16, 0),
    )

    assert ConflictDetector.has_conflict(_window(time(9, 0), time(10, 0)), [moved]) is False
    assert ConflictDetector.has_conflict(_window(time(15, 30), time(16, 30)), [moved]) is True


def test_zero_length_window_never_overlaps_without_fallback():
    malformed = [_request("M", time(10, 0), time(10, 0))]
    candidate = _window(time(10, 0), time(10, 30))

    assert ConflictDetector.has_conflict(candidate, malformed) is False
    assert ConflictDetector.has_conflict(candidate, malformed, apply_duration_fallback=True) is True


def test_missing_end_is_widened_by_fallback():
    open_ended = [_request("O", time(10, 0), None)]
    candidate = _window(time(10, 45), time(11, 30))

    assert ConflictDetector.has_conflict(candidate, open_ended) is False
    assert ConflictDetector.has_conflict(candidate, open_ended, apply_duration_fallback=True) is True


def test_request_without_start_cannot_conflict():
    assert ConflictDetector.has_conflict(
        _window(time(9, 0), time(10, 0)), [_request("N", None, None)]
    ) is False


def test_empty_or_none_existing_never_conflicts():
    candidate = _window(time(9, 0), time(10, 0))
    assert ConflictDetector.has_conflict(candidate, []) is False
    assert ConflictDetector.has_conflict(candidate, None) is False


def test_find_conflicts_returns_every_overlap():
    existing = [
        _request("A", time(9, 0), time(10, 0)),
        _request("B", time(9, 30), time(11, 0), status=MeetingRequestStatus.PENDING),
        _request("C", time(9, 0), time(10, 0), status=MeetingRequestStatus.REJECTED),
        _request("D", time(12, 0), time(13, 0)),
    ]

    conflicts = ConflictDetector.find_conflicts(_window(time(9, 45), time(10, 15)), existing)
    assert [r.id for r in conflicts] == ["A", "B"]


def test_zero_length_candidate_inside_existing_window_does_not_conflict():
    existing = [_request("A", time(9, 0), time(10, 0))]
    assert ConflictDetector.has_conflict(_window(time(9, 30), time(9, 30)), existing) is False


def test_inverted_stored_window_still_goes_through_overlap_formula():
    # 10:00 - 09:00: start < 11:00 and end > 08:00
    inverted = [_request("X", time(10, 0), time(9, 0))]

    assert ConflictDetector.has_conflict(_window(time(8, 0), time(11, 0)), inverted) is True
    assert ConflictDetector.has_conflict(_window(time(11, 0), time(12, 0)), inverted) is False
    assert ConflictDetector.windows_overlap(
        _window(time(10, 0), time(9, 0)), _window(time(8, 0), time(11, 0))
    ) is True
