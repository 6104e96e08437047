# tests/test_meeting_request_service.py
from datetime import date, time

import pytest

from meetcoord.core.errors import (
    ConcurrentModificationError,
    InvalidTransitionError,
    InvalidWindowError,
    MeetingRequestNotFoundError,
)
from meetcoord.repositories.meeting_requests import InMemoryMeetingRequestRepository
from meetcoord.schemas.meeting_request import (
    MeetingRequestCreate,
    MeetingRequestStatus,
    ReschedulePayload,
)
from meetcoord.services.meeting_requests import (
    accept_meeting_request,
    check_conflicts,
    create_meeting_request,
    get_meeting_request,
    list_meeting_requests,
    reject_meeting_request,
    reschedule_meeting_request,
    summarize_meeting_requests,
)


def _payload(
    start: str = "09:00",
    end: str = "10:00",
    meeting_date: date = date(2025, 6, 17),
    responder_ref: str = "lawyer-1",
) -> MeetingRequestCreate:
    return MeetingRequestCreate(
        requester_ref="client-1",
        responder_ref=responder_ref,
        subject_ref="case-1",
        title="Case review",
        meeting_date=meeting_date,
        start_time=start,
        end_time=end,
    )


@pytest.mark.asyncio
async def test_create_and_fetch(repo):
    created = await create_meeting_request(repo, _payload())
    fetched = await get_meeting_request(repo, created.id)

    assert fetched.id == created.id
    assert fetched.status == MeetingRequestStatus.PENDING
    assert fetched.original_start == time(9, 0)


@pytest.mark.asyncio
async def test_create_with_invalid_window_stores_nothing(repo):
    with pytest.raises(InvalidWindowError):
        await create_meeting_request(repo, _payload(start="10:00", end="10:00"))

    assert await list_meeting_requests(repo) == []


@pytest.mark.asyncio
async def test_unknown_id_raises_not_found(repo):
    with pytest.raises(MeetingRequestNotFoundError):
        await accept_meeting_request(repo, "does-not-exist")


@pytest.mark.asyncio
async def test_accept_persists_and_bumps_version(repo):
    created = await create_meeting_request(repo, _payload())

    accepted = await accept_meeting_request(repo, created.id, meeting_link="Room 4")

    assert accepted.status == MeetingRequestStatus.ACCEPTED
    assert accepted.note == "Meeting Link: Room 4"
    assert accepted.version == created.version + 1
    assert (await get_meeting_request(repo, created.id)).status == MeetingRequestStatus.ACCEPTED


@pytest.mark.asyncio
async def test_transition_on_terminal_request_leaves_store_unchanged(repo):
    created = await create_meeting_request(repo, _payload())
    rejected = await reject_meeting_request(repo, created.id, reason="Unavailable")

    with pytest.raises(InvalidTransitionError):
        await accept_meeting_request(repo, created.id)

    stored = await get_meeting_request(repo, created.id)
    assert stored.model_dump() == rejected.model_dump()


@pytest.mark.asyncio
async def test_reschedule_reports_advisory_conflict(repo):
    busy = await create_meeting_request(repo, _payload(start="14:00", end="15:00"))
    await accept_meeting_request(repo, busy.id)
    target = await create_meeting_request(repo, _payload(start="09:00", end="10:00"))

    result = await reschedule_meeting_request(
        repo,
        target.id,
        ReschedulePayload(meeting_date=date(2025, 6, 17), start_time="14:30", end_time="15:30"),
    )

    assert result.has_conflict is True
    assert result.request.status == MeetingRequestStatus.RESCHEDULED
    assert result.request.rescheduled_start == time(14, 30)


@pytest.mark.asyncio
async def test_reschedule_does_not_conflict_with_its_own_original_slot(repo):
    target = await create_meeting_request(repo, _payload(start="09:00", end="10:00"))

    result = await reschedule_meeting_request(
        repo,
        target.id,
        ReschedulePayload(meeting_date=date(2025, 6, 17), start_time="09:30"),
    )

    assert result.has_conflict is False
    assert result.request.rescheduled_end == time(10, 30)


@pytest.mark.asyncio
async def test_second_reschedule_is_refused(repo):
    target = await create_meeting_request(repo, _payload())
    payload = ReschedulePayload(meeting_date=date(2025, 6, 18), start_time="11:00", end_time="12:00")
    await reschedule_meeting_request(repo, target.id, payload)

    with pytest.raises(InvalidTransitionError):
        await reschedule_meeting_request(repo, target.id, payload)

    accepted = await accept_meeting_request(repo, target.id)
    assert accepted.status == MeetingRequestStatus.ACCEPTED


@pytest.mark.asyncio
async def test_stale_write_is_refused_by_the_store(repo):
    created = await create_meeting_request(repo, _payload())
    stale = await get_meeting_request(repo, created.id)

    await accept_meeting_request(repo, created.id)

    stale.status = MeetingRequestStatus.REJECTED
    with pytest.raises(ConcurrentModificationError):
        await repo.update(stale, expected_version=stale.version)

    assert (await get_meeting_request(repo, created.id)).status == MeetingRequestStatus.ACCEPTED


class _RacingRepository(InMemoryMeetingRequestRepository):
    """
    Lets a competing responder reject the request right after the first read.
    """

    def __init__(self) -> None:
        super().__init__()
        self.raced = False

    async def get(self, request_id):
        snapshot = await super().get(request_id)
        if not self.raced and snapshot is not None:
            self.raced = True
            await reject_meeting_request(self, request_id, reason="double submit")
        return snapshot


@pytest.mark.asyncio
async def test_concurrent_transition_surfaces_concurrent_modification():
    racing = _RacingRepository()
    created = await create_meeting_request(racing, _payload())

    with pytest.raises(ConcurrentModificationError):
        await accept_meeting_request(racing, created.id)

    stored = await racing.get(created.id)
    assert stored.status == MeetingRequestStatus.REJECTED
    assert stored.note == "double submit"


@pytest.mark.asyncio
async def test_check_conflicts_and_summary(repo):
    a = await create_meeting_request(repo, _payload(start="09:00", end="10:00"))
    await accept_meeting_request(repo, a.id)
    b = await create_meeting_request(repo, _payload(start="11:00", end="12:00"))
    await reject_meeting_request(repo, b.id)
    await create_meeting_request(repo, _payload(start="09:00", end="10:00", responder_ref="lawyer-2"))

    result = await check_conflicts(
        repo,
        responder_ref="lawyer-1",
        meeting_date=date(2025, 6, 17),
        start_time="09:30",
        end_time="11:30",
    )
    assert result.has_conflict is True
    assert result.conflicting_ids == [a.id]

    stats = await summarize_meeting_requests(repo, today=date(2025, 6, 16), responder_ref="lawyer-1")
    assert stats.total == 2
    assert stats.accepted == 1
    assert stats.rejected == 1
    assert stats.within_next_week == 2


@pytest.mark.asyncio
async def test_list_filters_by_status(repo):
    a = await create_meeting_request(repo, _payload())
    await create_meeting_request(repo, _payload(start="13:00", end="14:00"))
    await accept_meeting_request(repo, a.id)

    accepted = await list_meeting_requests(repo, status=MeetingRequestStatus.ACCEPTED)
    assert [r.id for r in accepted] == [a.id]


@pytest.mark.asyncio
async def test_list_status_filter_is_case_insensitive_and_accepts_all(repo):
    a = await create_meeting_request(repo, _payload())
    b = await create_meeting_request(repo, _payload(start="13:00", end="14:00"))
    await reject_meeting_request(repo, b.id)

    assert [r.id for r in await list_meeting_requests(repo, status="pending")] == [a.id]
    assert [r.id for r in await list_meeting_requests(repo, status="ALL")] == [a.id, b.id]
