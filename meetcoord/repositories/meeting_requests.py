# meetcoord/repositories/meeting_requests.py
from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from meetcoord.core.errors import (
    ConcurrentModificationError,
    MeetingRequestNotFoundError,
)
from meetcoord.models.meeting_request import MeetingRequestRecord
from meetcoord.schemas.meeting_request import MeetingRequest, MeetingRequestStatus

logger = logging.getLogger(__name__)


class MeetingRequestRepository(Protocol):
    """
    Store contract for meeting requests.

    `update` must apply the write only if the stored version still equals
    `expected_version`, otherwise raise ConcurrentModificationError. Only
    lifecycle-owned fields (status, rescheduled window, note) are written.
    """

    async def add(self, request: MeetingRequest) -> MeetingRequest: ...

    async def get(self, request_id: str) -> MeetingRequest | None: ...

    async def list(
        self,
        responder_ref: str | None = None,
        requester_ref: str | None = None,
        status: MeetingRequestStatus | None = None,
    ) -> list[MeetingRequest]: ...

    async def update(
        self,
        request: MeetingRequest,
        expected_version: int,
    ) -> MeetingRequest: ...


def _sort_key(request: MeetingRequest) -> tuple:
    return (request.original_date, request.original_start is None, request.original_start, request.id)


class InMemoryMeetingRequestRepository:
    """
    Process-local store, used in tests and for embedding the core without a DB.

    Stored entities are copied on the way in and out so callers can never
    mutate the stored state behind the repository's back.
    """

    def __init__(self) -> None:
        self._items: dict[str, MeetingRequest] = {}
        self._lock = asyncio.Lock()

    async def add(self, request: MeetingRequest) -> MeetingRequest:
        async with self._lock:
            if request.id in self._items:
                raise ValueError(f"Meeting request with id={request.id} already exists")
            self._items[request.id] = request.model_copy(deep=True)
        return request.model_copy(deep=True)

    async def get(self, request_id: str) -> MeetingRequest | None:
        stored = self._items.get(request_id)
        return stored.model_copy(deep=True) if stored is not None else None

    async def list(
        self,
        responder_ref: str | None = None,
        requester_ref: str | None = None,
        status: MeetingRequestStatus | None = None,
    ) -> list[MeetingRequest]:
        items = [
            r
            for r in self._items.values()
            if (responder_ref is None or r.responder_ref == responder_ref)
            and (requester_ref is None or r.requester_ref == requester_ref)
            and (status is None or r.status == status)
        ]
        return [r.model_copy(deep=True) for r in sorted(items, key=_sort_key)]

    async def update(
        self,
        request: MeetingRequest,
        expected_version: int,
    ) -> MeetingRequest:
        async with self._lock:
            stored = self._items.get(request.id)
            if stored is None:
                raise MeetingRequestNotFoundError(request.id)
            if stored.version != expected_version:
                logger.warning(
                    "Stale write for meeting request %s: expected v%s, found v%s",
                    request.id,
                    expected_version,
                    stored.version,
                )
                raise ConcurrentModificationError(request.id, expected_version)

            updated = stored.model_copy(
                update={
                    "status": request.status,
                    "rescheduled_date": request.rescheduled_date,
                    "rescheduled_start": request.rescheduled_start,
                    "rescheduled_end": request.rescheduled_end,
                    "note": request.note,
                    "version": expected_version + 1,
                },
                deep=True,
            )
            self._items[request.id] = updated
        return updated.model_copy(deep=True)


class SqlAlchemyMeetingRequestRepository:
    """
    Async SQLAlchemy-backed store.

    Optimistic concurrency is enforced in SQL with
    `UPDATE ... WHERE id = :id AND version = :expected`; a zero row count
    means either the row is gone or someone else wrote first.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def add(self, request: MeetingRequest) -> MeetingRequest:
        record = MeetingRequestRecord(
            id=request.id,
            requester_ref=request.requester_ref,
            responder_ref=request.responder_ref,
            subject_ref=request.subject_ref,
            title=request.title,
            original_date=request.original_date,
            original_start=request.original_start,
            original_end=request.original_end,
            status=request.status.value,
            rescheduled_date=request.rescheduled_date,
            rescheduled_start=request.rescheduled_start,
            rescheduled_end=request.rescheduled_end,
            note=request.note,
            created_at=request.created_at,
            requester_name=request.requester_name,
            responder_name=request.responder_name,
            subject_title=request.subject_title,
            version=request.version,
        )
        self._db.add(record)
        await self._db.commit()
        await self._db.refresh(record)
        return MeetingRequest.model_validate(record)

    async def get(self, request_id: str) -> MeetingRequest | None:
        # populate_existing: bulk UPDATEs bypass the identity map.
        result = await self._db.execute(
            select(MeetingRequestRecord)
            .where(MeetingRequestRecord.id == request_id)
            .execution_options(populate_existing=True)
        )
        record = result.scalar_one_or_none()
        if record is None:
            return None
        return MeetingRequest.model_validate(record)

    async def list(
        self,
        responder_ref: str | None = None,
        requester_ref: str | None = None,
        status: MeetingRequestStatus | None = None,
    ) -> list[MeetingRequest]:
        conditions = []
        if responder_ref is not None:
            conditions.append(MeetingRequestRecord.responder_ref == responder_ref)
        if requester_ref is not None:
            conditions.append(MeetingRequestRecord.requester_ref == requester_ref)
        if status is not None:
            conditions.append(MeetingRequestRecord.status == status.value)

        stmt = select(MeetingRequestRecord)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = stmt.order_by(
            MeetingRequestRecord.original_date.asc(),
            MeetingRequestRecord.original_start.asc(),
            MeetingRequestRecord.id.asc(),
        )

        result = await self._db.execute(stmt)
        return [MeetingRequest.model_validate(r) for r in result.scalars().all()]

    async def update(
        self,
        request: MeetingRequest,
        expected_version: int,
    ) -> MeetingRequest:
        stmt = (
            update(MeetingRequestRecord)
            .where(
                MeetingRequestRecord.id == request.id,
                MeetingRequestRecord.version == expected_version,
            )
            .values(
                status=request.status.value,
                rescheduled_date=request.rescheduled_date,
                rescheduled_start=request.rescheduled_start,
                rescheduled_end=request.rescheduled_end,
                note=request.note,
                version=expected_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)

        if result.rowcount == 0:
            await self._db.rollback()
            exists = await self._db.execute(
                select(MeetingRequestRecord.id).where(MeetingRequestRecord.id == request.id)
            )
            if exists.scalar_one_or_none() is None:
                raise MeetingRequestNotFoundError(request.id)

            logger.warning(
                "Stale write for meeting request %s: expected v%s",
                request.id,
                expected_version,
            )
            raise ConcurrentModificationError(request.id, expected_version)

        await self._db.commit()

        refreshed = await self.get(request.id)
        if refreshed is None:  # pragma: no cover - deleted between commit and read
            raise MeetingRequestNotFoundError(request.id)
        return refreshed
