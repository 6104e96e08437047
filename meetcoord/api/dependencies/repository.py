# meetcoord/api/dependencies/repository.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from meetcoord.db.session import get_db
from meetcoord.repositories.meeting_requests import SqlAlchemyMeetingRequestRepository


async def get_meeting_request_repository(
    db: AsyncSession = Depends(get_db),
) -> SqlAlchemyMeetingRequestRepository:
    """
    Dependency providing the meeting request store bound to the request's session.

    Tests may override this with an InMemoryMeetingRequestRepository.
    """
    return SqlAlchemyMeetingRequestRepository(db)
