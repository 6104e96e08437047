# meetcoord/models/meeting_request.py
from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Integer,
    String,
    Text,
    Time,
)

from meetcoord.db.base import Base


class MeetingRequestRecord(Base):
    """
    Durable row for a single meeting request.

    `version` is the optimistic concurrency token: every write is guarded by
    `WHERE version = :expected` and bumps it by one.
    """

    __tablename__ = "meeting_requests"

    id = Column(String(36), primary_key=True)

    requester_ref = Column(String(64), nullable=False, index=True)
    responder_ref = Column(String(64), nullable=False, index=True)
    subject_ref = Column(String(64), nullable=True, index=True)

    title = Column(String(255), nullable=False, default="Meeting Request")

    original_date = Column(Date, nullable=False, index=True)
    original_start = Column(Time, nullable=True)
    original_end = Column(Time, nullable=True)

    status = Column(
        String(32),
        nullable=False,
        default="PENDING",
        index=True,
    )

    rescheduled_date = Column(Date, nullable=True)
    rescheduled_start = Column(Time, nullable=True)
    rescheduled_end = Column(Time, nullable=True)

    note = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)

    requester_name = Column(String(255), nullable=True)
    responder_name = Column(String(255), nullable=True)
    subject_title = Column(String(255), nullable=True)

    version = Column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return (
            f"<MeetingRequestRecord id={self.id} responder={self.responder_ref} "
            f"date={self.original_date} status={self.status} v={self.version}>"
        )
