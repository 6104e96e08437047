# meetcoord/schemas/meeting_request.py
from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MeetingRequestStatus(str, Enum):
    """
    Lifecycle states of a meeting request.

    PENDING is the initial state; ACCEPTED and REJECTED are terminal.
    """

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    RESCHEDULED = "RESCHEDULED"

    @property
    def is_terminal(self) -> bool:
        return self in (MeetingRequestStatus.ACCEPTED, MeetingRequestStatus.REJECTED)


class TimeWindow(BaseModel):
    """
    A date plus a time-of-day range.

    `start`/`end` may be missing on legacy records; consumers decide how to
    degrade (see the time utilities and the conflict detector).
    """

    day: date = Field(..., description="Calendar date of the window.", examples=["2025-06-17"])
    start: time | None = Field(None, description="Start time of day.", examples=["09:00:00"])
    end: time | None = Field(None, description="End time of day.", examples=["10:00:00"])


class MeetingRequest(BaseModel):
    """
    The sole entity of the core: a meeting proposed by a requester and
    answered by a responder.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Stable unique identifier assigned at creation.")
    requester_ref: str = Field(..., description="Party proposing the meeting.")
    responder_ref: str = Field(
        ..., description="Party who must accept, reject or reschedule."
    )
    subject_ref: str | None = Field(
        None, description="Optional case or matter this meeting concerns."
    )
    title: str = Field("Meeting Request", description="Human label.")

    original_date: date = Field(..., description="Date of the initially proposed slot.")
    original_start: time | None = Field(None, description="Initially proposed start.")
    original_end: time | None = Field(None, description="Initially proposed end.")

    status: MeetingRequestStatus = Field(MeetingRequestStatus.PENDING)

    rescheduled_date: date | None = Field(None)
    rescheduled_start: time | None = Field(None)
    rescheduled_end: time | None = Field(None)

    note: str | None = Field(
        None,
        description="Free text: rejection reason, reschedule note or meeting link.",
    )
    created_at: datetime = Field(..., description="Creation timestamp (UTC).")

    # Cached display strings supplied by the case/client directory.
    requester_name: str | None = Field(None)
    responder_name: str | None = Field(None)
    subject_title: str | None = Field(None)

    version: int = Field(
        1,
        description="Optimistic concurrency token, bumped by the store on every write.",
    )

    @property
    def is_rescheduled(self) -> bool:
        return self.rescheduled_date is not None


# --------------------------------------------------------------------------
# Request payloads (HTTP API)
# --------------------------------------------------------------------------

class MeetingRequestCreate(BaseModel):
    """
    Payload for proposing a new meeting.

    Times are accepted as raw strings and parsed by the time utilities so
    malformed values surface as InvalidTimeError.
    """

    requester_ref: str = Field(..., examples=["client-42"])
    responder_ref: str = Field(..., examples=["lawyer-7"])
    subject_ref: str | None = Field(None, examples=["case-2025-001"])
    title: str = Field("Meeting Request", examples=["Case review"])
    meeting_date: date = Field(..., examples=["2025-06-17"])
    start_time: str = Field(..., examples=["09:00"])
    end_time: str = Field(..., examples=["10:00:00"])
    note: str | None = Field(None)
    requester_name: str | None = Field(None)
    responder_name: str | None = Field(None)
    subject_title: str | None = Field(None)


class AcceptPayload(BaseModel):
    meeting_link: str | None = Field(
        None,
        description="Optional meeting link or location, stored in the note.",
    )


class RejectPayload(BaseModel):
    reason: str | None = Field(None, description="Optional rejection reason.")


class ReschedulePayload(BaseModel):
    """
    Counter-proposal from the responder.

    Either `end_time` or `duration_minutes` should be supplied; when both are
    missing the configured default duration is used.
    """

    meeting_date: date = Field(..., examples=["2025-06-18"])
    start_time: str = Field(..., examples=["14:00"])
    end_time: str | None = Field(None, examples=["15:00"])
    duration_minutes: int | None = Field(None, gt=0, examples=[60])
    note: str | None = Field(None)


class ConflictCheckPayload(BaseModel):
    responder_ref: str = Field(..., description="Whose commitments to check against.")
    meeting_date: date = Field(...)
    start_time: str = Field(...)
    end_time: str = Field(...)
    exclude_id: str | None = Field(
        None, description="Request id to ignore (the one being rescheduled)."
    )


# --------------------------------------------------------------------------
# Responses
# --------------------------------------------------------------------------

class ConflictCheckResult(BaseModel):
    has_conflict: bool
    conflicting_ids: list[str] = Field(default_factory=list)


class RescheduleResult(BaseModel):
    """
    Outcome of a reschedule. `has_conflict` is advisory only.
    """

    request: MeetingRequest
    has_conflict: bool = False


class MeetingRequestDisplay(BaseModel):
    """
    Display-ready projection of a meeting request for the presentation layer.
    """

    id: str
    title: str
    status: MeetingRequestStatus
    display_date: str = Field(..., examples=["Tue, Jun 17, 2025"])
    display_time: str = Field(..., examples=["9:00 AM - 10:00 AM"])
    starts_at: datetime = Field(
        ...,
        description="Start of the effective window; a missing start counts as 09:00.",
    )
    duration: str = Field(..., examples=["60 minutes"])
    is_rescheduled: bool
    note: str
    requester_name: str
    responder_name: str
    subject_title: str
