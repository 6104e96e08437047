# meetcoord/core/errors.py
from __future__ import annotations


class MeetingRequestError(Exception):
    """
    Base class for all domain errors raised by the meeting request core.

    The core never formats user-facing text; callers (the API layer) are
    responsible for translating these into responses.
    """


class InvalidTimeError(MeetingRequestError, ValueError):
    """
    Raised when a time-of-day value is not in HH:mm or HH:mm:ss form,
    or is out of range.
    """

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid time of day: {value!r}")


class InvalidWindowError(MeetingRequestError, ValueError):
    """
    Raised when a proposed window does not end strictly after it starts.
    """


class InvalidTransitionError(MeetingRequestError):
    """
    Raised when a lifecycle transition is not allowed from the current status.
    """

    def __init__(self, request_id: str, current: str, target: str) -> None:
        self.request_id = request_id
        self.current = current
        self.target = target
        super().__init__(
            f"Meeting request {request_id} cannot move from {current} to {target}"
        )


class ConcurrentModificationError(MeetingRequestError):
    """
    Raised by a repository when the stored record changed between read and write.

    Callers should refetch the record and retry the transition.
    """

    def __init__(self, request_id: str, expected_version: int) -> None:
        self.request_id = request_id
        self.expected_version = expected_version
        super().__init__(
            f"Meeting request {request_id} was modified concurrently "
            f"(expected version {expected_version})"
        )


class MeetingRequestNotFoundError(MeetingRequestError, LookupError):
    """
    Raised when no meeting request exists with the given id.
    """

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Meeting request with id={request_id} not found")
