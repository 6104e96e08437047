# meetcoord/schemas/statistics.py
from pydantic import BaseModel, Field


class MeetingStatistics(BaseModel):
    """
    Summary of a collection of meeting requests by status and by proximity
    to a caller-supplied reference date.
    """

    total: int = Field(0, description="Number of requests considered.", examples=[5])
    pending: int = Field(0, description="Requests in PENDING.", examples=[2])
    accepted: int = Field(0, description="Requests in ACCEPTED.", examples=[1])
    rejected: int = Field(0, description="Requests in REJECTED.", examples=[1])
    rescheduled: int = Field(0, description="Requests in RESCHEDULED.", examples=[1])
    within_next_week: int = Field(
        0,
        description=(
            "Requests whose effective date falls within [today, today + 7 days], "
            "both ends inclusive."
        ),
        examples=[3],
    )
