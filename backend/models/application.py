from datetime import datetime
from typing import Literal

from pydantic import BaseModel

ApplicationStatus = Literal[
    "wishlist",
    "applied",
    "phone_screen",
    "interview",
    "offer",
    "rejected",
    "withdrawn",
    "accepted",
]
TimelineEventType = Literal["created", "status", "note"]


class JobSnapshot(BaseModel):
    """Job fields copied onto the application when it is created."""

    title: str
    company: str
    location: str | None = None


class TimelineEvent(BaseModel):
    id: str
    at: datetime
    type: TimelineEventType
    text: str | None = None
    from_status: ApplicationStatus | None = None
    to_status: ApplicationStatus | None = None


class Note(BaseModel):
    id: str
    text: str
    created_at: datetime
