from datetime import datetime

from pydantic import BaseModel, Field


class ActivityLogEntry(BaseModel):
    id: str
    category: str
    message: str
    actor_user_id: str | None
    actor_email: str | None
    request_id: str | None
    created_at: datetime | None


class ActivityLogListResponse(BaseModel):
    items: list[ActivityLogEntry] = Field(default_factory=list)
    count: int
