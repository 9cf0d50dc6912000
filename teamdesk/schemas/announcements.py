from datetime import datetime

from pydantic import BaseModel, Field

from teamdesk.access.targets import ANNOUNCEMENT_STATUSES
from teamdesk.schemas.selectors import AudienceList
from teamdesk.schemas.users import UserRef

STATUS_PATTERN = rf"^({'|'.join(ANNOUNCEMENT_STATUSES)})$"


class AnnouncementCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = ""
    targets: AudienceList
    publish_at: datetime | None = None
    status: str = Field(default="draft", pattern=STATUS_PATTERN)
    attachment: str | None = Field(default=None, max_length=1024)


class AnnouncementUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = None
    targets: AudienceList | None = None
    publish_at: datetime | None = None
    status: str | None = Field(default=None, pattern=STATUS_PATTERN)
    attachment: str | None = Field(default=None, max_length=1024)


class AnnouncementResponse(BaseModel):
    id: str
    title: str
    content: str
    targets: list[str]
    author: UserRef
    publish_at: datetime
    status: str
    attachment: str | None
    sent: bool
    can_manage: bool = False


class AnnouncementListResponse(BaseModel):
    items: list[AnnouncementResponse] = Field(default_factory=list)
    count: int


class AnnouncementRecipientsResponse(BaseModel):
    announcement_id: str
    ready: bool
    recipients: list[str] = Field(default_factory=list)
    count: int
