from datetime import datetime

from pydantic import BaseModel, Field

from teamdesk.access.targets import SUGGESTION_STATUSES
from teamdesk.schemas.users import UserRef

STATUS_PATTERN = rf"^({'|'.join(SUGGESTION_STATUSES)})$"


class SuggestionResponseItem(BaseModel):
    id: str
    text: str
    author: UserRef
    timestamp: datetime


class SuggestionCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    domain: str | None = Field(default=None, max_length=128)


class SuggestionStatusRequest(BaseModel):
    status: str = Field(..., pattern=STATUS_PATTERN)


class SuggestionReplyRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=4000)


class SuggestionResponse(BaseModel):
    id: str
    title: str
    content: str
    domain: str | None
    status: str
    submitter: UserRef
    responses: list[SuggestionResponseItem]
    can_manage: bool = False


class SuggestionListResponse(BaseModel):
    items: list[SuggestionResponse] = Field(default_factory=list)
    count: int
