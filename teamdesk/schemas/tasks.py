from datetime import datetime

from pydantic import BaseModel, Field

from teamdesk.access.targets import TASK_STATUSES
from teamdesk.schemas.users import UserRef

STATUS_PATTERN = rf"^({'|'.join(TASK_STATUSES)})$"


class TaskComment(BaseModel):
    id: str
    text: str
    author: UserRef
    timestamp: datetime


class TaskSubmission(BaseModel):
    id: str
    author: UserRef
    file: str
    timestamp: datetime
    quality_score: float | None = None
    remarks: str | None = None


class TaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    due_date: datetime | None = None
    domain: str | None = Field(default=None, max_length=128)
    assignees: list[UserRef] = Field(default_factory=list)
    assigned_to_lead: UserRef | None = None
    attachment: str | None = Field(default=None, max_length=1024)


class TaskUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    due_date: datetime | None = None
    status: str | None = Field(default=None, pattern=STATUS_PATTERN)
    assignees: list[UserRef] | None = None
    assigned_to_lead: UserRef | None = None
    attachment: str | None = Field(default=None, max_length=1024)


class TaskCommentRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=4000)


class TaskSubmissionRequest(BaseModel):
    file: str = Field(..., min_length=1, max_length=1024)


class SubmissionReviewRequest(BaseModel):
    quality_score: float | None = Field(default=None, ge=1, le=5)
    remarks: str | None = Field(default=None, max_length=4000)


class TaskResponse(BaseModel):
    id: str
    title: str
    description: str
    due_date: datetime | None
    status: str
    domain: str | None
    assignees: list[UserRef]
    assigned_to_lead: UserRef | None
    comments: list[TaskComment]
    submissions: list[TaskSubmission]
    attachment: str | None
    created_by: UserRef | None
    can_manage: bool = False


class TaskListResponse(BaseModel):
    items: list[TaskResponse] = Field(default_factory=list)
    count: int
