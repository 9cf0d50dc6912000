from datetime import datetime

from pydantic import BaseModel, Field

from teamdesk.security import ROLES

ROLE_PATTERN = rf"^({'|'.join(ROLES)})$"


class UserRef(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None


class UserCreateRequest(BaseModel):
    email: str = Field(..., min_length=5, max_length=255)
    name: str | None = Field(default=None, max_length=255)
    role: str = Field(default="member", pattern=ROLE_PATTERN)
    domains: list[str] = Field(default_factory=list)


class UserRoleUpdateRequest(BaseModel):
    role: str = Field(..., pattern=ROLE_PATTERN)


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=1024)
    active_domain: str | None = Field(default=None, max_length=128)


class UserResponse(BaseModel):
    id: str
    email: str | None
    name: str | None
    role: str | None
    domains: list[str]
    active_domain: str | None
    created_at: datetime | None = None


class UserListResponse(BaseModel):
    items: list[UserResponse] = Field(default_factory=list)
    count: int
