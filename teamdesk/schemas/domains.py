from pydantic import BaseModel, Field


class DomainCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128, pattern=r"^[^@\s]+$")


class DomainMemberRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)


class DomainResponse(BaseModel):
    name: str
    leads: list[str] = Field(default_factory=list)
    members: list[str] = Field(default_factory=list)


class DomainListResponse(BaseModel):
    items: list[DomainResponse] = Field(default_factory=list)
    count: int


class DomainDeleteResponse(BaseModel):
    name: str
    deleted_tasks: int
