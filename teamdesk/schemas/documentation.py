from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from teamdesk.schemas.selectors import SelectorList
from teamdesk.schemas.users import UserRef


class DocumentationCreateRequest(BaseModel):
    type: str = Field(..., pattern=r"^(folder|file)$")
    name: str = Field(..., min_length=1, max_length=255)
    parent_id: str | None = None
    viewable_by: SelectorList = Field(default_factory=list)
    file_path: str | None = Field(default=None, max_length=1024)
    mime_type: str | None = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def _file_needs_path(self) -> "DocumentationCreateRequest":
        if self.type == "file" and not self.file_path:
            raise ValueError("file_path is required for files")
        return self


class DocumentationUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    viewable_by: SelectorList | None = None


class DocumentationItemResponse(BaseModel):
    id: str
    name: str
    type: str
    parent_id: str | None
    viewable_by: list[str]
    file_path: str | None
    mime_type: str | None
    created_by: UserRef | None
    created_at: datetime | None = None


class DocumentationListResponse(BaseModel):
    items: list[DocumentationItemResponse] = Field(default_factory=list)
    count: int
    can_manage: bool = False


class DocumentationDeleteResponse(BaseModel):
    deleted_ids: list[str] = Field(default_factory=list)
    deleted_files: list[str] = Field(default_factory=list)
