from datetime import datetime

from pydantic import BaseModel, Field

from teamdesk.schemas.users import UserRef


class SiteStatusResponse(BaseModel):
    emergency_shutdown: bool = False
    maintenance_mode: bool = False
    maintenance_eta: str | None = None
    locked: bool = False
    updated_by: UserRef | None = None
    updated_at: datetime | None = None


class SiteStatusUpdateRequest(BaseModel):
    emergency_shutdown: bool | None = None
    maintenance_mode: bool | None = None
    maintenance_eta: str | None = Field(default=None, max_length=255)
