from fastapi import APIRouter, Depends

from teamdesk.api.deps import (
    RequestContext,
    get_open_context,
    require_permission,
    service_errors,
    site_status_service,
)
from teamdesk.db.models import SiteStatus
from teamdesk.schemas.site_status import SiteStatusResponse, SiteStatusUpdateRequest

router = APIRouter(prefix="/v1/site-status", tags=["site-status"])


def _to_response(row: SiteStatus | None) -> SiteStatusResponse:
    if row is None:
        return SiteStatusResponse()
    return SiteStatusResponse(
        emergency_shutdown=bool(row.emergency_shutdown),
        maintenance_mode=bool(row.maintenance_mode),
        maintenance_eta=row.maintenance_eta,
        locked=site_status_service.lockout_reason(row) is not None,
        updated_by=row.updated_by,
        updated_at=row.updated_at,
    )


# Readable during a lockout so clients can show why they are turned away.
@router.get("", response_model=SiteStatusResponse)
def get_site_status(ctx: RequestContext = Depends(get_open_context)) -> SiteStatusResponse:
    return _to_response(site_status_service.get(ctx.db))


@router.put("", response_model=SiteStatusResponse)
def update_site_status(
    request: SiteStatusUpdateRequest,
    ctx: RequestContext = Depends(require_permission("site:manage")),
) -> SiteStatusResponse:
    with service_errors(ctx.db, "Failed to update site status"):
        updates = request.model_dump(exclude_unset=True)
        row = site_status_service.update(ctx.db, ctx.principal, updates)
        changes = ", ".join(f"{key}={value}" for key, value in updates.items())
        ctx.log("Site Status", f"Site status updated: {changes}")
        ctx.db.commit()
        return _to_response(row)
