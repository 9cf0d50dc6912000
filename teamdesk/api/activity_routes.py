from fastapi import APIRouter, Depends, Query

from teamdesk.api.deps import RequestContext, activity_service, require_permission
from teamdesk.schemas.activity import ActivityLogEntry, ActivityLogListResponse

router = APIRouter(prefix="/v1/logs", tags=["logs"])


@router.get("", response_model=ActivityLogListResponse)
def list_activity_logs(
    ctx: RequestContext = Depends(require_permission("logs:read")),
    limit: int = Query(default=100, ge=1, le=500),
    category: str | None = Query(default=None),
    actor_user_id: str | None = Query(default=None),
) -> ActivityLogListResponse:
    rows = activity_service.list_logs(
        ctx.db,
        limit=limit,
        category=category,
        actor_user_id=actor_user_id,
    )

    items = [
        ActivityLogEntry(
            id=row.id,
            category=row.category,
            message=row.message,
            actor_user_id=row.actor_user_id,
            actor_email=row.actor_email,
            request_id=row.request_id,
            created_at=row.created_at,
        )
        for row in rows
    ]
    return ActivityLogListResponse(items=items, count=len(items))
