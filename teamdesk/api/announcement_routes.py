from fastapi import APIRouter, Depends, Response, status

from teamdesk.api.deps import RequestContext, get_request_context, resolver, service_errors, user_service
from teamdesk.db.models import Announcement
from teamdesk.schemas.announcements import (
    AnnouncementCreateRequest,
    AnnouncementListResponse,
    AnnouncementRecipientsResponse,
    AnnouncementResponse,
    AnnouncementUpdateRequest,
)
from teamdesk.services.announcement_service import AnnouncementService

router = APIRouter(prefix="/v1/announcements", tags=["announcements"])
announcement_service = AnnouncementService(resolver)


def _to_response(ctx: RequestContext, row: Announcement) -> AnnouncementResponse:
    return AnnouncementResponse(
        id=row.id,
        title=row.title,
        content=row.content or "",
        targets=list(row.targets or []),
        author=row.author,
        publish_at=row.publish_at,
        status=row.status,
        attachment=row.attachment,
        sent=bool(row.sent),
        can_manage=announcement_service.can_manage(ctx.principal, ctx.domains, row),
    )


@router.get("", response_model=AnnouncementListResponse)
def list_announcements(ctx: RequestContext = Depends(get_request_context)) -> AnnouncementListResponse:
    with service_errors(ctx.db, "Failed to fetch announcements"):
        rows = announcement_service.list_visible(ctx.db, ctx.principal, ctx.domains)
        items = [_to_response(ctx, row) for row in rows]
    return AnnouncementListResponse(items=items, count=len(items))


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
def create_announcement(
    request: AnnouncementCreateRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> AnnouncementResponse:
    with service_errors(ctx.db, "Failed to create announcement"):
        row = announcement_service.create(ctx.db, ctx.principal, ctx.domains, request)
        ctx.log("Announcements", f'Created announcement: "{row.title}"')
        ctx.db.commit()
        return _to_response(ctx, row)


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
def update_announcement(
    announcement_id: str,
    request: AnnouncementUpdateRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> AnnouncementResponse:
    with service_errors(ctx.db, "Failed to update announcement"):
        row = announcement_service.update(ctx.db, ctx.principal, ctx.domains, announcement_id, request)
        ctx.log("Announcements", f'Updated announcement: "{row.title}" (ID: {announcement_id})')
        ctx.db.commit()
        return _to_response(ctx, row)


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement(announcement_id: str, ctx: RequestContext = Depends(get_request_context)) -> Response:
    with service_errors(ctx.db, "Failed to delete announcement"):
        announcement_service.delete(ctx.db, ctx.principal, ctx.domains, announcement_id)
        ctx.log("Announcements", f"Deleted announcement (ID: {announcement_id})")
        ctx.db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{announcement_id}/recipients", response_model=AnnouncementRecipientsResponse)
def announcement_recipients(
    announcement_id: str,
    ctx: RequestContext = Depends(get_request_context),
) -> AnnouncementRecipientsResponse:
    with service_errors(ctx.db, "Failed to resolve recipients"):
        row = announcement_service.get_visible(ctx.db, ctx.principal, ctx.domains, announcement_id)
        people = announcement_service.recipients(
            ctx.principal, ctx.domains, row, user_service.principals(ctx.db)
        )
        ready = announcement_service.is_ready(row)
    emails = sorted({p.email for p in people})
    return AnnouncementRecipientsResponse(
        announcement_id=announcement_id,
        ready=ready,
        recipients=emails,
        count=len(emails),
    )
