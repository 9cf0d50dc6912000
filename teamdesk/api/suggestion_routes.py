from fastapi import APIRouter, Depends, status

from teamdesk.api.deps import RequestContext, get_request_context, resolver, service_errors
from teamdesk.db.models import Suggestion
from teamdesk.schemas.suggestions import (
    SuggestionCreateRequest,
    SuggestionListResponse,
    SuggestionReplyRequest,
    SuggestionResponse,
    SuggestionStatusRequest,
)
from teamdesk.services.suggestion_service import SuggestionService

router = APIRouter(prefix="/v1/suggestions", tags=["suggestions"])
suggestion_service = SuggestionService(resolver)


def _to_response(ctx: RequestContext, row: Suggestion) -> SuggestionResponse:
    return SuggestionResponse(
        id=row.id,
        title=row.title,
        content=row.content,
        domain=row.domain,
        status=row.status,
        submitter=row.submitter,
        responses=row.responses or [],
        can_manage=suggestion_service.can_manage(ctx.principal, ctx.domains, row),
    )


@router.get("", response_model=SuggestionListResponse)
def list_suggestions(ctx: RequestContext = Depends(get_request_context)) -> SuggestionListResponse:
    with service_errors(ctx.db, "Failed to fetch suggestions"):
        rows = suggestion_service.list_visible(ctx.db, ctx.principal, ctx.domains)
        items = [_to_response(ctx, row) for row in rows]
    return SuggestionListResponse(items=items, count=len(items))


@router.post("", response_model=SuggestionResponse, status_code=status.HTTP_201_CREATED)
def create_suggestion(
    request: SuggestionCreateRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> SuggestionResponse:
    with service_errors(ctx.db, "Failed to create suggestion"):
        row = suggestion_service.create(ctx.db, ctx.principal, ctx.domains, request)
        ctx.log("Suggestions", f'Submitted suggestion: "{row.title}"')
        ctx.db.commit()
        return _to_response(ctx, row)


@router.patch("/{suggestion_id}/status", response_model=SuggestionResponse)
def update_suggestion_status(
    suggestion_id: str,
    request: SuggestionStatusRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> SuggestionResponse:
    with service_errors(ctx.db, "Failed to update suggestion"):
        row = suggestion_service.set_status(ctx.db, ctx.principal, ctx.domains, suggestion_id, request.status)
        ctx.log("Suggestions", f'Changed status of suggestion "{row.title}" to {row.status}')
        ctx.db.commit()
        return _to_response(ctx, row)


@router.post("/{suggestion_id}/responses", response_model=SuggestionResponse)
def respond_to_suggestion(
    suggestion_id: str,
    request: SuggestionReplyRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> SuggestionResponse:
    with service_errors(ctx.db, "Failed to respond to suggestion"):
        row = suggestion_service.reply(ctx.db, ctx.principal, ctx.domains, suggestion_id, request.text)
        ctx.log("Suggestions", f'Responded to suggestion "{row.title}"')
        ctx.db.commit()
        return _to_response(ctx, row)
