import logging

from fastapi import APIRouter, Depends, status

from teamdesk.api.deps import RequestContext, get_request_context, resolver, service_errors
from teamdesk.db.models import DocumentationItem
from teamdesk.schemas.documentation import (
    DocumentationCreateRequest,
    DocumentationDeleteResponse,
    DocumentationItemResponse,
    DocumentationListResponse,
    DocumentationUpdateRequest,
)
from teamdesk.services.documentation_service import DocumentationService

router = APIRouter(prefix="/v1/documentation", tags=["documentation"])
logger = logging.getLogger(__name__)
documentation_service = DocumentationService(resolver)


def _to_response(row: DocumentationItem) -> DocumentationItemResponse:
    return DocumentationItemResponse(
        id=row.id,
        name=row.name,
        type=row.type,
        parent_id=row.parent_id,
        viewable_by=list(row.viewable_by or []),
        file_path=row.file_path,
        mime_type=row.mime_type,
        created_by=row.created_by,
        created_at=row.created_at,
    )


@router.get("", response_model=DocumentationListResponse)
def list_documentation(ctx: RequestContext = Depends(get_request_context)) -> DocumentationListResponse:
    with service_errors(ctx.db, "Failed to fetch documentation"):
        rows = documentation_service.list_visible(ctx.db, ctx.principal, ctx.domains)
        items = [_to_response(row) for row in rows]
        can_manage = documentation_service.can_manage(ctx.principal, ctx.domains)
    return DocumentationListResponse(items=items, count=len(items), can_manage=can_manage)


@router.post("", response_model=DocumentationItemResponse, status_code=status.HTTP_201_CREATED)
def create_documentation_item(
    request: DocumentationCreateRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> DocumentationItemResponse:
    with service_errors(ctx.db, "Failed to create documentation item"):
        row = documentation_service.create(ctx.db, ctx.principal, ctx.domains, request)
        if row.type == "folder":
            ctx.log("Documentation", f'Created documentation folder: "{row.name}"')
        else:
            ctx.log("Documentation", f'Uploaded documentation file: "{row.name}"')
        ctx.db.commit()
        return _to_response(row)


@router.put("/{item_id}", response_model=DocumentationItemResponse)
def update_documentation_item(
    item_id: str,
    request: DocumentationUpdateRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> DocumentationItemResponse:
    with service_errors(ctx.db, "Failed to update documentation item"):
        row = documentation_service.update(ctx.db, ctx.principal, ctx.domains, item_id, request)
        if request.name is not None:
            ctx.log("Documentation", f'Renamed documentation {row.type}: "{row.name}" (ID: {item_id})')
        if request.viewable_by is not None:
            ctx.log("Documentation", f"Updated permissions for documentation item (ID: {item_id})")
        ctx.db.commit()
        return _to_response(row)


@router.delete("/{item_id}", response_model=DocumentationDeleteResponse)
def delete_documentation_item(
    item_id: str,
    ctx: RequestContext = Depends(get_request_context),
) -> DocumentationDeleteResponse:
    with service_errors(ctx.db, "Failed to delete documentation item"):
        deleted_ids, file_keys = documentation_service.delete(ctx.db, ctx.principal, ctx.domains, item_id)
        ctx.log("Documentation", f"Deleted documentation item and its contents (ID: {item_id})")
        ctx.db.commit()
    if file_keys:
        logger.info("documentation delete released %d stored files", len(file_keys))
    return DocumentationDeleteResponse(deleted_ids=deleted_ids, deleted_files=file_keys)


@router.get("/{item_id}/path", response_model=DocumentationListResponse)
def documentation_path(item_id: str, ctx: RequestContext = Depends(get_request_context)) -> DocumentationListResponse:
    with service_errors(ctx.db, "Failed to resolve documentation path"):
        trail = documentation_service.path(ctx.db, ctx.principal, ctx.domains, item_id)
        items = [_to_response(row) for row in trail]
    return DocumentationListResponse(items=items, count=len(items))
