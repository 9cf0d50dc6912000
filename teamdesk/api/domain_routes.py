from fastapi import APIRouter, Depends, HTTPException, status

from teamdesk.api.deps import (
    RequestContext,
    domain_service,
    get_request_context,
    require_permission,
    service_errors,
)
from teamdesk.db.models import Domain
from teamdesk.schemas.domains import (
    DomainCreateRequest,
    DomainDeleteResponse,
    DomainListResponse,
    DomainMemberRequest,
    DomainResponse,
)

router = APIRouter(prefix="/v1/domains", tags=["domains"])


def _to_response(row: Domain) -> DomainResponse:
    return DomainResponse(name=row.name, leads=list(row.leads or []), members=list(row.members or []))


@router.get("", response_model=DomainListResponse)
def list_domains(ctx: RequestContext = Depends(get_request_context)) -> DomainListResponse:
    items = [_to_response(row) for row in domain_service.list_domains(ctx.db)]
    return DomainListResponse(items=items, count=len(items))


@router.post("", response_model=DomainResponse, status_code=status.HTTP_201_CREATED)
def create_domain(
    request: DomainCreateRequest,
    ctx: RequestContext = Depends(require_permission("domains:manage")),
) -> DomainResponse:
    with service_errors(ctx.db, "Failed to create domain"):
        row = domain_service.create_domain(ctx.db, request.name)
        ctx.log("Domain Management", f'Created domain: "{row.name}"')
        ctx.db.commit()
        return _to_response(row)


@router.delete("/{name}", response_model=DomainDeleteResponse)
def delete_domain(
    name: str,
    ctx: RequestContext = Depends(require_permission("domains:manage")),
) -> DomainDeleteResponse:
    with service_errors(ctx.db, "Failed to delete domain"):
        deleted_tasks = domain_service.delete_domain(ctx.db, name)
        ctx.log("Domain Management", f'Deleted domain "{name}" and {deleted_tasks} associated tasks')
        ctx.db.commit()
    return DomainDeleteResponse(name=name, deleted_tasks=deleted_tasks)


@router.post("/{name}/members", response_model=DomainResponse)
def add_domain_member(
    name: str,
    request: DomainMemberRequest,
    ctx: RequestContext = Depends(require_permission("domains:members")),
) -> DomainResponse:
    with service_errors(ctx.db, "Failed to add member"):
        row = domain_service.add_member(ctx.db, name, request.email)
        ctx.log("Permissions", f'Added member {request.email.strip().lower()} to domain "{name}"')
        ctx.db.commit()
        return _to_response(row)


@router.post("/{name}/leads", response_model=DomainResponse)
def add_domain_lead(
    name: str,
    request: DomainMemberRequest,
    ctx: RequestContext = Depends(require_permission("domains:members")),
) -> DomainResponse:
    with service_errors(ctx.db, "Failed to add lead"):
        row = domain_service.add_lead(ctx.db, name, request.email)
        ctx.log("Permissions", f'Added lead {request.email.strip().lower()} to domain "{name}"')
        ctx.db.commit()
        return _to_response(row)


@router.delete("/{name}/members/{email}", response_model=DomainResponse)
def remove_domain_member(
    name: str,
    email: str,
    ctx: RequestContext = Depends(require_permission("domains:members")),
) -> DomainResponse:
    with service_errors(ctx.db, "Failed to remove member"):
        removed = domain_service.remove_member(ctx.db, name, email)
        if not removed:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found in domain.")
        ctx.log("Permissions", f'Removed member {email.lower()} from domain "{name}"')
        ctx.db.commit()
        return _to_response(domain_service.get(ctx.db, name))


@router.delete("/{name}/leads/{email}", response_model=DomainResponse)
def remove_domain_lead(
    name: str,
    email: str,
    ctx: RequestContext = Depends(require_permission("domains:members")),
) -> DomainResponse:
    with service_errors(ctx.db, "Failed to remove lead"):
        removed = domain_service.remove_lead(ctx.db, name, email)
        if not removed:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found in domain.")
        ctx.log("Permissions", f'Removed lead {email.lower()} from domain "{name}"')
        ctx.db.commit()
        return _to_response(domain_service.get(ctx.db, name))
