from fastapi import APIRouter, Depends

from teamdesk.api.deps import (
    RequestContext,
    get_request_context,
    require_permission,
    service_errors,
    user_service,
)
from teamdesk.db.models import User
from teamdesk.schemas.users import (
    ProfileUpdateRequest,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserRoleUpdateRequest,
)
from teamdesk.security import SUPER_ADMIN, AuthorizationError, Principal

router = APIRouter(prefix="/v1/users", tags=["users"])


def _to_response(user: User) -> UserResponse:
    principal = Principal.from_user(user)
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        domains=list(principal.domains),
        active_domain=user.active_domain,
        created_at=user.created_at,
    )


@router.get("/me", response_model=UserResponse)
def me(ctx: RequestContext = Depends(get_request_context)) -> UserResponse:
    with service_errors(ctx.db, "Failed to fetch profile"):
        user = user_service.find(ctx.db, ctx.principal.id)
        if user is None:
            return UserResponse(
                id=ctx.principal.id,
                email=ctx.principal.email,
                name=ctx.principal.name,
                role=ctx.principal.role,
                domains=list(ctx.principal.domains),
                active_domain=ctx.principal.active_domain,
            )
        return _to_response(user)


@router.patch("/me", response_model=UserResponse)
def update_profile(
    request: ProfileUpdateRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> UserResponse:
    with service_errors(ctx.db, "Failed to update profile"):
        user = user_service.update_profile(
            ctx.db,
            ctx.principal,
            ctx.domains,
            name=request.name,
            avatar_url=request.avatar_url,
            active_domain=request.active_domain,
        )
        ctx.db.commit()
        return _to_response(user)


@router.get("", response_model=UserListResponse)
def list_users(ctx: RequestContext = Depends(require_permission("users:read"))) -> UserListResponse:
    items = [_to_response(user) for user in user_service.list_users(ctx.db)]
    return UserListResponse(items=items, count=len(items))


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    request: UserCreateRequest,
    ctx: RequestContext = Depends(require_permission("users:manage")),
) -> UserResponse:
    with service_errors(ctx.db, "Failed to create user"):
        user = user_service.create_user(
            ctx.db,
            email=request.email,
            name=request.name,
            role=request.role,
            domains=request.domains,
        )
        ctx.log("Permissions", f"Created user {user.email} with role {user.role}")
        ctx.db.commit()
        return _to_response(user)


@router.patch("/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: str,
    request: UserRoleUpdateRequest,
    ctx: RequestContext = Depends(require_permission("users:manage")),
) -> UserResponse:
    with service_errors(ctx.db, "Failed to update role"):
        if user_id == ctx.principal.id and request.role != SUPER_ADMIN:
            raise AuthorizationError("You cannot remove your own super-admin role.")
        user = user_service.set_role(ctx.db, user_id, request.role)
        ctx.log("Permissions", f"Changed role of {user.email} to {user.role}")
        ctx.db.commit()
        return _to_response(user)
