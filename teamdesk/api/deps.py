from contextlib import contextmanager
from dataclasses import dataclass
import logging
from uuid import uuid4

from fastapi import Depends, Header, HTTPException, Request, status
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from teamdesk.access.domains import DomainSnapshot
from teamdesk.access.resolver import AccessResolver
from teamdesk.config import get_settings
from teamdesk.db.session import SessionLocal
from teamdesk.security import (
    SYSTEM_PRINCIPAL,
    AuthorizationError,
    Principal,
    ensure_permission,
)
from teamdesk.services.activity_service import ActivityService
from teamdesk.services.domain_service import DomainService
from teamdesk.services.errors import ConflictError, NotFoundError
from teamdesk.services.site_status_service import SiteStatusService
from teamdesk.services.user_service import UserService

logger = logging.getLogger(__name__)

settings = get_settings()
resolver = AccessResolver.from_settings(settings)
activity_service = ActivityService()
domain_service = DomainService()
user_service = UserService()
site_status_service = SiteStatusService()


class PrincipalHeader(BaseModel):
    id: str
    email: str | None = None


@dataclass(slots=True)
class RequestContext:
    db: Session
    principal: Principal
    domains: DomainSnapshot
    request_id: str
    ip_address: str | None

    def log(self, category: str, message: str) -> None:
        activity_service.record(
            self.db,
            category=category,
            message=message,
            actor=self.principal,
            request_id=self.request_id,
        )


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_principal(
    db: Session = Depends(get_db),
    x_user: str | None = Header(default=None, alias="X-User"),
) -> Principal:
    if not settings.auth_enabled:
        return SYSTEM_PRINCIPAL
    if not x_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You must be logged in to perform this action.",
        )
    try:
        claimed = PrincipalHeader.model_validate_json(x_user)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Malformed X-User header") from exc

    # The header only names the caller; role and domains come from the stored record.
    user = user_service.find(db, claimed.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
    return Principal.from_user(user)


def get_open_context(
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    x_request_id: str | None = Header(default=None, alias="X-Request-Id"),
) -> RequestContext:
    request_id = (x_request_id or str(uuid4())).strip()
    ip_address = request.client.host if request.client else None
    return RequestContext(
        db=db,
        principal=principal,
        domains=domain_service.snapshot(db),
        request_id=request_id,
        ip_address=ip_address,
    )


def get_request_context(ctx: RequestContext = Depends(get_open_context)) -> RequestContext:
    """Context for regular routes; non-admins are turned away while the site is locked."""
    if not ctx.principal.is_admin:
        reason = site_status_service.lockout_reason(site_status_service.get(ctx.db))
        if reason:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=reason)
    return ctx


def require_permission(permission: str):
    def permission_dependency(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        try:
            ensure_permission(ctx.principal, permission)
        except AuthorizationError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
        return ctx

    return permission_dependency


@contextmanager
def service_errors(db: Session, failure: str):
    """Translate service exceptions into HTTP errors, rolling back on any failure."""
    try:
        yield
    except HTTPException:
        db.rollback()
        raise
    except AuthorizationError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ConflictError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        db.rollback()
        logger.exception("%s", failure)
        raise HTTPException(status_code=500, detail=f"{failure}: {exc}") from exc
