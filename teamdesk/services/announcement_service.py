from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamdesk.access.domains import DomainSnapshot
from teamdesk.access.resolver import AccessResolver
from teamdesk.access.targets import ANNOUNCEMENT_PUBLISHED, AnnouncementTarget, as_utc
from teamdesk.db.models import Announcement
from teamdesk.schemas.announcements import AnnouncementCreateRequest, AnnouncementUpdateRequest
from teamdesk.security import Principal, ensure_allowed
from teamdesk.services.errors import NotFoundError


class AnnouncementService:
    def __init__(self, resolver: AccessResolver) -> None:
        self.resolver = resolver

    def list_visible(
        self,
        db: Session,
        principal: Principal,
        snapshot: DomainSnapshot,
        now: datetime | None = None,
    ) -> list[Announcement]:
        rows = db.execute(select(Announcement).order_by(Announcement.publish_at.desc())).scalars().all()
        return self.resolver.filter_visible(principal, rows, AnnouncementTarget.from_row, snapshot, now)

    def get_visible(
        self, db: Session, principal: Principal, snapshot: DomainSnapshot, announcement_id: str
    ) -> Announcement:
        row = db.get(Announcement, announcement_id)
        if row is None or not self.resolver.can_view(principal, AnnouncementTarget.from_row(row), snapshot):
            raise NotFoundError("Announcement not found.")
        return row

    def can_manage(self, principal: Principal, snapshot: DomainSnapshot, row: Announcement) -> bool:
        return self.resolver.can_manage(principal, AnnouncementTarget.from_row(row), snapshot)

    def create(
        self,
        db: Session,
        principal: Principal,
        snapshot: DomainSnapshot,
        request: AnnouncementCreateRequest,
    ) -> Announcement:
        ensure_allowed(self.resolver.can_create_announcement(principal))
        ensure_allowed(
            self.resolver.can_target(principal, request.targets, snapshot),
            "You cannot address an announcement to that audience.",
        )
        row = Announcement(
            title=request.title,
            content=request.content,
            targets=list(request.targets),
            author=principal.ref(),
            publish_at=as_utc(request.publish_at) or datetime.now(timezone.utc),
            status=request.status,
            attachment=request.attachment,
            sent=False,
        )
        db.add(row)
        db.flush()
        return row

    def update(
        self,
        db: Session,
        principal: Principal,
        snapshot: DomainSnapshot,
        announcement_id: str,
        request: AnnouncementUpdateRequest,
    ) -> Announcement:
        row = self.get_visible(db, principal, snapshot, announcement_id)
        ensure_allowed(
            self.can_manage(principal, snapshot, row),
            "You do not have permission to edit this announcement.",
        )
        updates = request.model_dump(exclude_unset=True)
        if not updates:
            raise ValueError("No update data provided.")
        if "targets" in updates:
            if not request.targets:
                raise ValueError("At least one target audience is required.")
            ensure_allowed(
                self.resolver.can_target(principal, request.targets, snapshot),
                "You cannot address an announcement to that audience.",
            )
            row.targets = list(request.targets)
        if "publish_at" in updates and request.publish_at is not None:
            row.publish_at = as_utc(request.publish_at)
        for field in ("title", "content", "status", "attachment"):
            if field in updates and updates[field] is not None:
                setattr(row, field, updates[field])
        db.flush()
        return row

    def delete(self, db: Session, principal: Principal, snapshot: DomainSnapshot, announcement_id: str) -> Announcement:
        row = self.get_visible(db, principal, snapshot, announcement_id)
        ensure_allowed(
            self.can_manage(principal, snapshot, row),
            "You do not have permission to delete this announcement.",
        )
        db.delete(row)
        db.flush()
        return row

    def is_ready(self, row: Announcement, now: datetime | None = None) -> bool:
        current = as_utc(now) or datetime.now(timezone.utc)
        return row.status == ANNOUNCEMENT_PUBLISHED and as_utc(row.publish_at) <= current

    def recipients(
        self,
        principal: Principal,
        snapshot: DomainSnapshot,
        row: Announcement,
        people: list[Principal],
    ) -> list[Principal]:
        ensure_allowed(
            self.can_manage(principal, snapshot, row),
            "You do not have permission to notify this audience.",
        )
        return [p for p in self.resolver.audience(row.targets, people, snapshot) if p.email]
