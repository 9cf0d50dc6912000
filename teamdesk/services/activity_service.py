import logging

from sqlalchemy import and_, desc, select
from sqlalchemy.orm import Session

from teamdesk.db.models import ActivityLog
from teamdesk.security import Principal

logger = logging.getLogger(__name__)

CATEGORIES = (
    "Authentication",
    "Task Management",
    "Submissions",
    "Announcements",
    "Permissions",
    "Domain Management",
    "Suggestions",
    "Documentation",
    "Site Status",
    "Error",
)


class ActivityService:
    def record(
        self,
        db: Session,
        *,
        category: str,
        message: str,
        actor: Principal | None,
        request_id: str | None = None,
    ) -> ActivityLog:
        if category not in CATEGORIES:
            logger.warning("unknown activity category %r, recording as-is", category)
        row = ActivityLog(
            category=category,
            message=message,
            actor_user_id=actor.id if actor else None,
            actor_email=actor.email if actor else None,
            request_id=request_id,
        )
        db.add(row)
        db.flush()
        return row

    def list_logs(
        self,
        db: Session,
        *,
        limit: int = 100,
        category: str | None = None,
        actor_user_id: str | None = None,
    ) -> list[ActivityLog]:
        stmt = select(ActivityLog)
        filters = []
        if category:
            filters.append(ActivityLog.category == category)
        if actor_user_id:
            filters.append(ActivityLog.actor_user_id == actor_user_id)
        if filters:
            stmt = stmt.where(and_(*filters))

        stmt = stmt.order_by(desc(ActivityLog.created_at)).limit(limit)
        return list(db.execute(stmt).scalars().all())
