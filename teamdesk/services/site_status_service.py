from sqlalchemy.orm import Session

from teamdesk.db.models import SiteStatus
from teamdesk.security import Principal

SITE_STATUS_ID = "site"


class SiteStatusService:
    def get(self, db: Session) -> SiteStatus | None:
        return db.get(SiteStatus, SITE_STATUS_ID)

    def lockout_reason(self, row: SiteStatus | None) -> str | None:
        """Message shown to callers who are locked out, or ``None`` when the site is open."""
        if row is None:
            return None
        if row.emergency_shutdown:
            return "Emergency Shutdown: the site is temporarily unavailable."
        if row.maintenance_mode:
            if row.maintenance_eta:
                return f"The site is currently under maintenance. Expected back around {row.maintenance_eta}."
            return "The site is currently under maintenance."
        return None

    def update(self, db: Session, principal: Principal, updates: dict) -> SiteStatus:
        if not updates:
            raise ValueError("No update data provided.")
        row = self.get(db)
        if row is None:
            row = SiteStatus(id=SITE_STATUS_ID, emergency_shutdown=False, maintenance_mode=False)
            db.add(row)

        if updates.get("emergency_shutdown") is not None:
            row.emergency_shutdown = updates["emergency_shutdown"]
        if updates.get("maintenance_mode") is not None:
            row.maintenance_mode = updates["maintenance_mode"]

        eta = updates.get("maintenance_eta")
        if eta:
            if not row.maintenance_mode:
                raise ValueError("An ETA can only be set while maintenance mode is on.")
            row.maintenance_eta = eta
        if not row.maintenance_mode:
            row.maintenance_eta = None

        row.updated_by = principal.ref()
        db.flush()
        return row
