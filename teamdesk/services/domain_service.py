from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from teamdesk.access.domains import DomainSnapshot
from teamdesk.db.models import Domain, Task
from teamdesk.services.errors import ConflictError, NotFoundError

_RESERVED_SUFFIXES = ("-lead", "-member")
_RESERVED_PREFIXES = ("role-", "domain-")


def _normalize_email(email: str) -> str:
    value = email.strip().lower()
    if "@" not in value:
        raise ValueError(f"Invalid email: {email}")
    return value


class DomainService:
    def snapshot(self, db: Session) -> DomainSnapshot:
        return DomainSnapshot.from_rows(db.execute(select(Domain)).scalars().all())

    def list_domains(self, db: Session) -> list[Domain]:
        return list(db.execute(select(Domain).order_by(Domain.name)).scalars().all())

    def get(self, db: Session, name: str) -> Domain:
        row = db.get(Domain, name)
        if row is None:
            raise NotFoundError(f'Domain "{name}" not found.')
        return row

    def create_domain(self, db: Session, name: str) -> Domain:
        clean = name.strip()
        # Names that would read as a different selector are refused.
        if (
            not clean
            or clean == "all"
            or clean.startswith(_RESERVED_PREFIXES)
            or clean.endswith(_RESERVED_SUFFIXES)
        ):
            raise ValueError(f"Invalid domain name: {name}")
        if db.get(Domain, clean) is not None:
            raise ConflictError("Domain already exists.")

        row = Domain(name=clean, leads=[], members=[])
        db.add(row)
        db.flush()
        return row

    def delete_domain(self, db: Session, name: str) -> int:
        row = self.get(db, name)
        result = db.execute(delete(Task).where(Task.domain == name))
        db.delete(row)
        db.flush()
        return int(result.rowcount or 0)

    def add_member(self, db: Session, name: str, email: str) -> Domain:
        return self._add(db, name, email, field="members")

    def add_lead(self, db: Session, name: str, email: str) -> Domain:
        return self._add(db, name, email, field="leads")

    def remove_member(self, db: Session, name: str, email: str) -> bool:
        return self._remove(db, name, email, field="members")

    def remove_lead(self, db: Session, name: str, email: str) -> bool:
        return self._remove(db, name, email, field="leads")

    def _add(self, db: Session, name: str, email: str, *, field: str) -> Domain:
        row = self.get(db, name)
        value = _normalize_email(email)
        current = list(getattr(row, field) or [])
        if value in {e.lower() for e in current}:
            raise ConflictError(f"This email is already one of the domain's {field}.")
        setattr(row, field, [*current, value])
        db.flush()
        return row

    def _remove(self, db: Session, name: str, email: str, *, field: str) -> bool:
        row = self.get(db, name)
        value = _normalize_email(email)
        current = list(getattr(row, field) or [])
        remaining = [e for e in current if e.lower() != value]
        if len(remaining) == len(current):
            return False
        setattr(row, field, remaining)
        db.flush()
        return True
