from datetime import datetime, timezone
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamdesk.access.domains import DomainSnapshot
from teamdesk.access.resolver import AccessResolver
from teamdesk.access.targets import SuggestionTarget
from teamdesk.db.models import Suggestion
from teamdesk.schemas.suggestions import SuggestionCreateRequest
from teamdesk.security import Principal, ensure_allowed
from teamdesk.services.errors import NotFoundError


class SuggestionService:
    def __init__(self, resolver: AccessResolver) -> None:
        self.resolver = resolver

    def list_visible(self, db: Session, principal: Principal, snapshot: DomainSnapshot) -> list[Suggestion]:
        rows = db.execute(select(Suggestion).order_by(Suggestion.created_at.desc())).scalars().all()
        return self.resolver.filter_visible(principal, rows, SuggestionTarget.from_row, snapshot)

    def get_visible(self, db: Session, principal: Principal, snapshot: DomainSnapshot, suggestion_id: str) -> Suggestion:
        row = db.get(Suggestion, suggestion_id)
        if row is None or not self.resolver.can_view(principal, SuggestionTarget.from_row(row), snapshot):
            raise NotFoundError("Suggestion not found.")
        return row

    def can_manage(self, principal: Principal, snapshot: DomainSnapshot, row: Suggestion) -> bool:
        return self.resolver.can_manage(principal, SuggestionTarget.from_row(row), snapshot)

    def create(
        self, db: Session, principal: Principal, snapshot: DomainSnapshot, request: SuggestionCreateRequest
    ) -> Suggestion:
        domain = request.domain or principal.active_domain
        if domain and domain not in snapshot:
            raise ValueError(f'Domain "{domain}" does not exist.')
        row = Suggestion(
            title=request.title,
            content=request.content,
            domain=domain,
            status="Open",
            submitter=principal.ref(),
            responses=[],
        )
        db.add(row)
        db.flush()
        return row

    def set_status(
        self, db: Session, principal: Principal, snapshot: DomainSnapshot, suggestion_id: str, status: str
    ) -> Suggestion:
        row = self.get_visible(db, principal, snapshot, suggestion_id)
        ensure_allowed(self.can_manage(principal, snapshot, row), "You cannot change the status of this suggestion.")
        row.status = status
        db.flush()
        return row

    def reply(
        self, db: Session, principal: Principal, snapshot: DomainSnapshot, suggestion_id: str, text: str
    ) -> Suggestion:
        row = self.get_visible(db, principal, snapshot, suggestion_id)
        ensure_allowed(self.can_manage(principal, snapshot, row), "You cannot respond to this suggestion.")
        response = {
            "id": uuid.uuid4().hex,
            "text": text,
            "author": principal.ref(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        row.responses = [*(row.responses or []), response]
        db.flush()
        return row
