import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamdesk.access.domains import DomainSnapshot
from teamdesk.access.resolver import AccessResolver
from teamdesk.access.selectors import invalid_selectors
from teamdesk.access.targets import DOC_FILE, DOC_FOLDER, DocumentationTarget
from teamdesk.db.models import DocumentationItem
from teamdesk.schemas.documentation import DocumentationCreateRequest, DocumentationUpdateRequest
from teamdesk.security import Principal, ensure_allowed
from teamdesk.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class DocumentationService:
    def __init__(self, resolver: AccessResolver) -> None:
        self.resolver = resolver

    def list_visible(self, db: Session, principal: Principal, snapshot: DomainSnapshot) -> list[DocumentationItem]:
        rows = db.execute(select(DocumentationItem)).scalars().all()
        for row in rows:
            bad = invalid_selectors(row.viewable_by)
            if bad:
                logger.warning("documentation item %s has unrecognised selectors %s", row.id, bad)
        visible = self.resolver.filter_visible(principal, rows, DocumentationTarget.from_row, snapshot)
        # Folders first, then by name.
        return sorted(visible, key=lambda r: (r.type != DOC_FOLDER, r.name.lower()))

    def get_visible(self, db: Session, principal: Principal, snapshot: DomainSnapshot, item_id: str) -> DocumentationItem:
        row = db.get(DocumentationItem, item_id)
        if row is None or not self.resolver.can_view(principal, DocumentationTarget.from_row(row), snapshot):
            raise NotFoundError("Item not found.")
        return row

    def _get_for_change(
        self, db: Session, principal: Principal, snapshot: DomainSnapshot, item_id: str
    ) -> DocumentationItem:
        row = db.get(DocumentationItem, item_id)
        if row is None:
            raise NotFoundError("Item not found.")
        target = DocumentationTarget.from_row(row)
        # Items the caller can neither see nor manage read as missing.
        if not (
            self.resolver.can_view(principal, target, snapshot)
            or self.resolver.can_manage(principal, target, snapshot)
        ):
            raise NotFoundError("Item not found.")
        return row

    def can_manage(self, principal: Principal, snapshot: DomainSnapshot) -> bool:
        return self.resolver.can_create_documentation(principal, snapshot)

    def create(
        self,
        db: Session,
        principal: Principal,
        snapshot: DomainSnapshot,
        request: DocumentationCreateRequest,
    ) -> DocumentationItem:
        ensure_allowed(self.can_manage(principal, snapshot))
        if request.parent_id:
            parent = db.get(DocumentationItem, request.parent_id)
            if parent is None:
                raise NotFoundError("Parent folder not found.")
            if parent.type != DOC_FOLDER:
                raise ValueError("Parent must be a folder.")

        row = DocumentationItem(
            name=request.name,
            type=request.type,
            parent_id=request.parent_id,
            viewable_by=list(request.viewable_by),
            file_path=request.file_path if request.type == DOC_FILE else None,
            mime_type=request.mime_type if request.type == DOC_FILE else None,
            created_by=principal.ref(),
        )
        db.add(row)
        db.flush()
        return row

    def update(
        self,
        db: Session,
        principal: Principal,
        snapshot: DomainSnapshot,
        item_id: str,
        request: DocumentationUpdateRequest,
    ) -> DocumentationItem:
        row = self._get_for_change(db, principal, snapshot, item_id)
        ensure_allowed(
            self.resolver.can_manage(principal, DocumentationTarget.from_row(row), snapshot),
            "You do not have permission to edit this item.",
        )
        if request.name is None and request.viewable_by is None:
            raise ValueError("No update data provided.")
        if request.name is not None:
            row.name = request.name
        if request.viewable_by is not None:
            row.viewable_by = list(request.viewable_by)
        db.flush()
        return row

    def delete(
        self, db: Session, principal: Principal, snapshot: DomainSnapshot, item_id: str
    ) -> tuple[list[str], list[str]]:
        """Delete an item; folders take their whole subtree with them.

        Returns the deleted ids and the object-storage keys of deleted files so
        the caller can remove the stored blobs.
        """
        row = self._get_for_change(db, principal, snapshot, item_id)
        ensure_allowed(
            self.resolver.can_manage(principal, DocumentationTarget.from_row(row), snapshot),
            "You do not have permission to delete this item.",
        )

        doomed = self._subtree(db, row)
        deleted_ids = [item.id for item in doomed]
        file_keys = [item.file_path for item in doomed if item.type == DOC_FILE and item.file_path]
        # Children before parents so the parent_id foreign key never dangles.
        for item in reversed(doomed):
            db.delete(item)
            db.flush()
        return deleted_ids, file_keys

    def _subtree(self, db: Session, root: DocumentationItem) -> list[DocumentationItem]:
        ordered = [root]
        frontier = [root.id]
        seen = {root.id}
        while frontier:
            children = db.execute(
                select(DocumentationItem).where(DocumentationItem.parent_id.in_(frontier))
            ).scalars().all()
            frontier = []
            for child in children:
                if child.id in seen:
                    continue
                seen.add(child.id)
                ordered.append(child)
                if child.type == DOC_FOLDER:
                    frontier.append(child.id)
        return ordered

    def path(
        self, db: Session, principal: Principal, snapshot: DomainSnapshot, item_id: str
    ) -> list[DocumentationItem]:
        row = self.get_visible(db, principal, snapshot, item_id)
        trail = [row]
        seen = {row.id}
        while trail[0].parent_id and trail[0].parent_id not in seen:
            parent = db.get(DocumentationItem, trail[0].parent_id)
            if parent is None:
                break
            seen.add(parent.id)
            trail.insert(0, parent)
        return [
            item
            for item in trail
            if self.resolver.can_view(principal, DocumentationTarget.from_row(item), snapshot)
        ]
