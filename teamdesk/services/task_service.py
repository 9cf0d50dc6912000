from datetime import datetime, timezone
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamdesk.access.domains import DomainSnapshot
from teamdesk.access.resolver import AccessResolver
from teamdesk.access.targets import TASK_UNASSIGNED, TaskTarget
from teamdesk.db.models import Task, User
from teamdesk.schemas.tasks import TaskCreateRequest, TaskUpdateRequest
from teamdesk.security import Principal, ensure_allowed
from teamdesk.services.errors import NotFoundError


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _refs(items) -> list[dict]:
    return [item.model_dump() for item in items]


class TaskService:
    def __init__(self, resolver: AccessResolver) -> None:
        self.resolver = resolver

    def list_visible(
        self,
        db: Session,
        principal: Principal,
        snapshot: DomainSnapshot,
        domain: str | None = None,
    ) -> list[Task]:
        stmt = select(Task).order_by(Task.created_at.desc())
        # Scoping only; access is decided by the resolver below.
        scope = domain or principal.active_domain
        if scope:
            stmt = stmt.where(Task.domain == scope)
        rows = db.execute(stmt).scalars().all()
        return self.resolver.filter_visible(principal, rows, TaskTarget.from_row, snapshot)

    def get_visible(self, db: Session, principal: Principal, snapshot: DomainSnapshot, task_id: str) -> Task:
        task = db.get(Task, task_id)
        # Hidden tasks are reported as missing so their existence does not leak.
        if task is None or not self.resolver.can_view(principal, TaskTarget.from_row(task), snapshot):
            raise NotFoundError("Task not found.")
        return task

    def can_manage(self, principal: Principal, snapshot: DomainSnapshot, task: Task) -> bool:
        return self.resolver.can_manage(principal, TaskTarget.from_row(task), snapshot)

    def create(
        self,
        db: Session,
        principal: Principal,
        snapshot: DomainSnapshot,
        request: TaskCreateRequest,
    ) -> Task:
        domain = request.domain or principal.active_domain
        if not domain and request.assigned_to_lead is not None:
            lead = db.get(User, request.assigned_to_lead.id)
            if lead is not None:
                lead_domains = Principal.from_user(lead).domains
                domain = lead_domains[0] if lead_domains else None
        if not domain and not principal.is_admin:
            own = principal.domains or tuple(sorted(snapshot.effective_domains(principal)))
            domain = own[0] if own else None
        if domain and domain not in snapshot:
            raise ValueError(f'Domain "{domain}" does not exist.')

        ensure_allowed(
            self.resolver.can_create_task(principal, domain, snapshot),
            "You do not have permission to create tasks here.",
        )

        routed_to_lead = request.assigned_to_lead is not None and not request.assignees
        task = Task(
            title=request.title,
            description=request.description,
            due_date=request.due_date,
            status=TASK_UNASSIGNED if routed_to_lead else "Pending",
            domain=domain,
            assignees=_refs(request.assignees),
            assigned_to_lead=request.assigned_to_lead.model_dump() if request.assigned_to_lead else None,
            comments=[],
            submissions=[],
            attachment=request.attachment,
            created_by=principal.ref(),
        )
        db.add(task)
        db.flush()
        return task

    def update(
        self,
        db: Session,
        principal: Principal,
        snapshot: DomainSnapshot,
        task_id: str,
        request: TaskUpdateRequest,
    ) -> Task:
        task = self.get_visible(db, principal, snapshot, task_id)
        ensure_allowed(self.can_manage(principal, snapshot, task), "You do not have permission to edit this task.")

        updates = request.model_dump(exclude_unset=True)
        if not updates:
            raise ValueError("No update data provided.")
        for field in ("title", "description", "due_date", "status", "attachment"):
            if field in updates:
                setattr(task, field, updates[field])
        if "assignees" in updates:
            task.assignees = _refs(request.assignees or [])
            if task.assignees and task.status == TASK_UNASSIGNED and "status" not in updates:
                task.status = "Pending"
        if "assigned_to_lead" in updates:
            task.assigned_to_lead = request.assigned_to_lead.model_dump() if request.assigned_to_lead else None
        db.flush()
        return task

    def delete(self, db: Session, principal: Principal, snapshot: DomainSnapshot, task_id: str) -> Task:
        task = self.get_visible(db, principal, snapshot, task_id)
        ensure_allowed(self.can_manage(principal, snapshot, task), "You do not have permission to delete this task.")
        db.delete(task)
        db.flush()
        return task

    def add_comment(
        self, db: Session, principal: Principal, snapshot: DomainSnapshot, task_id: str, text: str
    ) -> Task:
        task = self.get_visible(db, principal, snapshot, task_id)
        comment = {
            "id": uuid.uuid4().hex,
            "text": text,
            "author": principal.ref(),
            "timestamp": _now().isoformat(),
        }
        task.comments = [*(task.comments or []), comment]
        db.flush()
        return task

    def add_submission(
        self, db: Session, principal: Principal, snapshot: DomainSnapshot, task_id: str, file_key: str
    ) -> Task:
        task = self.get_visible(db, principal, snapshot, task_id)
        ensure_allowed(
            self.resolver.can_submit(principal, TaskTarget.from_row(task)),
            "Only assignees can submit work for this task.",
        )
        submission = {
            "id": uuid.uuid4().hex,
            "author": principal.ref(),
            "file": file_key,
            "timestamp": _now().isoformat(),
        }
        task.submissions = [*(task.submissions or []), submission]
        db.flush()
        return task

    def review_submission(
        self,
        db: Session,
        principal: Principal,
        snapshot: DomainSnapshot,
        task_id: str,
        submission_id: str,
        updates: dict,
    ) -> Task:
        task = self.get_visible(db, principal, snapshot, task_id)
        ensure_allowed(self.can_manage(principal, snapshot, task), "You do not have permission to rate this work.")
        if not updates:
            raise ValueError("No rating or remarks provided.")

        submissions = [dict(item) for item in task.submissions or []]
        for item in submissions:
            if item.get("id") == submission_id:
                item.update(updates)
                break
        else:
            raise NotFoundError("Submission not found.")
        task.submissions = submissions
        db.flush()
        return task
