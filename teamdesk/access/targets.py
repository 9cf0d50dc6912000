from dataclasses import dataclass
from datetime import datetime, timezone

TASK_UNASSIGNED = "Unassigned"
TASK_STATUSES: tuple[str, ...] = (TASK_UNASSIGNED, "Pending", "In Progress", "Completed")

ANNOUNCEMENT_DRAFT = "draft"
ANNOUNCEMENT_PUBLISHED = "published"
ANNOUNCEMENT_ARCHIVED = "archived"
ANNOUNCEMENT_STATUSES: tuple[str, ...] = (ANNOUNCEMENT_DRAFT, ANNOUNCEMENT_PUBLISHED, ANNOUNCEMENT_ARCHIVED)

DOC_FOLDER = "folder"
DOC_FILE = "file"

SUGGESTION_STATUSES: tuple[str, ...] = ("Open", "In Progress", "Resolved", "Closed")


def field_of(row, name: str, default=None):
    if isinstance(row, dict):
        return row.get(name, default)
    return getattr(row, name, default)


def _ref_id(ref) -> str | None:
    value = field_of(ref, "id") if ref is not None else None
    return value if isinstance(value, str) and value else None


def _selector_list(value) -> tuple:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    # Not a list; keep one unparseable entry so it can never match.
    return (None,)


def as_utc(value):
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(slots=True, frozen=True)
class TaskTarget:
    id: str
    domain: str | None
    status: str | None
    assignee_ids: frozenset[str] = frozenset()
    assigned_to_lead_id: str | None = None

    @classmethod
    def from_row(cls, row) -> "TaskTarget":
        return cls(
            id=field_of(row, "id"),
            domain=field_of(row, "domain"),
            status=field_of(row, "status"),
            assignee_ids=frozenset(i for i in map(_ref_id, field_of(row, "assignees") or []) if i),
            assigned_to_lead_id=_ref_id(field_of(row, "assigned_to_lead")),
        )


@dataclass(slots=True, frozen=True)
class AnnouncementTarget:
    id: str
    targets: tuple = ()
    author_id: str | None = None
    publish_at: datetime | None = None
    status: str | None = None

    @classmethod
    def from_row(cls, row) -> "AnnouncementTarget":
        return cls(
            id=field_of(row, "id"),
            targets=_selector_list(field_of(row, "targets")),
            author_id=_ref_id(field_of(row, "author")),
            publish_at=as_utc(field_of(row, "publish_at")),
            status=field_of(row, "status"),
        )


@dataclass(slots=True, frozen=True)
class DocumentationTarget:
    id: str
    type: str | None
    viewable_by: tuple = ()
    parent_id: str | None = None

    @classmethod
    def from_row(cls, row) -> "DocumentationTarget":
        return cls(
            id=field_of(row, "id"),
            type=field_of(row, "type"),
            viewable_by=_selector_list(field_of(row, "viewable_by")),
            parent_id=field_of(row, "parent_id"),
        )


@dataclass(slots=True, frozen=True)
class SuggestionTarget:
    id: str
    domain: str | None
    submitter_id: str | None = None

    @classmethod
    def from_row(cls, row) -> "SuggestionTarget":
        return cls(id=field_of(row, "id"), domain=field_of(row, "domain"), submitter_id=_ref_id(field_of(row, "submitter")))
