"""Single source of truth for who may see and who may change what.

Every decision is a pure function of (principal, target, domain snapshot) and
denies by default: a missing principal, an unknown target type, an
unparseable selector or a domain without a record all resolve to ``False``.
"""

from datetime import datetime, timezone
from typing import Iterable, Mapping, TypeVar

from teamdesk.access.domains import EMPTY_SNAPSHOT, DomainRecord, DomainSnapshot
from teamdesk.access.selectors import (
    LEAD,
    MEMBER,
    AllSelector,
    DomainRoleSelector,
    DomainSelector,
    EmailSelector,
    RoleSelector,
    Selector,
    parse_selectors,
)
from teamdesk.access.targets import (
    ANNOUNCEMENT_PUBLISHED,
    TASK_UNASSIGNED,
    AnnouncementTarget,
    DocumentationTarget,
    SuggestionTarget,
    TaskTarget,
    as_utc,
)
from teamdesk.security import DOMAIN_LEAD, Principal

T = TypeVar("T")

DomainsArg = DomainSnapshot | Iterable[DomainRecord] | None


def _snapshot(domains: DomainsArg) -> DomainSnapshot:
    if isinstance(domains, DomainSnapshot):
        return domains
    if isinstance(domains, Mapping):
        domains = domains.values()
    if domains is None or isinstance(domains, (str, bytes)) or not isinstance(domains, Iterable):
        return EMPTY_SNAPSHOT
    records = tuple(r for r in domains if isinstance(r, DomainRecord))
    if not records:
        return EMPTY_SNAPSHOT
    return DomainSnapshot(records)


def _principal(value) -> Principal | None:
    if isinstance(value, Principal) and value.id:
        return value
    return None


class AccessResolver:
    def __init__(
        self,
        *,
        documentation_domain: str = "Documentation",
        admin_can_create_tasks: bool = False,
        admin_can_manage_tasks: bool = True,
    ) -> None:
        self.documentation_domain = documentation_domain
        self.admin_can_create_tasks = admin_can_create_tasks
        self.admin_can_manage_tasks = admin_can_manage_tasks

    @classmethod
    def from_settings(cls, settings) -> "AccessResolver":
        return cls(
            documentation_domain=settings.documentation_domain,
            admin_can_create_tasks=settings.admin_can_create_tasks,
            admin_can_manage_tasks=settings.admin_can_manage_tasks,
        )

    # -- view ---------------------------------------------------------------

    def can_view(self, principal, target, domains: DomainsArg = None, now: datetime | None = None) -> bool:
        principal = _principal(principal)
        if principal is None:
            return False
        snapshot = _snapshot(domains)
        if isinstance(target, TaskTarget):
            return self._can_view_task(principal, target, snapshot)
        if isinstance(target, AnnouncementTarget):
            return self._can_view_announcement(principal, target, snapshot, now)
        if isinstance(target, DocumentationTarget):
            return self._can_view_documentation(principal, target, snapshot)
        if isinstance(target, SuggestionTarget):
            return self._can_view_suggestion(principal, target, snapshot)
        return False

    def _can_view_task(self, principal: Principal, task: TaskTarget, snapshot: DomainSnapshot) -> bool:
        if principal.is_admin:
            return True
        if principal.effective_role == DOMAIN_LEAD:
            if not task.domain or task.domain not in snapshot.effective_domains(principal):
                return False
            # Work routed to a lead stays hidden from other leads until distributed.
            return task.status != TASK_UNASSIGNED or task.assigned_to_lead_id == principal.id
        return principal.id in task.assignee_ids

    def _can_view_announcement(
        self,
        principal: Principal,
        announcement: AnnouncementTarget,
        snapshot: DomainSnapshot,
        now: datetime | None,
    ) -> bool:
        if principal.is_admin:
            return True
        # Authors see their own announcements before the publish time as well.
        if announcement.author_id and announcement.author_id == principal.id:
            return True
        if announcement.status != ANNOUNCEMENT_PUBLISHED:
            return False
        if announcement.publish_at is not None:
            if not isinstance(announcement.publish_at, datetime):
                return False
            current = as_utc(now) if isinstance(now, datetime) else datetime.now(timezone.utc)
            if as_utc(announcement.publish_at) > current:
                return False
        return self.matches(principal, announcement.targets, snapshot)

    def _can_view_documentation(
        self, principal: Principal, item: DocumentationTarget, snapshot: DomainSnapshot
    ) -> bool:
        if principal.is_super_admin:
            return True
        return self.matches(principal, item.viewable_by, snapshot)

    def _can_view_suggestion(
        self, principal: Principal, suggestion: SuggestionTarget, snapshot: DomainSnapshot
    ) -> bool:
        if principal.is_admin:
            return True
        if suggestion.submitter_id and suggestion.submitter_id == principal.id:
            return True
        return self._leads_domain(principal, suggestion.domain, snapshot)

    # -- manage -------------------------------------------------------------

    def can_manage(self, principal, target, domains: DomainsArg = None) -> bool:
        principal = _principal(principal)
        if principal is None:
            return False
        snapshot = _snapshot(domains)
        if isinstance(target, TaskTarget):
            return self._can_manage_task(principal, target, snapshot)
        if isinstance(target, AnnouncementTarget):
            if principal.is_admin:
                return True
            return (
                principal.effective_role == DOMAIN_LEAD
                and bool(target.author_id)
                and target.author_id == principal.id
            )
        if isinstance(target, DocumentationTarget):
            return self._can_manage_documentation(principal, snapshot)
        if isinstance(target, SuggestionTarget):
            return principal.is_admin or self._leads_domain(principal, target.domain, snapshot)
        return False

    def _can_manage_task(self, principal: Principal, task: TaskTarget, snapshot: DomainSnapshot) -> bool:
        if principal.is_super_admin:
            return True
        if principal.is_admin:
            return self.admin_can_manage_tasks
        return self._leads_domain(principal, task.domain, snapshot)

    def _can_manage_documentation(self, principal: Principal, snapshot: DomainSnapshot) -> bool:
        if principal.is_super_admin:
            return True
        return principal.effective_role == DOMAIN_LEAD and snapshot.is_lead(principal, self.documentation_domain)

    def _leads_domain(self, principal: Principal, domain: str | None, snapshot: DomainSnapshot) -> bool:
        if principal.effective_role != DOMAIN_LEAD or not domain:
            return False
        return domain in snapshot.effective_domains(principal)

    # -- create -------------------------------------------------------------

    def can_create_task(self, principal, domain: str | None, domains: DomainsArg = None) -> bool:
        principal = _principal(principal)
        if principal is None:
            return False
        if principal.is_super_admin:
            return True
        if principal.is_admin:
            return self.admin_can_create_tasks
        return self._leads_domain(principal, domain, _snapshot(domains))

    def can_create_announcement(self, principal) -> bool:
        principal = _principal(principal)
        if principal is None:
            return False
        return principal.is_admin or principal.effective_role == DOMAIN_LEAD

    def can_create_documentation(self, principal, domains: DomainsArg = None) -> bool:
        principal = _principal(principal)
        if principal is None:
            return False
        return self._can_manage_documentation(principal, _snapshot(domains))

    def can_target(self, principal, targets: Iterable[str] | None, domains: DomainsArg = None) -> bool:
        """Whether ``principal`` may address an announcement to ``targets``.

        Admins may use any selector. Domain leads are limited to selectors
        scoped to a domain they belong to.
        """
        principal = _principal(principal)
        if principal is None:
            return False
        if principal.is_admin:
            return True
        if principal.effective_role != DOMAIN_LEAD:
            return False
        own = _snapshot(domains).effective_domains(principal)
        selectors = parse_selectors(targets)
        if not selectors:
            return False
        for selector in selectors:
            if isinstance(selector, (DomainSelector, DomainRoleSelector)) and selector.domain in own:
                continue
            return False
        return True

    def can_submit(self, principal, task) -> bool:
        principal = _principal(principal)
        if principal is None or not isinstance(task, TaskTarget):
            return False
        return principal.id in task.assignee_ids

    # -- selectors ----------------------------------------------------------

    def matches(self, principal, selectors: Iterable[str] | None, domains: DomainsArg = None) -> bool:
        principal = _principal(principal)
        if principal is None:
            return False
        parsed = parse_selectors(selectors)
        snapshot = _snapshot(domains)
        if any(isinstance(s, AllSelector) for s in parsed):
            return True
        return any(self._selector_matches(principal, s, snapshot) for s in parsed)

    def _selector_matches(self, principal: Principal, selector: Selector, snapshot: DomainSnapshot) -> bool:
        if isinstance(selector, AllSelector):
            return True
        if isinstance(selector, RoleSelector):
            return principal.effective_role == selector.role
        if isinstance(selector, DomainSelector):
            return snapshot.belongs_to(principal, selector.domain)
        if isinstance(selector, DomainRoleSelector):
            if selector.subrole == LEAD:
                return snapshot.is_lead(principal, selector.domain)
            if selector.subrole == MEMBER:
                return snapshot.is_member(principal, selector.domain)
            return False
        if isinstance(selector, EmailSelector):
            return isinstance(principal.email, str) and principal.email.strip().lower() == selector.email
        return False

    def audience(
        self, selectors: Iterable[str] | None, principals: Iterable[Principal], domains: DomainsArg = None
    ) -> list[Principal]:
        snapshot = _snapshot(domains)
        return [p for p in principals if self.matches(p, selectors, snapshot)]

    def filter_visible(
        self,
        principal,
        items: Iterable[T],
        to_target,
        domains: DomainsArg = None,
        now: datetime | None = None,
    ) -> list[T]:
        snapshot = _snapshot(domains)
        return [item for item in items if self.can_view(principal, to_target(item), snapshot, now)]


_default_resolver = AccessResolver()


def can_view(principal, target, domains: DomainsArg = None, now: datetime | None = None) -> bool:
    return _default_resolver.can_view(principal, target, domains, now)


def can_manage(principal, target, domains: DomainsArg = None) -> bool:
    return _default_resolver.can_manage(principal, target, domains)
