from dataclasses import dataclass, field
from typing import Iterable, Mapping

from teamdesk.access.targets import field_of
from teamdesk.security import DOMAIN_LEAD, MEMBER, Principal


def _email_set(values) -> frozenset[str]:
    if not isinstance(values, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(e for e in map(_normalize_email, values) if e)


def _normalize_email(value: str | None) -> str | None:
    if not value or not isinstance(value, str):
        return None
    return value.strip().lower() or None


@dataclass(slots=True, frozen=True)
class DomainRecord:
    name: str
    leads: frozenset[str] = field(default_factory=frozenset)
    members: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(cls, name: str, leads: Iterable[str] | None = None, members: Iterable[str] | None = None) -> "DomainRecord":
        return cls(
            name=name,
            leads=_email_set(leads),
            members=_email_set(members),
        )

    @classmethod
    def from_row(cls, row) -> "DomainRecord":
        return cls.build(field_of(row, "name"), field_of(row, "leads"), field_of(row, "members"))


class DomainSnapshot:
    """Point-in-time view of every domain's leads and members.

    The record is authoritative; the denormalized ``domain``/``domains`` fields
    on a principal only widen membership of domains that still have a record.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Iterable[DomainRecord] = ()) -> None:
        self._records: Mapping[str, DomainRecord] = {r.name: r for r in records}

    @classmethod
    def from_rows(cls, rows: Iterable) -> "DomainSnapshot":
        return cls(DomainRecord.from_row(row) for row in rows)

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

    def get(self, name: str | None) -> DomainRecord | None:
        if not name:
            return None
        return self._records.get(name)

    def names(self) -> list[str]:
        return sorted(self._records)

    def effective_domains(self, principal: Principal) -> frozenset[str]:
        domains = set(principal.domains)
        email = _normalize_email(principal.email)
        if email:
            for record in self._records.values():
                if email in record.leads or email in record.members:
                    domains.add(record.name)
        return frozenset(domains)

    def is_lead(self, principal: Principal, domain: str | None) -> bool:
        record = self.get(domain)
        if record is None:
            return False
        email = _normalize_email(principal.email)
        if email and email in record.leads:
            return True
        return principal.effective_role == DOMAIN_LEAD and domain in principal.domains

    def is_member(self, principal: Principal, domain: str | None) -> bool:
        record = self.get(domain)
        if record is None:
            return False
        email = _normalize_email(principal.email)
        if email and email in record.members:
            return True
        return principal.effective_role == MEMBER and domain in principal.domains

    def belongs_to(self, principal: Principal, domain: str | None) -> bool:
        if self.get(domain) is None:
            return False
        return domain in self.effective_domains(principal)


EMPTY_SNAPSHOT = DomainSnapshot()
