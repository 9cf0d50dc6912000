"""Audience selector grammar.

Selectors are stored as plain strings on announcements (``targets``) and
documentation items (``viewable_by``)::

    "all"
    "role-<role>"          role in super-admin | admin | domain-lead | member
    "domain-<name>"
    "<name>-lead"
    "<name>-member"
    "<email>"              anything containing "@"

They are parsed once into the variants below; anything that does not fit the
grammar becomes an ``InvalidSelector`` which never matches.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Union

from teamdesk.security import ROLES

LEAD = "lead"
MEMBER = "member"

_ROLE_PREFIX = "role-"
_DOMAIN_PREFIX = "domain-"
_SUBROLE_SUFFIXES = {f"-{LEAD}": LEAD, f"-{MEMBER}": MEMBER}


@dataclass(slots=True, frozen=True)
class AllSelector:
    def __str__(self) -> str:
        return "all"


@dataclass(slots=True, frozen=True)
class RoleSelector:
    role: str

    def __str__(self) -> str:
        return f"{_ROLE_PREFIX}{self.role}"


@dataclass(slots=True, frozen=True)
class DomainSelector:
    domain: str

    def __str__(self) -> str:
        return f"{_DOMAIN_PREFIX}{self.domain}"


@dataclass(slots=True, frozen=True)
class DomainRoleSelector:
    domain: str
    subrole: str

    def __str__(self) -> str:
        return f"{self.domain}-{self.subrole}"


@dataclass(slots=True, frozen=True)
class EmailSelector:
    email: str

    def __str__(self) -> str:
        return self.email


@dataclass(slots=True, frozen=True)
class InvalidSelector:
    raw: str

    def __str__(self) -> str:
        return self.raw


Selector = Union[AllSelector, RoleSelector, DomainSelector, DomainRoleSelector, EmailSelector, InvalidSelector]


def parse_selector(raw: str) -> Selector:
    if not isinstance(raw, str):
        return InvalidSelector(repr(raw))
    return _parse_token(raw)


@lru_cache(maxsize=4096)
def _parse_token(raw: str) -> Selector:
    token = raw
    if token == "all":
        return AllSelector()
    if "@" in token:
        local, _, host = token.partition("@")
        if local and host and " " not in token:
            return EmailSelector(token.lower())
        return InvalidSelector(raw)
    if token.startswith(_ROLE_PREFIX):
        role = token[len(_ROLE_PREFIX):]
        return RoleSelector(role) if role in ROLES else InvalidSelector(raw)
    if token.startswith(_DOMAIN_PREFIX):
        domain = token[len(_DOMAIN_PREFIX):]
        return DomainSelector(domain) if domain else InvalidSelector(raw)
    for suffix, subrole in _SUBROLE_SUFFIXES.items():
        if token.endswith(suffix):
            domain = token[: -len(suffix)]
            return DomainRoleSelector(domain, subrole) if domain else InvalidSelector(raw)
    return InvalidSelector(raw)


def parse_selectors(raw: Iterable[str] | None) -> tuple[Selector, ...]:
    if not raw:
        return ()
    if isinstance(raw, str):
        # A bare string is not a selector list.
        return (InvalidSelector(raw),)
    if not isinstance(raw, (list, tuple, set, frozenset)):
        return (InvalidSelector(repr(raw)),)
    return tuple(parse_selector(item) for item in raw)


def invalid_selectors(raw: Iterable[str] | None) -> list[str]:
    return [str(sel) for sel in parse_selectors(raw) if isinstance(sel, InvalidSelector)]
