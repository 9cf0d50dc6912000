from dataclasses import dataclass

from teamdesk.access.targets import field_of

SUPER_ADMIN = "super-admin"
ADMIN = "admin"
DOMAIN_LEAD = "domain-lead"
MEMBER = "member"

ROLES: tuple[str, ...] = (SUPER_ADMIN, ADMIN, DOMAIN_LEAD, MEMBER)
ADMIN_ROLES: frozenset[str] = frozenset({SUPER_ADMIN, ADMIN})


@dataclass(slots=True, frozen=True)
class Principal:
    id: str
    email: str | None = None
    name: str | None = None
    role: str | None = None
    domains: tuple[str, ...] = ()
    active_domain: str | None = None

    @property
    def effective_role(self) -> str:
        # Anything unrecognised is resolved as the least privileged role.
        return self.role if self.role in ROLES else MEMBER

    @property
    def is_admin(self) -> bool:
        return self.effective_role in ADMIN_ROLES

    @property
    def is_super_admin(self) -> bool:
        return self.effective_role == SUPER_ADMIN

    def ref(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name}

    @classmethod
    def from_user(cls, user) -> "Principal":
        domains: list[str] = []
        listed = field_of(user, "domains") or []
        if not isinstance(listed, (list, tuple)):
            listed = []
        for value in [field_of(user, "domain"), *listed]:
            if value and isinstance(value, str) and value not in domains:
                domains.append(value)
        return cls(
            id=field_of(user, "id"),
            email=field_of(user, "email"),
            name=field_of(user, "name"),
            role=field_of(user, "role"),
            domains=tuple(domains),
            active_domain=field_of(user, "active_domain"),
        )


SYSTEM_PRINCIPAL = Principal(id="system", email="system@local", name="System", role=SUPER_ADMIN)


class AuthorizationError(Exception):
    pass


def known_role(role: str) -> bool:
    return role in ROLES


def ensure_allowed(allowed: bool, message: str = "You do not have permission to perform this action.") -> None:
    if not allowed:
        raise AuthorizationError(message)


ROLE_PERMISSIONS: dict[str, set[str]] = {
    SUPER_ADMIN: {
        "users:read",
        "users:manage",
        "domains:manage",
        "domains:members",
        "logs:read",
        "leaderboard:leads",
        "site:manage",
    },
    ADMIN: {
        "users:read",
        "domains:members",
        "logs:read",
        "leaderboard:leads",
        "site:manage",
    },
    DOMAIN_LEAD: {
        "users:read",
        "leaderboard:leads",
    },
    MEMBER: set(),
}


def has_permission(principal: Principal | None, permission: str) -> bool:
    if principal is None:
        return False
    return permission in ROLE_PERMISSIONS.get(principal.effective_role, set())


def ensure_permission(principal: Principal | None, permission: str) -> None:
    if not has_permission(principal, permission):
        raise AuthorizationError(f"Missing permission: {permission}")
