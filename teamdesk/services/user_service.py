from sqlalchemy import select
from sqlalchemy.orm import Session

from teamdesk.access.domains import DomainSnapshot
from teamdesk.db.models import User
from teamdesk.security import Principal, known_role
from teamdesk.services.errors import ConflictError, NotFoundError


class UserService:
    def get(self, db: Session, user_id: str) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user

    def find(self, db: Session, user_id: str) -> User | None:
        return db.get(User, user_id)

    def list_users(self, db: Session) -> list[User]:
        return list(db.execute(select(User).order_by(User.email)).scalars().all())

    def principals(self, db: Session) -> list[Principal]:
        return [Principal.from_user(u) for u in self.list_users(db)]

    def create_user(
        self,
        db: Session,
        *,
        email: str,
        name: str | None = None,
        role: str = "member",
        domains: list[str] | None = None,
        user_id: str | None = None,
    ) -> User:
        role_normalized = role.strip().lower()
        if not known_role(role_normalized):
            raise ValueError(f"Unknown role: {role}")

        email_normalized = email.strip().lower()
        existing = db.execute(select(User).where(User.email == email_normalized)).scalar_one_or_none()
        if existing:
            raise ConflictError("User already exists")

        clean_domains = [d for d in (domains or []) if d]
        user = User(
            email=email_normalized,
            name=name,
            role=role_normalized,
            domain=clean_domains[0] if clean_domains else None,
            domains=clean_domains,
        )
        if user_id:
            user.id = user_id
        db.add(user)
        db.flush()
        return user

    def set_role(self, db: Session, user_id: str, role: str) -> User:
        if not known_role(role):
            raise ValueError(f"Unknown role: {role}")
        user = self.get(db, user_id)
        user.role = role
        db.flush()
        return user

    def update_profile(
        self,
        db: Session,
        principal: Principal,
        snapshot: DomainSnapshot,
        *,
        name: str | None = None,
        avatar_url: str | None = None,
        active_domain: str | None = None,
    ) -> User:
        user = self.get(db, principal.id)
        if name is not None:
            user.name = name
        if avatar_url is not None:
            user.avatar_url = avatar_url
        if active_domain is not None:
            if active_domain == "":
                user.active_domain = None
            elif active_domain not in snapshot:
                raise ValueError(f'Domain "{active_domain}" does not exist.')
            elif not principal.is_admin and active_domain not in snapshot.effective_domains(principal):
                raise ValueError(f'You are not part of the "{active_domain}" domain.')
            else:
                user.active_domain = active_domain
        db.flush()
        return user
