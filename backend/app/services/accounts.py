from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.core.errors import ConflictError, InvalidInputError, NotFoundError, UnauthorizedError, UpstreamError
from app.core.logging_setup import logger
from app.models.base import utcnow
from app.models.user import Profile, User, UserRole
from app.utils.email_validation import normalize_email
from app.utils.security import get_password_hash, verify_password


class AccountService:
    """Identity layer: login accounts plus the profile row that carries the role."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_user(self, user_id: str | UUID) -> User | None:
        return self.session.get(User, UUID(str(user_id)))

    def get_user_by_email(self, email: str) -> User | None:
        statement = select(User).where(User.email == email.strip().lower())
        return self.session.exec(statement).first()

    def get_profile(self, user_id: str | UUID) -> Profile | None:
        return self.session.get(Profile, UUID(str(user_id)))

    def get_user_role(self, user_id: str | UUID) -> str | None:
        profile = self.get_profile(user_id)
        return profile.role if profile else None

    def is_admin(self, user_id: str | UUID) -> bool:
        return self.get_user_role(user_id) == UserRole.ADMIN.value

    def email_in_use(self, email: str) -> bool:
        normalized = email.strip().lower()
        if self.get_user_by_email(normalized):
            return True
        profile = self.session.exec(select(Profile).where(Profile.email == normalized)).first()
        return profile is not None

    def create_account(self, email: str, password: str) -> User:
        normalized_email = normalize_email(email)
        if not password:
            raise InvalidInputError("Password is required")
        user = User(email=normalized_email, password_hash=get_password_hash(password))
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError("A user with this email already exists") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Account creation failed for %s: %s", normalized_email, exc)
            raise UpstreamError("Failed to create user account") from exc
        self.session.refresh(user)
        return user

    def delete_account(self, user_id: str | UUID) -> None:
        user = self.get_user(user_id)
        if user is None:
            return
        profile = self.get_profile(user.id)
        if profile is not None:
            self.session.delete(profile)
        self.session.delete(user)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to delete account %s: %s", user_id, exc)
            raise UpstreamError("Failed to delete user account") from exc

    def create_profile(
        self,
        user: User,
        *,
        full_name: str | None,
        role: UserRole = UserRole.WORKER,
    ) -> Profile:
        profile = Profile(
            id=user.id,
            email=user.email,
            full_name=(full_name or "").strip() or None,
            role=role.value,
        )
        self.session.add(profile)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Profile creation failed for %s: %s", user.email, exc)
            raise UpstreamError("Failed to create user profile") from exc
        self.session.refresh(profile)
        return profile

    def set_password(self, user_id: str | UUID, password: str) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        user.password_hash = get_password_hash(password)
        user.updated_at = utcnow()
        self.session.add(user)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Password update failed for %s: %s", user_id, exc)
            raise UpstreamError("Failed to update password") from exc
        self.session.refresh(user)
        return user

    def check_credentials(self, email: str, password: str) -> User:
        user = self.get_user_by_email(email)
        if not user or not user.is_active:
            raise UnauthorizedError("Invalid credentials")
        if not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid credentials")
        return user

    def bootstrap_admin(self, email: str, password: str, full_name: str) -> Profile:
        """Create the first administrator (used by ``create_admin.py``)."""
        if self.email_in_use(email):
            raise ConflictError("A user with this email already exists")
        user = self.create_account(email, password)
        return self.create_profile(user, full_name=full_name, role=UserRole.ADMIN)
