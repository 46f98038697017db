import logging
from typing import Tuple

from sqlalchemy.orm import Session

from booking_api.auth.schemas import LoginRequest, UserCreate, UserUpdate
from booking_api.auth.store import UserStore
from booking_api.auth.utils import PasswordHasher, TokenService
from booking_api.exceptions import (
    ConflictException,
    ForbiddenException,
    InvalidCredentialsException,
    NotFoundException,
    ValidationException,
)
from booking_api.models import Role, User

logger = logging.getLogger(__name__)


class UserService:
    """Registration, login and self-service credential changes"""

    def __init__(
        self,
        db: Session,
        hasher: PasswordHasher,
        tokens: TokenService,
        password_min_length: int = 6,
    ):
        self.store = UserStore(db)
        self.hasher = hasher
        self.tokens = tokens
        self.password_min_length = password_min_length

    def check_password_policy(self, password: str) -> None:
        if len(password) < self.password_min_length:
            raise ValidationException(
                f"Password must be at least {self.password_min_length} characters long",
                details={"field": "password"},
            )

    def create_user(self, user: UserCreate, role: Role = Role.USER) -> User:
        """Create a new identity; role escalation is left to admin callers"""
        self.check_password_policy(user.password)
        if self.store.find_by_email(user.email):
            raise ConflictException("Email already registered")

        db_user = self.store.create(
            email=user.email,
            password_hash=self.hasher.hash(user.password),
            name=user.name,
            phone=user.phone,
            role=role,
        )
        logger.info("Registered identity %s with role %s", db_user.id, db_user.role.value)
        return db_user

    def register(self, user: UserCreate) -> User:
        return self.create_user(user, role=Role.USER)

    def authenticate(self, email: str, password: str) -> User:
        """Return the identity for valid credentials.

        Unknown email, wrong password and deactivated account all raise the
        same InvalidCredentialsException.
        """
        user = self.store.find_by_email(email)
        password_ok = self.hasher.verify(password, user.password_hash if user else None)
        if not user or not password_ok or not user.is_active:
            logger.info("Failed login attempt")
            raise InvalidCredentialsException("Incorrect email or password")
        return user

    def login(self, login_data: LoginRequest) -> Tuple[str, User]:
        user = self.authenticate(login_data.email, login_data.password)
        return self.tokens.issue(user.id, user.role), user

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        db_user = self.store.find_by_id(user_id)
        if not db_user:
            raise NotFoundException("User not found")
        if not self.hasher.verify(current_password, db_user.password_hash):
            logger.info("Rejected password change for %s: current password mismatch", user_id)
            raise ForbiddenException("Current password is incorrect")
        self.check_password_policy(new_password)

        self.store.update(db_user, password_hash=self.hasher.hash(new_password))
        logger.info("Password changed for %s", user_id)

    def update_profile(self, user_id: str, user_update: UserUpdate) -> User:
        """Update the caller's own name and phone"""
        db_user = self.store.find_by_id(user_id)
        if not db_user:
            raise NotFoundException("User not found")

        update_data = user_update.model_dump(exclude_unset=True)
        if not update_data:
            return db_user
        return self.store.update(db_user, **update_data)
