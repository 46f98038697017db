import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from booking_api.exceptions import ConflictException
from booking_api.models import Role, User

logger = logging.getLogger(__name__)


class UserStore:
    """Persistence for identity records"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, email: str, password_hash: str, name: Optional[str] = None,
               phone: Optional[str] = None, role: Role = Role.USER) -> User:
        db_user = User(
            email=email.strip().lower(),
            password_hash=password_hash,
            name=name,
            phone=phone,
            role=role,
        )
        self.db.add(db_user)
        self._commit("Email already registered")
        self.db.refresh(db_user)
        return db_user

    def find_by_email(self, email: str) -> Optional[User]:
        normalized = email.strip().lower()
        return self.db.query(User).filter(func.lower(User.email) == normalized).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def list(self, skip: int = 0, limit: int = 100, search: Optional[str] = None) -> List[User]:
        query = self.db.query(User)
        if search:
            search_pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                func.lower(User.email).like(search_pattern) | func.lower(User.name).like(search_pattern)
            )
        return query.order_by(User.created_at, User.id).offset(skip).limit(limit).all()

    def update(self, db_user: User, **fields) -> User:
        if "email" in fields and fields["email"] is not None:
            fields["email"] = fields["email"].strip().lower()
        for field, value in fields.items():
            setattr(db_user, field, value)
        self._commit("Email already exists")
        self.db.refresh(db_user)
        return db_user

    def delete(self, db_user: User) -> None:
        self.db.delete(db_user)
        self.db.commit()

    def _commit(self, conflict_message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("Unique constraint violation on users: %s", conflict_message)
            raise ConflictException(conflict_message)
