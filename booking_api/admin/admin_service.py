import logging
from typing import List, Optional

from booking_api.admin.schemas import AdminUserCreate, AdminUserUpdate
from booking_api.auth.service import UserService
from booking_api.exceptions import ConflictException, NotFoundException, ValidationException
from booking_api.models import User

logger = logging.getLogger(__name__)


class AdminManagementService:
    """Identity management for admins: listing, role and email overrides, removal"""

    def __init__(self, user_service: UserService):
        self.user_service = user_service
        self.store = user_service.store

    def list_users(self, skip: int = 0, limit: int = 100, search: Optional[str] = None) -> List[User]:
        return self.store.list(skip=skip, limit=limit, search=search)

    def get_user(self, user_id: str) -> User:
        user = self.store.find_by_id(user_id)
        if not user:
            raise NotFoundException("User not found")
        return user

    def create_user(self, user_data: AdminUserCreate, created_by: User) -> User:
        db_user = self.user_service.create_user(user_data, role=user_data.role)
        logger.info("Admin %s created identity %s with role %s", created_by.id, db_user.id, db_user.role.value)
        return db_user

    def update_user(self, user_id: str, user_update: AdminUserUpdate, updated_by: User) -> User:
        db_user = self.get_user(user_id)
        update_data = user_update.model_dump(exclude_unset=True)
        for field in ("email", "role", "is_active"):
            if field in update_data and update_data[field] is None:
                raise ValidationException(f"{field} cannot be null", details={"field": field})

        new_email = update_data.get("email")
        if new_email and new_email != db_user.email:
            existing = self.store.find_by_email(new_email)
            if existing and existing.id != user_id:
                raise ConflictException("Email already exists")

        if "role" in update_data and update_data["role"] != db_user.role:
            logger.info(
                "Admin %s changed role of %s: %s -> %s",
                updated_by.id, user_id, db_user.role.value, update_data["role"].value,
            )
        if not update_data:
            return db_user
        return self.store.update(db_user, **update_data)

    def delete_user(self, user_id: str, deleted_by: User) -> None:
        """Hard delete an identity together with its bookings"""
        db_user = self.get_user(user_id)
        self.store.delete(db_user)
        logger.info("Admin %s deleted identity %s", deleted_by.id, user_id)
