from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from booking_api.admin.admin_service import AdminManagementService
from booking_api.admin.schemas import AdminUserCreate, AdminUserUpdate
from booking_api.auth.dependencies import get_user_service, require_admin
from booking_api.auth.schemas import User
from booking_api.auth.service import UserService
from booking_api.models import User as UserModel

router = APIRouter()


def get_admin_service(user_service: UserService = Depends(get_user_service)) -> AdminManagementService:
    return AdminManagementService(user_service)


@router.get("/users", response_model=List[User])
def get_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    search: Optional[str] = Query(None),
    admin_user: UserModel = Depends(require_admin),
    admin_service: AdminManagementService = Depends(get_admin_service),
):
    """Get all identities, optionally filtered by name or email"""
    return admin_service.list_users(skip=skip, limit=limit, search=search)


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: AdminUserCreate,
    admin_user: UserModel = Depends(require_admin),
    admin_service: AdminManagementService = Depends(get_admin_service),
):
    """Create an identity with an explicit role"""
    return admin_service.create_user(user_data, created_by=admin_user)


@router.get("/users/{user_id}", response_model=User)
def get_user(
    user_id: str,
    admin_user: UserModel = Depends(require_admin),
    admin_service: AdminManagementService = Depends(get_admin_service),
):
    return admin_service.get_user(user_id)


@router.put("/users/{user_id}", response_model=User)
def update_user(
    user_id: str,
    user_update: AdminUserUpdate,
    admin_user: UserModel = Depends(require_admin),
    admin_service: AdminManagementService = Depends(get_admin_service),
):
    """Update profile, email, role or active flag of any identity"""
    return admin_service.update_user(user_id, user_update, updated_by=admin_user)


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    admin_user: UserModel = Depends(require_admin),
    admin_service: AdminManagementService = Depends(get_admin_service),
):
    """Delete an identity and its bookings"""
    admin_service.delete_user(user_id, deleted_by=admin_user)
    return {"message": "User deleted successfully"}
