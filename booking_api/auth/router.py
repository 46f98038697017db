from fastapi import APIRouter, Depends, status

from booking_api.auth.dependencies import get_current_user, get_user_service
from booking_api.auth.schemas import (
    AuthResponse,
    LoginRequest,
    PasswordChangeRequest,
    User,
    UserCreate,
    UserUpdate,
)
from booking_api.auth.service import UserService
from booking_api.models import User as UserModel

router = APIRouter()


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
def register_user(user: UserCreate, service: UserService = Depends(get_user_service)):
    """Register a new user"""
    return service.register(user)


@router.post("/login", response_model=AuthResponse)
def login(login_data: LoginRequest, service: UserService = Depends(get_user_service)):
    """Exchange email and password for a bearer token"""
    access_token, user = service.login(login_data)
    return AuthResponse(access_token=access_token, token_type="bearer", user=user)


@router.put("/change-password")
def change_password(
    payload: PasswordChangeRequest,
    current_user: UserModel = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.change_password(current_user.id, payload.current_password, payload.new_password)
    return {"message": "Password updated successfully"}


@router.get("/me", response_model=User)
def read_users_me(current_user: UserModel = Depends(get_current_user)):
    """Get current user profile"""
    return current_user


@router.put("/me", response_model=User)
def update_user_profile(
    user_update: UserUpdate,
    current_user: UserModel = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Update current user profile"""
    return service.update_profile(current_user.id, user_update)
