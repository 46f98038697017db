"""
Authorization guard.

Every authenticated route depends on :func:`get_current_user` (directly or
through :func:`require_admin`); no handler reads the Authorization header on
its own. Ownership checks for "my own resource" routes go through
:meth:`AuthorizationGuard.ensure_owner_or_admin`.

Rolling sessions: when ``ROLLING_SESSIONS`` is enabled, every successful
authenticated mutating request (POST, PUT, PATCH, DELETE) carries a freshly
issued token in the ``SESSION_TOKEN_HEADER`` response header. The header is
set on the dependency's sub-response, which FastAPI only merges into
successful responses, so a request that ends in an error never refreshes the
session.
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from booking_api.auth.service import UserService
from booking_api.auth.store import UserStore
from booking_api.auth.utils import PasswordHasher, TokenService
from booking_api.config import Settings, get_settings
from booking_api.database import get_db
from booking_api.exceptions import ForbiddenException, UnauthorizedException
from booking_api.models import Role, User

logger = logging.getLogger(__name__)

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache(maxsize=4)
def _hasher_for_rounds(rounds: int) -> PasswordHasher:
    return PasswordHasher(rounds=rounds)


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return _hasher_for_rounds(settings.BCRYPT_ROUNDS)


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService.from_settings(settings)


def get_user_service(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> UserService:
    return UserService(db, hasher, tokens, password_min_length=settings.PASSWORD_MIN_LENGTH)


class AuthorizationGuard:
    """Resolves the caller from a bearer token and enforces role/ownership"""

    def __init__(self, db: Session, tokens: TokenService):
        self.users = UserStore(db)
        self.tokens = tokens

    def authenticate(self, credentials: Optional[HTTPAuthorizationCredentials]) -> User:
        if credentials is None or not credentials.credentials:
            raise UnauthorizedException("Not authenticated")

        claims = self.tokens.verify(credentials.credentials)
        if claims is None:
            raise UnauthorizedException("Could not validate credentials")

        user = self.users.find_by_id(claims.identity_id)
        if user is None or not user.is_active:
            raise UnauthorizedException("Could not validate credentials")
        return user

    @staticmethod
    def require_role(user: User, role: Role) -> None:
        if user.role != role:
            logger.warning("Identity %s denied: %s role required", user.id, role.value)
            raise ForbiddenException("Admin access required" if role == Role.ADMIN else "Not enough permissions")

    @staticmethod
    def ensure_owner_or_admin(user: User, owner_id: str) -> None:
        if user.is_admin or user.id == owner_id:
            return
        logger.warning("Identity %s denied access to a resource owned by %s", user.id, owner_id)
        raise ForbiddenException("You do not have access to this resource")


def get_guard(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthorizationGuard:
    return AuthorizationGuard(db, tokens)


def get_current_user(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    guard: AuthorizationGuard = Depends(get_guard),
    settings: Settings = Depends(get_settings),
) -> User:
    """Get current authenticated user, refreshing the session on writes"""
    user = guard.authenticate(credentials)
    if settings.ROLLING_SESSIONS and request.method in MUTATING_METHODS:
        response.headers[settings.SESSION_TOKEN_HEADER] = guard.tokens.issue(user.id, user.role)
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Require admin role for access"""
    AuthorizationGuard.require_role(current_user, Role.ADMIN)
    return current_user
