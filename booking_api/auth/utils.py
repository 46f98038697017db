import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from passlib.context import CryptContext

from booking_api.auth.schemas import TokenClaims
from booking_api.config import Settings
from booking_api.models import Role

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasswordHasher:
    """One-way bcrypt hashing with constant-time verification"""

    def __init__(self, rounds: int = 12):
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
        self._dummy_hash: Optional[str] = None

    def hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify(self, password: str, password_hash: Optional[str]) -> bool:
        if not password_hash:
            # Unknown account: spend a real verify so timing matches a wrong password
            if self._dummy_hash is None:
                self._dummy_hash = self.pwd_context.hash("not-a-real-password")
            self.pwd_context.verify(password, self._dummy_hash)
            return False
        try:
            return self.pwd_context.verify(password, password_hash)
        except ValueError:
            # Unrecognised or corrupted hash
            return False


class TokenService:
    """Issues and verifies signed, time-bound session assertions.

    Tokens are HS256 JWTs by default carrying ``sub`` (identity id), ``role``,
    ``iat`` and ``exp``. Verification never raises for tampered, malformed or
    expired tokens; it returns ``None`` so the caller can report an ordinary
    authentication failure.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 30,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret_key:
            raise ValueError("Token signing secret must be provided")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = timedelta(minutes=expire_minutes)
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )

    def issue(self, identity_id: str, role: Role) -> str:
        issued_at = self._clock()
        payload = {
            "sub": str(identity_id),
            "role": Role(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expires_delta).timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[TokenClaims]:
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError as e:
            logger.debug("Rejected session token: %s", e.__class__.__name__)
            return None

        try:
            expires_at = int(payload["exp"])
            claims = TokenClaims(
                identity_id=payload["sub"],
                role=Role(payload.get("role")),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
            )
        except (ValueError, TypeError):
            return None

        # Expiry is checked against the injected clock rather than the wall clock
        if expires_at <= int(self._clock().timestamp()):
            logger.debug("Rejected session token: expired")
            return None
        return claims
