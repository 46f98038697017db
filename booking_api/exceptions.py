"""
Domain-specific exceptions for the booking service.

Services raise these; the API layer turns them into JSON error bodies of the
form ``{"error": {"code": ..., "message": ...}}`` through the handlers
registered in :func:`register_error_handlers`.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "InternalServerError"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return {"error": body}


class ValidationException(DomainException):
    """Raised when input is malformed or breaks a business validation rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "ValidationError"


class UnauthorizedException(DomainException):
    """Raised when the caller is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "Unauthorized"

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class InvalidCredentialsException(UnauthorizedException):
    """Raised for any failed login, whatever the underlying reason."""

    default_code = "InvalidCredentials"


class ForbiddenException(DomainException):
    """Raised when the caller lacks the role or ownership for an action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = "Forbidden"


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NotFound"


class ConflictException(DomainException):
    """Raised when a unique key already exists."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "Conflict"


class InvalidTransitionException(DomainException):
    """Raised when a status change is not reachable from the current state."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "InvalidTransition"


class PaymentGatewayException(DomainException):
    """Raised when the external payment collaborator fails or times out."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "PaymentGatewayError"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Drop the echoed input so submitted passwords never come back in the body
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        error = ValidationException("Request validation failed", details={"errors": errors})
        return JSONResponse(status_code=error.status_code, content=error.to_body())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = DomainException("An unexpected error occurred")
        return JSONResponse(status_code=error.status_code, content=error.to_body())
