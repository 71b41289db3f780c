"""HTTP route definitions for the user service."""

from __future__ import annotations

import logging

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel

from ..domain.account import Account
from ..domain.contracts import RegistrationRequest, RegistrationResult
from ..domain.errors import ConflictError, DomainError, StoreError, UserServiceError, ValidationError
from ..domain.service import RegistrationService
from ..metrics import REGISTRATIONS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class RegisterRequest(BaseModel):
    """Payload accepted when registering a user; fields are validated by the domain."""

    email: str
    username: str
    first_name: str
    last_name: str
    password: str


class RegisterResponse(BaseModel):
    """Confirmation returned after a successful registration."""

    id: str
    email: str
    username: str
    full_name: str
    created_at: datetime

    @classmethod
    def from_result(cls, result: RegistrationResult) -> "RegisterResponse":
        """Build a response model from the registration projection."""
        return cls(
            id=result.account_id,
            email=result.email,
            username=result.username,
            full_name=result.full_name,
            created_at=result.created_at,
        )


class UserResponse(BaseModel):
    """Serialised representation of an `Account` aggregate."""

    id: str
    email: str
    username: str
    first_name: str
    last_name: str
    full_name: str
    created_at: datetime
    updated_at: datetime
    is_active: bool
    is_deleted: bool
    deleted_at: datetime | None = None

    @classmethod
    def from_domain(cls, account: Account) -> "UserResponse":
        """Build a response model from the domain aggregate."""
        return cls(
            id=account.account_id,
            email=account.email.value,
            username=account.username.value,
            first_name=account.first_name.value,
            last_name=account.last_name.value,
            full_name=account.full_name,
            created_at=account.created_at,
            updated_at=account.updated_at,
            is_active=account.is_active,
            is_deleted=account.is_deleted,
            deleted_at=account.deleted_at,
        )


def get_service(request: Request) -> RegistrationService:
    """Resolve the `RegistrationService` stored on the FastAPI application state."""
    service: RegistrationService = request.app.state.registration_service
    return service


@router.post("/auth/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    response: Response,
    payload: RegisterRequest,
    service: RegistrationService = Depends(get_service),
) -> RegisterResponse:
    """Register a user account and point the client at the created resource."""
    try:
        result = service.register(
            RegistrationRequest(
                email=payload.email,
                username=payload.username,
                first_name=payload.first_name,
                last_name=payload.last_name,
                password=payload.password,
            )
        )
    except UserServiceError as exc:
        REGISTRATIONS.labels(outcome=_outcome_for(exc)).inc()
        raise _http_error_from_domain_error(exc) from exc

    REGISTRATIONS.labels(outcome="success").inc()
    response.headers["Location"] = f"/api/users/{result.account_id}"
    return RegisterResponse.from_result(result)


@router.get("/users/{account_id}", response_model=UserResponse)
def get_user(
    account_id: str,
    service: RegistrationService = Depends(get_service),
) -> UserResponse:
    """Retrieve a registered account by identifier."""
    try:
        account = service.get_account(account_id)
    except StoreError as exc:
        raise _http_error_from_domain_error(exc) from exc
    except UserServiceError as exc:
        logger.error("stored account %s failed validation: %s", account_id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="stored account is invalid"
        ) from exc
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="account not found")
    return UserResponse.from_domain(account)


def _outcome_for(exc: UserServiceError) -> str:
    if isinstance(exc, ValidationError):
        return "invalid"
    if isinstance(exc, ConflictError):
        return "conflict"
    return "error"


def _http_error_from_domain_error(exc: UserServiceError) -> HTTPException:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, ConflictError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, StoreError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, DomainError):
        logger.error("domain invariant violated during registration: %s", exc)
    return HTTPException(status_code=status_code, detail=exc.reason)
