"""HTTP route definitions for the account identity service.

The caller's bearer token is verified by upstream middleware before a request
reaches the account-scoped routes; ``account_id`` in the path is trusted here.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import AfterValidator, BaseModel, EmailStr, Field

from ..domain.account import Account
from ..domain.contracts import (
    ChangePasswordInput,
    LoginInput,
    ReauthorizeInput,
    RegisterAccountInput,
)
from ..domain.service import AccountService
from ..errors import (
    AccountDisabled,
    AccountError,
    DuplicateAccount,
    HashingFailure,
    InvalidCredentials,
    InvalidStateTransition,
    StoreUnavailable,
    UnknownAccount,
)
from ..metrics import LOGIN_ATTEMPTS, REGISTRATIONS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 1024


def _require_utf8(value: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValueError("password must be valid UTF-8 text") from exc
    return value


PasswordText = Annotated[str, AfterValidator(_require_utf8)]


class AccountResponse(BaseModel):
    """Public view of an `Account`; the password hash never leaves the service."""

    account_id: str
    email: EmailStr
    state: str
    role: str
    nickname: str | None = None
    phone: str | None = None
    image: str | None = None
    introduction: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        """Build a response model from the domain aggregate."""
        return cls(
            account_id=account.account_id,
            email=account.email,
            state=account.state.value,
            role=account.role,
            nickname=account.nickname,
            phone=account.phone,
            image=account.image,
            introduction=account.introduction,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class RegisterRequest(BaseModel):
    """Payload accepted when registering an account."""

    email: EmailStr
    password: PasswordText = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)
    nickname: str | None = None
    phone: str | None = None
    image: str | None = None
    introduction: str | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: PasswordText = Field(..., min_length=1, max_length=MAX_PASSWORD_LENGTH)


class PasswordConfirmation(BaseModel):
    """Current password re-entered before a sensitive operation."""

    password: PasswordText = Field(..., min_length=1, max_length=MAX_PASSWORD_LENGTH)


class ChangePasswordRequest(BaseModel):
    current_password: PasswordText = Field(..., min_length=1, max_length=MAX_PASSWORD_LENGTH)
    new_password: PasswordText = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )


class TokenResponse(BaseModel):
    """Token issuance response containing the bearer token and metadata."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    expires_at: datetime


_ERROR_RESPONSES: dict[type[AccountError], tuple[int, str]] = {
    DuplicateAccount: (status.HTTP_409_CONFLICT, "an account with this email already exists"),
    UnknownAccount: (status.HTTP_404_NOT_FOUND, "account not found"),
    AccountDisabled: (
        status.HTTP_403_FORBIDDEN,
        "this account has been disabled; contact an administrator",
    ),
    InvalidCredentials: (status.HTTP_401_UNAUTHORIZED, "password does not match"),
    InvalidStateTransition: (status.HTTP_409_CONFLICT, "account state change not permitted"),
    HashingFailure: (status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error"),
    StoreUnavailable: (status.HTTP_503_SERVICE_UNAVAILABLE, "service temporarily unavailable"),
}

# Login does not tell a wrong email apart from a wrong password.
_LOGIN_FAILED = (status.HTTP_401_UNAUTHORIZED, "invalid email or password")
_LOGIN_OVERRIDES = {UnknownAccount: _LOGIN_FAILED, InvalidCredentials: _LOGIN_FAILED}

# An unknown id on an account-scoped call means the caller's identity is stale or forged.
_ACCOUNT_SCOPED_OVERRIDES = {UnknownAccount: (status.HTTP_403_FORBIDDEN, "forbidden")}


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


@router.post("/accounts", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def register_account(
    payload: RegisterRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Register an account with an unused email."""
    try:
        account = service.register(
            RegisterAccountInput(
                email=payload.email,
                password=payload.password,
                nickname=payload.nickname,
                phone=payload.phone,
                image=payload.image,
                introduction=payload.introduction,
            )
        )
    except AccountError as exc:
        REGISTRATIONS.labels(outcome=type(exc).__name__).inc()
        raise _http_error(exc) from exc
    REGISTRATIONS.labels(outcome="success").inc()
    return AccountResponse.from_domain(account)


@router.get("/accounts/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    try:
        account = service.get_account(account_id)
    except AccountError as exc:
        raise _http_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.post("/auth/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    service: AccountService = Depends(get_service),
) -> TokenResponse:
    """Exchange an email and password for a signed access token."""
    try:
        token = service.login(LoginInput(email=payload.email, password=payload.password))
    except AccountError as exc:
        LOGIN_ATTEMPTS.labels(outcome=type(exc).__name__).inc()
        raise _http_error(exc, _LOGIN_OVERRIDES) from exc
    LOGIN_ATTEMPTS.labels(outcome="success").inc()
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        expires_at=token.expires_at,
    )


@router.post(
    "/accounts/{account_id}/reauthorize",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def reauthorize(
    account_id: str,
    payload: PasswordConfirmation,
    service: AccountService = Depends(get_service),
) -> Response:
    """Confirm the account password without issuing a new token."""
    try:
        service.reauthorize(ReauthorizeInput(account_id=account_id, password=payload.password))
    except AccountError as exc:
        raise _http_error(exc, _ACCOUNT_SCOPED_OVERRIDES) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/accounts/{account_id}/password",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def change_password(
    account_id: str,
    payload: ChangePasswordRequest,
    service: AccountService = Depends(get_service),
) -> Response:
    """Replace the password once the current one has been confirmed."""
    try:
        service.change_password(
            ChangePasswordInput(
                account_id=account_id,
                current_password=payload.current_password,
                new_password=payload.new_password,
            )
        )
    except AccountError as exc:
        raise _http_error(exc, _ACCOUNT_SCOPED_OVERRIDES) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/accounts/{account_id}/disable", response_model=AccountResponse)
def disable_account(
    account_id: str,
    payload: PasswordConfirmation,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Disable the account after password confirmation. Records are never deleted."""
    try:
        account = service.disable_account(account_id, payload.password)
    except AccountError as exc:
        raise _http_error(exc, _ACCOUNT_SCOPED_OVERRIDES) from exc
    return AccountResponse.from_domain(account)


def _http_error(
    exc: AccountError,
    overrides: dict[type[AccountError], tuple[int, str]] | None = None,
) -> HTTPException:
    table = {**_ERROR_RESPONSES, **(overrides or {})}
    for kind in type(exc).__mro__:
        if kind in table:
            status_code, message = table[kind]
            break
    else:
        status_code, message = status.HTTP_400_BAD_REQUEST, "request rejected"
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("account operation failed: %r", exc)
    return HTTPException(status_code=status_code, detail=message)
