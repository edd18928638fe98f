"""Registration, login, token refresh, and the bearer-token auth dependency (get_current_user)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskmanager.core.database import get_db
from taskmanager.core.errors import ConflictError, UnauthenticatedError
from taskmanager.core.security import (
    InvalidTokenError,
    TokenService,
    hash_password,
    verify_password,
)
from taskmanager.models import User
from taskmanager.schemas.auth import (
    AuthResponse,
    CurrentUser,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
INVALID_REFRESH_MESSAGE = "Invalid refresh token"


def get_token_service(request: Request) -> TokenService:
    """Dependency: the TokenService built once at startup from settings."""
    return request.app.state.token_service


def _auth_response(user: User, tokens: TokenService) -> AuthResponse:
    pair = tokens.issue_pair(user.id)
    return AuthResponse(
        user=UserOut.model_validate(user),
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthResponse:
    """Create an account and return its profile with a fresh access/refresh token pair."""
    if db.query(User.id).filter(User.email == body.email).first() is not None:
        raise ConflictError("User already exists with this email")

    user = User(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email.
        db.rollback()
        raise ConflictError("User already exists with this email")
    db.refresh(user)
    logger.info("Registered user id=%s", user.id)
    return _auth_response(user, tokens)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns access and refresh JWTs.
    Include the access token in the Authorization header as: Bearer <access_token>
    """
    user = db.query(User).filter(User.email == body.email).first()
    if user is None or not verify_password(body.password, user.password_hash):
        raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE)
    return _auth_response(user, tokens)


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    body: RefreshRequest,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> TokenResponse:
    """
    Exchange a valid refresh token for a new access/refresh pair.

    The presented refresh token stays valid until it expires: there is no
    revocation store, so rotation does not invalidate it.
    """
    try:
        user_id = tokens.verify_refresh(body.refresh_token)
    except InvalidTokenError:
        raise UnauthenticatedError(INVALID_REFRESH_MESSAGE)
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UnauthenticatedError(INVALID_REFRESH_MESSAGE)
    pair = tokens.issue_pair(user.id)
    return TokenResponse(access_token=pair.access_token, refresh_token=pair.refresh_token)


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> CurrentUser:
    """
    Dependency: require a valid Bearer access token and return the current user.

    Missing header, wrong scheme, bad signature, expiry, and unknown user all
    raise the same 401 so callers learn nothing about why a token was rejected.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()
    try:
        user_id = tokens.verify_access(credentials.credentials)
    except InvalidTokenError:
        raise UnauthenticatedError()
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UnauthenticatedError()
    request.state.user_id = user.id
    return CurrentUser.model_validate(user)


@router.get("/me", response_model=UserOut)
def get_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserOut:
    """Return the authenticated user's profile."""
    user = db.query(User).filter(User.id == current_user.id).first()
    if user is None:
        # Deleted after the identity check in the same request.
        raise UnauthenticatedError()
    return UserOut.model_validate(user)
