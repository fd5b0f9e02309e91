from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from api.dependencies import get_current_user, get_db, limiter
from api.errors import APIError, unauthorized
from config import settings
from database import User
from models.requests import LoginRequest, RefreshRequest, RegisterRequest
from models.responses import TokenResponse, UserOut
from services import auth

router = APIRouter()


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
    )


def _issue_tokens(user: User, include_user: bool = True) -> TokenResponse:
    return TokenResponse(
        access_token=auth.sign_access_token(user.id),
        refresh_token=auth.sign_refresh_token(user.id, user.token_version),
        expires_in=auth.access_ttl_seconds(),
        user=_user_out(user) if include_user else None,
    )


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
@limiter.limit(settings.auth_rate_limit)
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = auth.register_user(
            db, body.first_name, body.last_name, body.email, body.password
        )
    except auth.EmailTakenError as e:
        raise APIError(409, "CONFLICT", str(e))
    return _issue_tokens(user)


@router.post("/auth/login", response_model=TokenResponse)
@limiter.limit(settings.auth_rate_limit)
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = auth.authenticate(db, body.email, body.password)
    except auth.AuthError as e:
        raise unauthorized(str(e))
    return _issue_tokens(user)


@router.post("/auth/refresh", response_model=TokenResponse, response_model_exclude_none=True)
@limiter.limit(settings.auth_rate_limit)
def refresh(request: Request, body: RefreshRequest, db: Session = Depends(get_db)):
    try:
        user = auth.rotate_refresh_token(db, body.refresh_token)
    except auth.AuthError as e:
        raise unauthorized(str(e))
    return _issue_tokens(user, include_user=False)


@router.post("/auth/logout", status_code=204)
@limiter.limit(settings.rate_limit)
def logout(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    auth.revoke_refresh_tokens(db, user)
    return Response(status_code=204)


@router.get("/me", response_model=UserOut)
@limiter.limit(settings.rate_limit)
def me(request: Request, user: User = Depends(get_current_user)):
    return _user_out(user)
