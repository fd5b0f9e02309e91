"""Shared dependencies for API routes."""

import logging

from fastapi import Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from api.errors import unauthorized
from config import settings
from database import SessionLocal, User
from services.auth import ACCESS, AuthError, decode_token

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    header = request.headers.get("Authorization")
    if not header:
        raise unauthorized("Missing token")

    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token:
        raise unauthorized("Bad authorization header")

    try:
        claims = decode_token(token, ACCESS)
    except AuthError as e:
        logger.warning("Rejected bearer token: %s", e)
        raise unauthorized("Invalid/expired token")

    user = db.get(User, claims["sub"])
    if user is None:
        raise unauthorized("Invalid/expired token")
    return user
