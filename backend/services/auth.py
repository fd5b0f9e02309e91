"""Password hashing and JWT access/refresh tokens."""

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from sqlalchemy.orm import Session

from config import settings
from database import User

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


class AuthError(Exception):
    pass


class EmailTakenError(AuthError):
    pass


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def _encode(claims: dict, ttl: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def access_ttl_seconds() -> int:
    return settings.access_token_ttl_minutes * 60


def sign_access_token(user_id: str) -> str:
    return _encode(
        {"sub": user_id, "typ": ACCESS},
        timedelta(minutes=settings.access_token_ttl_minutes),
    )


def sign_refresh_token(user_id: str, token_version: int) -> str:
    """Refresh tokens carry the user's token version so logout can revoke them."""
    return _encode(
        {"sub": user_id, "typ": REFRESH, "tv": token_version},
        timedelta(days=settings.refresh_token_ttl_days),
    )


def decode_token(token: str, expected_type: str) -> dict:
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Token expired") from e
    except jwt.PyJWTError as e:
        raise AuthError("Invalid token") from e
    if claims.get("typ") != expected_type:
        raise AuthError("Wrong token type")
    return claims


def register_user(
    db: Session, first_name: str, last_name: str, email: str, password: str
) -> User:
    email_lc = email.lower().strip()
    if db.query(User).filter(User.email == email_lc).first():
        raise EmailTakenError("Email already used")
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email_lc,
        password_hash=hash_password(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.lower().strip()).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise AuthError("Invalid credentials")
    return user


def rotate_refresh_token(db: Session, refresh_token: str) -> User:
    """Validate a refresh token and return its user; caller issues new tokens."""
    claims = decode_token(refresh_token, REFRESH)
    user = db.get(User, claims["sub"])
    if user is None:
        raise AuthError("Invalid refresh")
    if claims.get("tv") != user.token_version:
        raise AuthError("Expired refresh")
    return user


def revoke_refresh_tokens(db: Session, user: User) -> None:
    user.token_version += 1
    db.commit()
