from __future__ import annotations

import logging

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from msgboard.db.models import User


logger = logging.getLogger("api")

MAX_PASSWORD_BYTES = 72  # bcrypt input limit
MAX_NAME_LEN = 64
MAX_EMAIL_LEN = 254


class AccountError(ValueError):
    """Rejected account input (blank fields and the like)."""


class AccountExistsError(AccountError):
    pass


class InvalidCredentialsError(AccountError):
    pass


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def register_account(db: Session, *, name: str, email: str, password: str) -> User:
    """Create a user. Raises AccountExistsError when the email is taken."""
    name = (name or "").strip()
    email = _normalize_email(email)
    if not name or not email or not password:
        raise AccountError("name, email and password are required")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise AccountError("password is too long")
    if len(name) > MAX_NAME_LEN or len(email) > MAX_EMAIL_LEN:
        raise AccountError("name or email is too long")

    if db.query(User).filter(User.email == email).one_or_none() is not None:
        raise AccountExistsError("email already registered")

    user = User(name=name, email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # concurrent registration with the same email
        db.rollback()
        raise AccountExistsError("email already registered")
    db.refresh(user)

    logger.info("Account registered", extra={"event": "account_registered", "user_id": user.id})
    return user


def authenticate(db: Session, *, email: str, password: str) -> User:
    """Look up a user by email and check the password."""
    user = db.query(User).filter(User.email == _normalize_email(email)).one_or_none()
    if user is None or not password or not check_password(password, user.password_hash):
        logger.warning("Login failed", extra={"event": "login_failed"})
        raise InvalidCredentialsError("invalid credentials")
    return user
