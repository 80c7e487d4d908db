# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Email/password accounts with bcrypt hashing and database-backed sessions
(see session_service.py). AuthService also tracks the signed-in user for
the console and notifies subscribers on every change.
"""
from __future__ import annotations

import re
from typing import Callable

import bcrypt

from ..extensions import db
from ..models import User
from medsupply.time_utils import utcnow
from . import session_service

MIN_PASSWORD_LENGTH = 6
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

EMAIL_IN_USE = "This email is already registered"
WEAK_PASSWORD = "Password should be at least 6 characters"
INVALID_EMAIL = "Invalid email address"
INVALID_CREDENTIALS = "Invalid email or password"


class AuthError(Exception):
    """Raised for sign-up / sign-in failures with a user-facing message."""


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def validate_credentials(email: str, password: str | None) -> None:
    if not EMAIL_RE.match(email):
        raise AuthError(INVALID_EMAIL)
    if password is None or len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError(WEAK_PASSWORD)


def hash_password(password: str) -> str:
    """Hash password using bcrypt with cost factor 12."""
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(email: str, password: str) -> User:
    """
    Create a user account.

    Raises AuthError for an invalid email, a short password or an email
    that is already registered.
    """
    email = normalize_email(email)
    validate_credentials(email, password)

    existing = db.session.query(User).filter(User.email == email).first()
    if existing:
        raise AuthError(EMAIL_IN_USE)

    user = User(email=email, password_hash=hash_password(password))
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    user = db.session.query(User).filter(User.email == normalize_email(email)).first()
    if not user or not password:
        return None

    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None


AuthListener = Callable[["User | None"], None]


class AuthService:
    """
    Sign-up / sign-in / sign-out for the console, with change notifications.

    on_auth_change() delivers the current user (or None) immediately and
    again after every sign-in, sign-up, restore and sign-out.
    """

    def __init__(self):
        self.current_user: User | None = None
        self._listeners: list[AuthListener] = []

    def on_auth_change(self, callback: AuthListener) -> Callable[[], None]:
        self._listeners.append(callback)
        callback(self.current_user)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_user(self, user: User | None) -> None:
        self.current_user = user
        for listener in list(self._listeners):
            listener(user)

    def sign_up(self, email: str, password: str) -> tuple[User, str]:
        user = create_user(email, password)
        _, token = session_service.create_session(user.id)
        self._set_user(user)
        return user, token

    def sign_in(self, email: str, password: str) -> tuple[User, str]:
        user = authenticate(email, password)
        if user is None:
            raise AuthError(INVALID_CREDENTIALS)
        _, token = session_service.create_session(user.id)
        self._set_user(user)
        return user, token

    def restore(self, token: str | None) -> User | None:
        """Resume a persisted session, e.g. after a restart."""
        context = session_service.validate_session(token)
        user = context.user if context else None
        self._set_user(user)
        return user

    def sign_out(self, token: str | None) -> None:
        session_service.revoke_session(token)
        self._set_user(None)

    def close(self) -> None:
        self._listeners.clear()
        self.current_user = None
