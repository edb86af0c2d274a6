# Overview: Service-layer operations for auth; password hashing and credential resolution.

"""
Authentication Service

Passwords are hashed with bcrypt (cost factor from BCRYPT_ROUNDS, never
below 10). Two credential paths resolve a request to a principal:

1. HTTP Basic: ``Authorization: Basic base64(username:password)``
2. Server-side session: opaque token from the session cookie

``resolve_request`` tries Basic first when the header is present and never
falls back to the session when Basic fails.
"""

import base64
import binascii

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..context import Allow, Deny, GuardResult
from ..errors import ConflictError, ValidationError, is_unique_violation
from ..extensions import db
from ..models import User
from ..permissions import Role
from . import session_service


MIN_BCRYPT_ROUNDS = 10

BASIC_PREFIX = "Basic "


def _bcrypt_rounds() -> int:
    return max(MIN_BCRYPT_ROUNDS, int(current_app.config.get("BCRYPT_ROUNDS", MIN_BCRYPT_ROUNDS)))


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() compares in constant time. A malformed stored hash
    counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


_dummy_hashes: dict[int, str] = {}


def _dummy_hash() -> str:
    rounds = _bcrypt_rounds()
    if rounds not in _dummy_hashes:
        _dummy_hashes[rounds] = hash_password("laundrydesk-unknown-user")
    return _dummy_hashes[rounds]


def find_user_by_username(username: str) -> User | None:
    return db.session.query(User).filter_by(username=username).first()


def username_exists(username: str) -> bool:
    return db.session.query(User.id).filter_by(username=username).first() is not None


def find_user_by_id(user_id) -> User | None:
    return db.session.get(User, user_id)


def username_taken() -> ConflictError:
    return ConflictError(
        "Username already exists",
        code="USERNAME_EXISTS",
        details=[{"field": "username", "message": "This username is already taken"}],
    )


def commit_user_change() -> None:
    """Commit a user insert/update; a concurrent duplicate username surfaces as USERNAME_EXISTS."""
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        if is_unique_violation(exc):
            raise username_taken() from exc
        raise


def create_user(username: str, password: str, role: str = Role.EMPLOYEE) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises ConflictError(USERNAME_EXISTS) when the username is taken.
    """
    if username_exists(username):
        raise username_taken()

    user = User(
        username=username,
        password_hash=hash_password(password),
        role=role,
    )
    db.session.add(user)
    commit_user_change()
    return user


def authenticate(username: str, password: str) -> User | None:
    """Return the user if the credentials are valid, None otherwise."""
    user = find_user_by_username(username)
    if not user:
        # Same bcrypt cost as a wrong password
        verify_password(password, _dummy_hash())
        return None
    if verify_password(password, user.password_hash):
        return user
    return None


def change_password(user: User, current_password: str, new_password: str) -> User:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    set_password(user, new_password)
    return user


def set_password(user: User, new_password: str) -> User:
    user.password_hash = hash_password(new_password)
    db.session.commit()
    return user


# -- credential resolution --

def decode_basic_header(auth_header: str) -> tuple[str, str] | None:
    """
    Decode ``Basic <base64(username:password)>``.

    Splits on the first colon so passwords may contain colons. Returns None
    when the payload is not valid base64/UTF-8 or either part is empty.
    """
    encoded = auth_header[len(BASIC_PREFIX):].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, sep, password = decoded.partition(":")
    if not sep or not username or not password:
        return None
    return username, password


def resolve_basic(auth_header: str) -> GuardResult:
    credentials = decode_basic_header(auth_header)
    if credentials is None:
        return Deny(401, "INVALID_CREDENTIALS", "Invalid credentials format")

    username, password = credentials
    # Same code and message for unknown user and wrong password
    user = authenticate(username, password)
    if user is None:
        return Deny(401, "INVALID_CREDENTIALS", "Invalid username or password")
    return Allow(principal=user)


def resolve_session(token: str | None) -> GuardResult:
    if not token:
        return Deny(401, "UNAUTHORIZED", "Authentication required")

    session = session_service.validate_session(token)
    if session is None:
        return Deny(401, "UNAUTHORIZED", "Authentication required")

    user = find_user_by_id(session.user_id)
    if user is None:
        return Deny(401, "USER_NOT_FOUND", "User not found")
    return Allow(principal=user)


def has_basic_header(auth_header: str | None) -> bool:
    return bool(auth_header) and auth_header.startswith(BASIC_PREFIX)


def resolve_request(auth_header: str | None, session_token: str | None) -> tuple[GuardResult, str]:
    """
    Resolve credentials in priority order.

    Returns (result, method). A present Basic header decides the outcome on
    its own; only its absence lets the session path run.
    """
    if has_basic_header(auth_header):
        return resolve_basic(auth_header), "basic"
    return resolve_session(session_token), "session"
