# Overview: Service-layer operations for server-side sessions.

"""
Session Token Management Service

Login issues an opaque token that the client keeps in an HttpOnly cookie.
Tokens are cryptographically random, stored only as a SHA-256 hash, and
bounded by an absolute and an idle timeout (see Config).
"""

import hashlib
import secrets
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken
from ..time_utils import utcnow


def generate_token() -> str:
    """64 hex characters from 32 random bytes; only the cookie ever holds it."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _absolute_timeout() -> timedelta:
    return timedelta(hours=current_app.config["SESSION_ABSOLUTE_TIMEOUT_HOURS"])


def _idle_timeout() -> timedelta:
    return timedelta(hours=current_app.config["SESSION_IDLE_TIMEOUT_HOURS"])


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """Start a login session; returns the stored record and the cookie token."""
    token = generate_token()
    now = utcnow()

    session = SessionToken(
        user_id=user_id,
        token_hash=hash_token(token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _absolute_timeout(),
        user_agent=(user_agent or "")[:512] or None,
        ip_address=ip_address,
        is_revoked=False,
    )

    db.session.add(session)
    db.session.commit()

    return session, token


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason


def validate_session(token: str) -> SessionToken | None:
    """
    Return the live session for a token, or None.

    Returns None if the token is unknown, revoked, past its absolute expiry,
    or idle for longer than the idle timeout (idle sessions are revoked).
    Updates last_used_at on success. The referenced user is NOT checked
    here; callers decide how to report a session whose user is gone.
    """
    if not token:
        return None

    now = utcnow()
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        _revoke(session, "Expired")
        db.session.commit()
        return None

    if now - session.last_used_at > _idle_timeout():
        _revoke(session, "Idle timeout")
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()
    return session


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """Revoke a session by plaintext token. Returns False if no live session matched."""
    if not token:
        return False

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    _revoke(session, reason)
    db.session.commit()
    return True


def revoke_user_sessions(user_id: int, reason: str, *, keep_token: str | None = None) -> int:
    """Revoke every live session of a user, optionally sparing one token."""
    query = db.session.query(SessionToken).filter_by(user_id=user_id, is_revoked=False)
    if keep_token:
        query = query.filter(SessionToken.token_hash != hash_token(keep_token))

    count = 0
    for session in query.all():
        _revoke(session, reason)
        count += 1
    db.session.commit()
    return count
