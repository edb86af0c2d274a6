# Overview: Service-layer operations for user management by super admins.

"""
User management.

Rules enforced here rather than in the guards because they depend on both
the actor and the target:

- an actor cannot change their own role
- an actor cannot delete their own account
- the last super_admin can be neither deleted nor demoted
"""

from __future__ import annotations

from flask import current_app

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import User
from ..permissions import Role
from . import auth_service, session_service


def _super_admin_count() -> int:
    return db.session.query(User).filter_by(role=Role.SUPER_ADMIN).count()


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def list_users_by_role(role: str) -> list[User]:
    return db.session.query(User).filter_by(role=role).order_by(User.created_at.desc(), User.id.desc()).all()


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found", "user")
    return user


def create_user(actor: User, username: str, password: str, role: str) -> User:
    user = auth_service.create_user(username, password, role)
    current_app.logger.info("User created: %s (%s) by %s", user.username, user.role, actor.username)
    return user


def update_user(
    actor: User,
    user_id: int,
    *,
    username: str | None = None,
    password: str | None = None,
    role: str | None = None,
) -> User:
    user = get_user(user_id)

    if role and role != user.role:
        if user.id == actor.id:
            raise ValidationError("Cannot change your own role", code="CANNOT_CHANGE_OWN_ROLE")
        if user.role == Role.SUPER_ADMIN and _super_admin_count() <= 1:
            raise ValidationError("Cannot demote the last super admin", code="LAST_SUPER_ADMIN")

    if username and username != user.username:
        if auth_service.username_exists(username):
            raise auth_service.username_taken()
        user.username = username

    if role and role != user.role:
        current_app.logger.info(
            "Role change for %s: %s -> %s by %s", user.username, user.role, role, actor.username
        )
        user.role = role

    if password:
        user.password_hash = auth_service.hash_password(password)

    auth_service.commit_user_change()

    if password:
        session_service.revoke_user_sessions(user.id, reason="password_reset")

    current_app.logger.info("User updated: %s by %s", user.username, actor.username)
    return user


def delete_user(actor: User, user_id: int) -> None:
    user = get_user(user_id)

    if user.id == actor.id:
        raise ValidationError("Cannot delete your own account", code="CANNOT_DELETE_SELF")
    if user.role == Role.SUPER_ADMIN and _super_admin_count() <= 1:
        raise ValidationError("Cannot delete the last super admin", code="LAST_SUPER_ADMIN")

    username = user.username
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("User deleted: %s by %s", username, actor.username)
