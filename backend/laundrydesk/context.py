# Overview: Typed request context and guard results threaded through the auth chain.

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional, Union

from flask import g


@dataclass(frozen=True)
class Allow:
    """Guard passed. ``principal`` is set by authenticators."""
    principal: Any = None


@dataclass(frozen=True)
class Deny:
    status: int
    code: str
    message: str


GuardResult = Union[Allow, Deny]


@dataclass(frozen=True)
class AuthContext:
    """
    What the guard chain knows about the current request.

    principal: the authenticated User, or None
    resource: a snapshot of the target resource loaded before resource guards
    resource_loaded: True once a loader ran, even if it found nothing
    auth_method: "basic" or "session"
    """
    principal: Optional[Any] = None
    resource: Optional[Any] = None
    resource_loaded: bool = False
    auth_method: Optional[str] = None

    def with_principal(self, principal, auth_method: str) -> "AuthContext":
        return replace(self, principal=principal, auth_method=auth_method)

    def with_resource(self, resource) -> "AuthContext":
        return replace(self, resource=resource, resource_loaded=True)


def get_auth_context() -> AuthContext:
    return g.get("auth_context") or AuthContext()


def set_auth_context(ctx: AuthContext) -> AuthContext:
    g.auth_context = ctx
    return ctx


def current_principal():
    return get_auth_context().principal
