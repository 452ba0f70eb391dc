"""
api/dependencies.py — FastAPI dependency injection: services, current user, role guards.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from ..auth.models import Role, User
from ..config import Settings, get_settings
from ..core.auth_service import AuthService
from ..core.errors import ForbiddenError, UnauthorizedError
from ..core.mailer import build_dispatcher


def get_auth_service(settings: Settings = Depends(get_settings)) -> AuthService:
    return AuthService(settings, build_dispatcher(settings))


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Resolve the bearer token; attach the user and raw token to request.state."""
    token = bearer_token(authorization)
    if not token:
        raise UnauthorizedError("Not authorized, no token")
    user = auth.authenticate(token)
    request.state.user = user
    request.state.token = token
    return user


def require_role(*roles: Role, message: Optional[str] = None):
    """Return a dependency that enforces one of the given roles."""
    def _check(user: User = Depends(get_current_user)) -> User:
        if user.user_role not in roles:
            raise ForbiddenError(
                message
                or f"Role '{user.user_role.value}' is not permitted. "
                f"Required: {', '.join(r.value for r in roles)}"
            )
        return user
    return _check


# Pre-built shortcuts
require_staff = require_role(
    Role.COACH, Role.ADMIN,
    message="Access denied. Only coaches and admins can delete users.",
)
