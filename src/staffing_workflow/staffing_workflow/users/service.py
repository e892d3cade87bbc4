from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog
from werkzeug.security import check_password_hash

from ..authorization.identity import Actor
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .repository import UserRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    company_id: Optional[int]

    def as_actor(self) -> Actor:
        return Actor(user_id=self.user_id, role=self.role, company_id=self.company_id)


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = require_non_empty(username, "Username")
        user = self._users.get_by_username(username)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder hashes like 'CHANGE_ME' are not parseable
            ok = False

        if not ok:
            logger.info("login_rejected", username=username)
            raise AuthenticationError("Invalid username or password")

        logger.info("login_succeeded", user_id=user.user_id, role=user.role.value)
        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            role=user.role,
            company_id=user.company_id,
        )
