from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.enums import Role
from ..core.exceptions import AuthenticationError


@dataclass(frozen=True)
class Actor:
    """The caller of a core operation, passed in explicitly."""

    user_id: int
    role: Role
    company_id: Optional[int] = None


def resolve_actor(session: Mapping[str, Any]) -> Actor:
    """Build the acting user from a Flask session (or any mapping shaped like one)."""

    raw_user_id = session.get("user_id")
    raw_role = session.get("role")
    if raw_user_id is None or raw_role is None:
        raise AuthenticationError("Authentication required")

    try:
        role = Role(raw_role)
        user_id = int(raw_user_id)
    except (TypeError, ValueError):
        raise AuthenticationError("Authentication required")

    company_id = session.get("company_id")
    return Actor(user_id=user_id, role=role, company_id=int(company_id) if company_id is not None else None)
