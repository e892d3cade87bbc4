from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account able to sign in.

    Plain data object; database access lives in the repository.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    company_id: Optional[int] = None
    is_active: bool = True
