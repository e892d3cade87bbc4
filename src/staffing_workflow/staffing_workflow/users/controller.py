from __future__ import annotations

from datetime import timedelta

import structlog
from flask import Flask, session

from ..common.http import fail, json_body, ok, unexpected
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.exceptions import DomainError
from ..container import Container

logger = structlog.get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        try:
            data = json_body()
            s_user = container.auth_service.authenticate(str(data.get("username") or ""), str(data.get("password") or ""))
        except DomainError as e:
            return fail(e)
        except Exception:
            logger.exception("login_failed_unexpected")
            return unexpected()

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        session["company_id"] = s_user.company_id

        return ok(
            message="Logged in",
            user={
                "user_id": s_user.user_id,
                "full_name": s_user.full_name,
                "role": s_user.role.value,
                "company_id": s_user.company_id,
            },
        )

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(message="Logged out")
