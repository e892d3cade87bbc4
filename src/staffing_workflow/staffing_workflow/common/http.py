"""JSON envelope shared by the API controllers.

Success: ``{"success": true, ...}``. Failure: ``{"success": false, "error",
"code"}`` with the status carried by the raised ``DomainError``.
"""

from __future__ import annotations

from functools import wraps

import structlog
from flask import jsonify, request, session

from ..authorization.identity import resolve_actor
from ..core.exceptions import DomainError, ValidationError

logger = structlog.get_logger(__name__)


def ok(status: int = 200, **body):
    return jsonify({"success": True, **body}), status


def fail(error: DomainError):
    body = {"success": False, "error": str(error) or error.code, "code": error.code}
    if error.retryable:
        body["retryable"] = True
    return jsonify(body), error.http_status


def unexpected():
    return jsonify({"success": False, "error": "Internal server error", "code": "UNEXPECTED_FAILURE"}), 500


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def api_action(view):
    """Resolve the actor, run the view and translate errors into the envelope.

    The wrapped view receives ``actor`` as its first keyword argument.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            actor = resolve_actor(session)
            return view(*args, actor=actor, **kwargs)
        except DomainError as e:
            if e.retryable:
                logger.warning("request_failed_transient", endpoint=request.endpoint, error=str(e))
            return fail(e)
        except Exception:
            logger.exception("request_failed_unexpected", endpoint=request.endpoint)
            return unexpected()

    return wrapper
