"""Shared pieces of the JSON controllers: auth guards, input helpers, error mapping."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

SESSION_TOKEN_KEY = "token"

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


@dataclass(frozen=True)
class Guards:
    login_required: Callable
    admin_required: Callable
    staff_required: Callable


def guards(container) -> Guards:
    """Route decorators bound to the container's session registry.

    The signed-in session is exposed as ``g.user_session`` and its user as ``g.actor``.
    """

    def _require(*roles: Role):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                user_session = container.sessions.get(session.get(SESSION_TOKEN_KEY))
                if user_session is None:
                    return jsonify(success=False, message="Please sign in to continue"), 401
                if roles and user_session.user.role not in roles:
                    return jsonify(success=False, message="You do not have permission for this action"), 403
                container.sessions.touch(user_session)
                g.user_session = user_session
                g.actor = user_session.user
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return Guards(
        login_required=_require(),
        admin_required=_require(Role.ADMIN),
        staff_required=_require(Role.ADMIN, Role.HR),
    )


def payload() -> Dict[str, Any]:
    """JSON body when present, otherwise form fields."""

    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def optional_date(value: Any) -> Optional[date]:
    if value is None or str(value).strip() == "":
        return None
    return parse_iso_date(str(value))


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def ok(status: int = 200, **data):
    return jsonify(success=True, **data), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = next((code for cls, code in STATUS_BY_ERROR if isinstance(e, cls)), 400)
        return jsonify(success=False, message=str(e)), status

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify(success=False, message=e.description), e.code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(success=False, message="Internal server error"), 500
