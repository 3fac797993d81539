from __future__ import annotations

import logging
from decimal import Decimal
from functools import wraps
from typing import Any, Callable

from flask import Flask, current_app, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.capabilities import Capability, has_capability
from ..core.exceptions import (
    AlreadyProcessedError,
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateUserError,
    InsufficientBalanceError,
    NotFoundError,
    StoreFailure,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[DomainError], int] = {
    ValidationError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    NotFoundError: 404,
    AlreadyProcessedError: 409,
    DuplicateUserError: 409,
    InsufficientBalanceError: 409,
    StoreFailure: 503,
}


def status_for(error: DomainError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 400


def error_response(message: str, status: int, **extra: Any):
    return jsonify({"error": message, **extra}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def to_json(value: Any) -> Any:
    """Make service results jsonify-able (dataclasses with as_dict, Decimals)."""
    if hasattr(value, "as_dict"):
        return value.as_dict()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {getattr(k, "value", k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        extra: dict[str, Any] = {}
        if isinstance(e, InsufficientBalanceError):
            extra = {
                "available": float(e.available),
                "total": float(e.total),
                "pending": float(e.pending),
            }
        return error_response(str(e), status_for(e), **extra)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # 404 for unknown routes, 405, ... keep their own status
        if isinstance(e, HTTPException):
            return error_response(e.description or e.name, e.code or 500)
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if current_app.config.get("DEBUG"):
            return error_response(f"Internal error: {e}", 500)
        return error_response("Internal error", 500)


def login_required(view: Callable) -> Callable:
    """Resolve the session's user id to a fresh user record on every request."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        container = current_app.extensions["leave_management"]
        try:
            g.current_user = container.auth_service.resolve_session(session.get("user_id"))
        except AuthenticationError as e:
            session.clear()
            return error_response(str(e), 401)
        return view(*args, **kwargs)

    return wrapper


def capability_required(capability: Capability) -> Callable[[Callable], Callable]:
    def decorator(view: Callable) -> Callable:
        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            if not has_capability(g.current_user.role, capability):
                return error_response("You do not have permission to view this page", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator
