"""Helpers shared by the JSON controllers."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from flask import jsonify, request

from ..core.exceptions import (
    AlreadyTerminalError,
    AuthorizationError,
    ConfigurationError,
    DomainError,
    DuplicatePendingError,
    DuplicateSubmissionError,
    JustificationRequired,
    NotFoundError,
    StaleStateError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

# Most specific first: subclasses must be matched before their bases.
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (AlreadyTerminalError, 409),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicatePendingError, 409),
    (DuplicateSubmissionError, 409),
    (StaleStateError, 409),
    (ConfigurationError, 500),
    (ValidationError, 400),
)


def status_for(exc: DomainError) -> int:
    for err_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, err_type):
            return status
    return 400


def error_response(exc: DomainError):
    if isinstance(exc, JustificationRequired):
        blocked = exc.blocked
        verdict = blocked.verdict
        body = {
            "error": str(exc),
            "code": exc.code,
            "reason": blocked.reason.value,
            "details": {
                "is_late": verdict.is_late,
                "is_out_of_range": verdict.is_out_of_range,
                "distance": (round(verdict.distance_meters) if verdict.distance_meters is not None else None),
            },
        }
        return jsonify(body), 400

    status = status_for(exc)
    if status >= 500:
        logger.error("%s: %s", type(exc).__name__, exc)
    return jsonify({"error": str(exc), "code": exc.code}), status


def internal_error(message: str):
    logger.exception(message)
    return jsonify({"error": message, "code": "INTERNAL_ERROR"}), 500


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_field(data: dict[str, Any], name: str) -> Any:
    value = data.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required")
    return value


def parse_date_field(value: Any, field_name: str) -> date:
    try:
        return parse_iso_date(str(value or ""))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def parse_enum(enum_type, value: Any, field_name: str):
    """Case-insensitive lookup of an enum member by value; blank means None."""
    if value is None or not str(value).strip():
        return None
    for member in enum_type:
        if member.value.lower() == str(value).strip().lower():
            return member
    raise ValidationError(f"Invalid {field_name}: {value!r}")


def parse_int_field(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
