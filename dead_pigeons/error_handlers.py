"""Map domain and framework errors onto the JSON error envelope."""

from __future__ import annotations

import logging

from flask import Flask
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from dead_pigeons.errors import AppError, ConflictError, ValidationError
from dead_pigeons.utils.responses import fail, fail_with

logger = logging.getLogger(__name__)

# Constraint name (or column, for SQLite's messages) -> error code surfaced to clients.
_CONSTRAINT_CODES = {
    "uq_games_single_active": "round_already_active",
    "games.is_active": "round_already_active",
    "uq_games_year_week": "round_already_exists",
    "games.year, games.week_number": "round_already_exists",
    "uq_boards_renewal": "board_already_renewed",
    "boards.renewed_from_id, boards.game_id": "board_already_renewed",
    "mobile_pay_number": "duplicate_mobile_pay_number",
}


def conflict_from_integrity_error(exc: IntegrityError) -> ConflictError:
    """Turn a lost unique-constraint race into the matching state conflict."""

    text = str(exc.orig) if exc.orig is not None else str(exc)
    for marker, code in _CONSTRAINT_CODES.items():
        if marker in text:
            return ConflictError("Conflicting concurrent update", {"constraint": marker}, code=code)
    return ConflictError(details=text)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        # Client mistakes and refused purchases are routine; keep them out of WARNING.
        level = logging.DEBUG if exc.kind == "not_found" else logging.INFO
        logger.log(level, "%s (%s): %s", exc.code, exc.kind, exc.message)
        return fail_with(exc)

    @app.errorhandler(MarshmallowValidationError)
    def _handle_schema_error(exc: MarshmallowValidationError):
        return fail_with(ValidationError(details=exc.messages))

    @app.errorhandler(IntegrityError)
    def _handle_integrity_error(exc: IntegrityError):
        conflict = conflict_from_integrity_error(exc)
        logger.info("Integrity error mapped to %s", conflict.code, exc_info=exc)
        return fail_with(conflict)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        status = int(getattr(exc, "code", 500) or 500)
        if status == 404:
            return fail("not_found", "Not found", 404, {"kind": "not_found"})
        if status == 405:
            return fail("method_not_allowed", "Method not allowed", 405, {"allowed": sorted(getattr(exc, "valid_methods", None) or [])})

        return fail(
            "http_error",
            getattr(exc, "description", "HTTP error"),
            status,
            details={"name": getattr(exc, "name", "HTTPException")},
        )

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        logger.exception("Unhandled exception")
        return fail("internal_error", "Internal server error", 500)
