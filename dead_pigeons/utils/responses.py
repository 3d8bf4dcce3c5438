"""Helpers for consistent JSON response schema."""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify

from dead_pigeons.errors import AppError


def ok(data: Any, status_code: int = 200) -> tuple[Response, int]:
    """Success response."""

    return jsonify({"success": True, "data": data, "error": None}), status_code


def fail(code: str, message: str, status_code: int, details: Any | None = None) -> tuple[Response, int]:
    """Error response."""

    return (
        jsonify(
            {
                "success": False,
                "data": None,
                "error": {"code": code, "message": message, "details": details},
            }
        ),
        status_code,
    )


def fail_with(exc: AppError) -> tuple[Response, int]:
    """Error response for a domain error, tagged with its kind."""

    details = exc.details
    if isinstance(details, dict):
        details = {**details, "kind": exc.kind}
    elif details is None:
        details = {"kind": exc.kind}
    return fail(exc.code, exc.message, exc.status_code, details)
