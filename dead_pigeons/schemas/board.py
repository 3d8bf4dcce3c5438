"""Marshmallow schemas for boards."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates


class BoardSchema(Schema):
    """Serialize Board."""

    id = fields.Int(required=True)
    player_id = fields.Int(required=True)
    game_id = fields.Int(required=True)
    numbers = fields.List(fields.Int(), required=True)
    price = fields.Int(required=True)
    is_winning = fields.Boolean(allow_none=True)
    repeat_weeks = fields.Int(required=True)
    repeat_active = fields.Boolean(required=True)
    renewed_from_id = fields.Int(allow_none=True)
    created_at = fields.DateTime()


class BoardCreateSchema(Schema):
    """Validate a board purchase payload.

    Pool bounds and pricing are checked by the service, which knows the
    configured pool size.
    """

    game_id = fields.Int(required=True)
    numbers = fields.List(fields.Int(strict=True), required=True, validate=validate.Length(min=5, max=8))
    repeat_weeks = fields.Int(required=False, load_default=0, validate=validate.Range(min=0))

    @validates("numbers")
    def _validate_unique(self, value, **kwargs):  # type: ignore[no-untyped-def]
        if len(value) != len(set(value)):
            raise ValidationError("Numbers must be unique")
