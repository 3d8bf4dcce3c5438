"""Marshmallow schemas for rounds and settlement."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates


class GameSchema(Schema):
    """Serialize Game."""

    id = fields.Int(required=True)
    week_number = fields.Int(required=True)
    year = fields.Int(required=True)
    winning_numbers = fields.List(fields.Int(), allow_none=True)
    is_active = fields.Boolean(required=True)
    created_at = fields.DateTime()
    closed_at = fields.DateTime(allow_none=True)


class OpenRoundSchema(Schema):
    """Optional explicit week for the very first round."""

    week_number = fields.Int(required=False, load_default=None, allow_none=True, validate=validate.Range(min=1))
    year = fields.Int(required=False, load_default=None, allow_none=True, validate=validate.Range(min=2000))


class WinningNumbersSchema(Schema):
    winning_numbers = fields.List(
        fields.Int(strict=True),
        required=True,
        validate=validate.Length(equal=3),
    )

    @validates("winning_numbers")
    def _validate_unique(self, value, **kwargs):  # type: ignore[no-untyped-def]
        if len(set(value)) != len(value):
            raise ValidationError("Winning numbers must be 3 distinct values")


class SettlementSummarySchema(Schema):
    game_id = fields.Int(required=True)
    week_number = fields.Int(required=True)
    year = fields.Int(required=True)
    winning_numbers = fields.List(fields.Int(), required=True)
    total_boards = fields.Int(required=True)
    winning_boards = fields.Int(required=True)
    digital_revenue = fields.Int(required=True)


class PlayerHistoryItemSchema(Schema):
    game_id = fields.Int()
    week_number = fields.Int()
    year = fields.Int()
    game_closed_at = fields.DateTime(allow_none=True)
    winning_numbers = fields.List(fields.Int(), allow_none=True)
    board_id = fields.Int()
    numbers = fields.List(fields.Int())
    price = fields.Int()
    board_created_at = fields.DateTime()
    is_winning = fields.Boolean(allow_none=True)
