"""Marshmallow schemas for deposits and balances."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from dead_pigeons.models.transaction import TransactionStatus


class TransactionSchema(Schema):
    """Serialize Transaction."""

    id = fields.Int(required=True)
    player_id = fields.Int(required=True)
    mobile_pay_number = fields.Str(required=True)
    amount = fields.Int(required=True)
    status = fields.Enum(TransactionStatus, by_value=True, required=True)
    created_at = fields.DateTime()
    approved_at = fields.DateTime(allow_none=True)
    rejection_reason = fields.Str(allow_none=True)


class TransactionCreateSchema(Schema):
    mobile_pay_number = fields.Str(required=True, validate=validate.Length(min=3, max=64))
    amount = fields.Int(strict=True, required=True, validate=validate.Range(min=1))


class TransactionRejectSchema(Schema):
    reason = fields.Str(required=False, load_default=None, allow_none=True)


class BalanceSchema(Schema):
    player_id = fields.Int(required=True)
    deposited = fields.Int(required=True)
    spent = fields.Int(required=True)
    balance = fields.Int(required=True)
