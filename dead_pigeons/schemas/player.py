"""Marshmallow schemas for players."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class PlayerSchema(Schema):
    """Serialize Player."""

    id = fields.Int(required=True)
    full_name = fields.Str(required=True)
    email = fields.Email(required=True)
    phone = fields.Str(required=True)
    is_active = fields.Boolean(required=True)
    activated_at = fields.DateTime(allow_none=True)
    created_at = fields.DateTime()


class PlayerCreateSchema(Schema):
    full_name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    email = fields.Email(required=True)
    phone = fields.Str(required=True, validate=validate.Length(min=1, max=40))


class PlayerUpdateSchema(PlayerCreateSchema):
    email = fields.Email(required=False, load_default=None)
