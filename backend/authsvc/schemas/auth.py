"""Authentication-related Marshmallow schemas.

Input schemas only check presence and type. Shape rules (email format,
password length, name length) are enforced by the auth service so every
``invalid_input`` error comes from one place.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields


class _InputSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class RegisterSchema(_InputSchema):
    """Input payload for account registration."""

    name = fields.String(required=True)
    email = fields.String(required=True)
    password = fields.String(required=True)


class LoginSchema(_InputSchema):
    """Input payload for authenticating a user."""

    email = fields.String(required=True)
    password = fields.String(required=True)


class RefreshSchema(_InputSchema):
    """Input payload for rotating a refresh token."""

    refresh_token = fields.String(required=True)


class PasswordResetRequestSchema(_InputSchema):
    email = fields.String(required=True)


class PasswordResetConfirmSchema(_InputSchema):
    token = fields.String(required=True)
    new_password = fields.String(required=True)


class TokenPairSchema(Schema):
    """Response payload containing both tokens."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(dump_default="Bearer")
    expires_in = fields.Integer(required=True)


class UserSchema(Schema):
    """Public user representation."""

    id = fields.String(required=True)
    email = fields.String(required=True)
    name = fields.String(required=True)
    is_active = fields.Boolean(required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
