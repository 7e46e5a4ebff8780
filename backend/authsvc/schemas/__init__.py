"""Marshmallow schemas for request validation and response serialization."""

from .auth import (
    LoginSchema,
    PasswordResetConfirmSchema,
    PasswordResetRequestSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)

__all__ = [
    "LoginSchema",
    "PasswordResetConfirmSchema",
    "PasswordResetRequestSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "UserSchema",
]
