"""Authentication endpoints using the service layer."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, current_app, request
from flask_jwt_extended import get_jwt_identity, set_access_cookies

from authsvc.api.deps import (
    auth_settings,
    build_auth_service,
    json_response,
    require_auth,
    reset_delivery,
    timing,
)
from authsvc.core.errors import APIError
from authsvc.schemas import (
    LoginSchema,
    PasswordResetConfirmSchema,
    PasswordResetRequestSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from authsvc.services.auth.dto import (
    LoginIn,
    PasswordResetConfirmIn,
    PasswordResetRequestIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)

bp = Blueprint("auth", __name__, url_prefix="/auth")

APP_VERSION_HEADER = "X-App-Version"
APP_TYPE_HEADER = "X-App-Type"
DEVICE_ID_HEADER = "X-Device-ID"
ALLOWED_APP_TYPES = ("ios", "android", "web")

RESET_REQUESTED_MESSAGE = "Password reset request created successfully"
RESET_CONFIRMED_MESSAGE = "Password has been reset successfully"

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
reset_request_schema = PasswordResetRequestSchema()
reset_confirm_schema = PasswordResetConfirmSchema()
token_schema = TokenPairSchema()
user_schema = UserSchema()


def _missing_header(name: str) -> APIError:
    return APIError(f"Missing required header: {name}", code="missing_headers")


@bp.before_request
def require_client_headers() -> None:
    """Reject auth requests that do not identify the calling client app."""

    if request.method == "OPTIONS" or not current_app.config.get("REQUIRE_CLIENT_HEADERS", True):
        return
    if not request.headers.get(APP_VERSION_HEADER):
        raise _missing_header(APP_VERSION_HEADER)
    app_type = request.headers.get(APP_TYPE_HEADER)
    if not app_type:
        raise _missing_header(APP_TYPE_HEADER)
    if app_type.lower() not in ALLOWED_APP_TYPES:
        raise APIError(
            "Invalid app type. Must be one of: " + ", ".join(ALLOWED_APP_TYPES),
            code="invalid_app_type",
        )
    if not request.headers.get(DEVICE_ID_HEADER):
        raise _missing_header(DEVICE_ID_HEADER)


def _token_response(pair: TokenPairOut) -> Response:
    response = json_response({"data": token_schema.dump(pair)})
    max_age = int(auth_settings().access_expires.total_seconds())
    set_access_cookies(response, pair.access_token, max_age=max_age)
    return response


@bp.post("/register")
@timing
def register():
    """Register a new user and return the created representation."""

    data = register_schema.load(request.get_json(silent=True) or {})
    user = build_auth_service().register(RegisterIn(**data))
    return json_response({"data": user_schema.dump(user)}, status=HTTPStatus.CREATED)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    pair = build_auth_service().login(LoginIn(**data))
    return _token_response(pair)


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the presented refresh token into a new token pair."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    pair = build_auth_service().refresh_tokens(RefreshIn(**data))
    return _token_response(pair)


@bp.post("/reset-password")
@timing
def request_password_reset():
    """Start a password reset. The response never reveals whether the email exists."""

    data = reset_request_schema.load(request.get_json(silent=True) or {})
    build_auth_service().request_password_reset(
        PasswordResetRequestIn(**data), deliver=reset_delivery()
    )
    return json_response({"message": RESET_REQUESTED_MESSAGE})


@bp.post("/reset-password/confirm")
@timing
def confirm_password_reset():
    """Consume a reset token and set a new password."""

    data = reset_confirm_schema.load(request.get_json(silent=True) or {})
    build_auth_service().confirm_password_reset(PasswordResetConfirmIn(**data))
    return json_response({"message": RESET_CONFIRMED_MESSAGE})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user profile."""

    user = build_auth_service().get_current_user(get_jwt_identity())
    return json_response({"data": user_schema.dump(user)})
