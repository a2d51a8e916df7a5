"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import get_jwt_identity

from authcore.api.deps import (
    build_auth_service,
    build_user_service,
    empty_response,
    json_response,
    require_auth,
    timing,
)
from authcore.schemas import (
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenResponseSchema,
    UserSchema,
)
from authcore.services.auth.dto import LoginIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
token_schema = TokenResponseSchema()
user_schema = UserSchema()


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
def register():
    """Create an account and return its first token pair."""

    data = register_schema.load(_json_body())
    pair = build_auth_service().register(RegisterIn(**data))
    return json_response({"data": token_schema.dump(pair)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(_json_body())
    pair = build_auth_service().login(LoginIn(**data))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token; the presented token is consumed."""

    data = refresh_schema.load(_json_body())
    pair = build_auth_service().refresh(RefreshIn(**data))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke one refresh token of the authenticated user."""

    data = logout_schema.load(_json_body())
    build_auth_service().logout(data["refresh_token"], get_jwt_identity())
    return empty_response()


@bp.post("/logout-all")
@require_auth
@timing
def logout_all():
    """Revoke every refresh token of the authenticated user."""

    build_auth_service().logout_all(get_jwt_identity())
    return empty_response()


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user's profile."""

    user = build_user_service().get_by_id(get_jwt_identity())
    return json_response({"data": user_schema.dump(user)})
