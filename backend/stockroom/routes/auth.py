# Overview: Flask API routes for signup and login; parses input and returns JSON responses.

# backend/stockroom/routes/auth.py
"""
Authentication API routes

Tokens are returned twice: in the JSON body (for non-browser clients that
send Authorization: Bearer) and as an HttpOnly cookie (for browsers).
"""

from datetime import datetime

from flask import Blueprint, current_app, jsonify, request

from ..services import auth_service
from ..time_utils import utcnow
from ..validation import require_fields

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def set_token_cookie(response, token: str, expires_at: datetime | None = None):
    """Attach the session token as an HttpOnly cookie."""
    max_age = current_app.config.get("TOKEN_TTL_HOURS", 24) * 3600
    if expires_at is not None:
        max_age = max(int((expires_at - utcnow()).total_seconds()), 0)
    response.set_cookie(
        current_app.config.get("TOKEN_COOKIE_NAME", "token"),
        token,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=current_app.config.get("TOKEN_COOKIE_SECURE", True),
        samesite="Lax",
    )
    return response


def clear_token_cookie(response):
    response.delete_cookie(
        current_app.config.get("TOKEN_COOKIE_NAME", "token"),
        path="/",
        httponly=True,
        secure=current_app.config.get("TOKEN_COOKIE_SECURE", True),
        samesite="Lax",
    )
    return response


def _issue_session(user, message: str, status: int):
    codec = current_app.extensions["token_codec"]
    token, claims = codec.issue_for_user(user)
    response = jsonify({"user": user.to_dict(), "token": token, "message": message})
    response.status_code = status
    return set_token_cookie(response, token, claims.expires_at)


@auth_bp.post("/signup")
def signup_route():
    """
    Register a user.

    Admins are created without a business; plain users must send business_id.
    """
    data = require_fields(request.get_json(silent=True), "first_name", "last_name", "email", "password")

    user = auth_service.create_user(
        first_name=data["first_name"],
        last_name=data["last_name"],
        email=data["email"],
        password=data["password"],
        role=data.get("role") or "user",
        business_id=data.get("business_id"),
    )
    return _issue_session(user, "User created successfully", 201)


@auth_bp.post("/login")
def login_route():
    data = require_fields(request.get_json(silent=True), "email", "password")
    user = auth_service.authenticate(data["email"], data["password"])
    return _issue_session(user, "Login successful", 200)
