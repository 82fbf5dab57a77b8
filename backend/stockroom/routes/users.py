# Overview: Flask API routes for the current user and employees; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import current_principal, require_auth, require_role
from ..models import ROLE_ADMIN
from ..services import auth_service, session_service
from ..validation import require_fields
from .auth import clear_token_cookie

users_bp = Blueprint("users", __name__, url_prefix="/api")


@users_bp.get("/session")
@require_auth
def session_route():
    return session_service.verify_session(current_principal()), 200


@users_bp.post("/users/logout")
@require_auth
def logout_route():
    """Stateless tokens: logout clears the cookie; a copied token stays valid until expiry."""
    response = jsonify({"message": "Logged out successfully"})
    return clear_token_cookie(response)


@users_bp.get("/users/profile")
@require_auth
def profile_route():
    return {"user": auth_service.get_profile(current_principal())}, 200


@users_bp.get("/users/business")
@require_auth
def business_users_route():
    users = auth_service.list_business_users(current_principal())
    return {"items": users, "count": len(users)}, 200


@users_bp.post("/users/changePassword")
@require_auth
def change_password_route():
    data = require_fields(request.get_json(silent=True), "old_password", "new_password")
    auth_service.change_password(
        current_principal(),
        old_password=data["old_password"],
        new_password=data["new_password"],
    )
    return {"message": "Password updated successfully"}, 200


@users_bp.post("/users/createEmployee")
@require_auth
@require_role(ROLE_ADMIN)
def create_employee_route():
    data = require_fields(request.get_json(silent=True), "first_name", "last_name", "email", "password")
    user = auth_service.create_employee(
        current_principal(),
        first_name=data["first_name"],
        last_name=data["last_name"],
        email=data["email"],
        password=data["password"],
    )
    return {"user": user.to_dict(), "message": "Employee created successfully"}, 201
