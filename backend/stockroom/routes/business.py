# Overview: Flask API routes for the business directory; parses input and returns JSON responses.

"""
Business routes.

MULTI-TENANT: creating a business and business login both change the
tenant a session acts for, so both respond with a freshly issued token
(body and cookie). The caller must use the new token from then on.
"""

from flask import Blueprint, current_app, jsonify, request

from ..decorators import current_principal, require_auth, require_role
from ..models import ROLE_ADMIN
from ..services import tenant_service
from ..validation import parse_int, require_fields
from .auth import set_token_cookie

business_bp = Blueprint("business", __name__, url_prefix="/api")


def _business_session(business, token: str, message: str, status: int):
    response = jsonify({
        "business_id": business.id,
        "business_name": business.name,
        "token": token,
        "message": message,
    })
    response.status_code = status
    return set_token_cookie(response, token)


@business_bp.post("/business")
@require_auth
def create_business_route():
    data = require_fields(request.get_json(silent=True), "business_name", "password")
    business, token = tenant_service.create_business(
        current_principal(),
        name=data["business_name"],
        password=data["password"],
        codec=current_app.extensions["token_codec"],
    )
    return _business_session(business, token, "Business created successfully", 201)


@business_bp.post("/business/login")
@require_auth
def login_business_route():
    data = require_fields(request.get_json(silent=True), "business_name", "password")
    business, token = tenant_service.login_business(
        current_principal(),
        name=data["business_name"],
        password=data["password"],
        codec=current_app.extensions["token_codec"],
    )
    return _business_session(business, token, "Business login successful", 200)


@business_bp.get("/business")
@require_auth
def get_business_route():
    return {"business": tenant_service.get_business(current_principal())}, 200


@business_bp.post("/businesses/assign")
@require_auth
@require_role(ROLE_ADMIN)
def assign_user_route():
    data = require_fields(request.get_json(silent=True), "user_id")
    user = tenant_service.assign_user_to_business(
        current_principal(),
        user_id=parse_int(data["user_id"], "user_id", minimum=1),
    )
    return {"user": user.to_dict(), "message": "User assigned to business successfully"}, 200


@business_bp.post("/business/changePassword")
@require_auth
def change_business_password_route():
    data = require_fields(request.get_json(silent=True), "old_business_password", "new_business_password")
    tenant_service.change_business_password(
        current_principal(),
        old_password=data["old_business_password"],
        new_password=data["new_business_password"],
    )
    return {"message": "Business password updated successfully"}, 200
