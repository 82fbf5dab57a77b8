# Overview: Pytest coverage for the authentication gate and role policy.

"""
Authentication Gate and Authorization Policy Tests

Covers:
- token transport (cookie first, bearer header fallback)
- 401 for each credential defect, 403 for role and tenant denials
- the principal is request-scoped and carries the token's business_id
"""

from datetime import timedelta

import pytest

from stockroom.errors import ForbiddenError, UnauthenticatedError
from stockroom.models import ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_USER
from stockroom.services import permission_service, session_service
from stockroom.services.tenant_service import require_tenant
from stockroom.services.token_service import TokenClaims, TokenCodec
from stockroom.time_utils import utcnow

from conftest import auth_headers, principal_for, token_for


class _FakeRequest:
    def __init__(self, cookies=None, headers=None):
        self.cookies = cookies or {}
        self.headers = headers or {}


class TestExtractToken:

    def test_cookie_preferred(self):
        request = _FakeRequest(cookies={"token": "from-cookie"}, headers={"Authorization": "Bearer from-header"})
        assert session_service.extract_token(request) == "from-cookie"

    def test_bearer_header_fallback(self):
        request = _FakeRequest(headers={"Authorization": "Bearer from-header"})
        assert session_service.extract_token(request) == "from-header"

    def test_missing_credential(self):
        with pytest.raises(UnauthenticatedError):
            session_service.extract_token(_FakeRequest())

    def test_non_bearer_scheme_ignored(self):
        with pytest.raises(UnauthenticatedError):
            session_service.extract_token(_FakeRequest(headers={"Authorization": "Basic abc"}))


class TestAuthenticate:

    def test_principal_carries_token_claims(self, codec):
        token = codec.issue(TokenClaims(user_id=5, business_id=9, role=ROLE_EMPLOYEE, email="e@x.com"))
        principal = session_service.authenticate(token, codec)

        assert principal.user_id == 5
        assert principal.business_id == 9
        assert principal.role == ROLE_EMPLOYEE
        assert principal.has_tenant

    def test_unassigned_principal_has_no_tenant(self, codec):
        token = codec.issue(TokenClaims(user_id=5, business_id=0, role=ROLE_ADMIN))
        principal = session_service.authenticate(token, codec)

        assert principal.business_id == 0
        assert not principal.has_tenant


class TestRolePolicy:

    def test_matching_role_allowed(self, db_session, user_a):
        permission_service.require_role(principal_for(user_a), ROLE_ADMIN)

    def test_other_role_forbidden(self, db_session, employee_a):
        with pytest.raises(ForbiddenError):
            permission_service.require_role(principal_for(employee_a), ROLE_ADMIN)

    def test_has_role_is_boolean_form(self, db_session, user_a, employee_a):
        assert permission_service.has_role(principal_for(user_a), ROLE_ADMIN)
        assert not permission_service.has_role(principal_for(employee_a), ROLE_ADMIN)
        assert not permission_service.has_role(None, ROLE_USER)

    def test_unknown_role_is_a_programming_error(self, db_session, user_a):
        with pytest.raises(ValueError):
            permission_service.has_role(principal_for(user_a), "superuser")


class TestTenantRequirement:

    def test_unassigned_user_forbidden(self, db_session, unassigned_user):
        with pytest.raises(ForbiddenError):
            require_tenant(principal_for(unassigned_user))

    def test_assigned_user_gets_business_id(self, db_session, user_a, business_a):
        assert require_tenant(principal_for(user_a)) == business_a.id


class TestGateOverHttp:

    def test_no_credential_is_401(self, client, db_session):
        response = client.get("/api/products")
        assert response.status_code == 401
        assert "error" in response.json

    def test_bearer_token_accepted(self, app, client, db_session, user_a):
        response = client.get("/api/products", headers=auth_headers(token_for(app, user_a)))
        assert response.status_code == 200

    def test_cookie_token_accepted(self, app, client, db_session, user_a):
        client.set_cookie("token", token_for(app, user_a))
        response = client.get("/api/products")
        assert response.status_code == 200

    def test_expired_token_is_401(self, app, client, db_session, user_a, codec):
        token, _claims = codec.issue_for_user(user_a, expires_at=utcnow() - timedelta(seconds=1))
        response = client.get("/api/products", headers=auth_headers(token))
        assert response.status_code == 401

    def test_foreign_signature_is_401(self, client, db_session, user_a):
        foreign = TokenCodec("a-completely-different-signing-secret-value")
        token, _claims = foreign.issue_for_user(user_a)
        response = client.get("/api/products", headers=auth_headers(token))
        assert response.status_code == 401

    def test_unassigned_user_forbidden_on_tenant_route(self, app, client, db_session, unassigned_user):
        response = client.get("/api/products", headers=auth_headers(token_for(app, unassigned_user)))
        assert response.status_code == 403
        assert response.json["error"] == "Business context required"

    def test_non_admin_assign_forbidden(self, app, client, db_session, employee_a, unassigned_user):
        response = client.post(
            "/api/businesses/assign",
            json={"user_id": unassigned_user.id},
            headers=auth_headers(token_for(app, employee_a)),
        )
        assert response.status_code == 403

    def test_non_admin_create_employee_forbidden(self, app, client, db_session, employee_a):
        response = client.post(
            "/api/users/createEmployee",
            json={"first_name": "N", "last_name": "E", "email": "n@e.com", "password": "pw"},
            headers=auth_headers(token_for(app, employee_a)),
        )
        assert response.status_code == 403

    def test_session_endpoint_reports_identity(self, app, client, db_session, user_a):
        response = client.get("/api/session", headers=auth_headers(token_for(app, user_a)))

        assert response.status_code == 200
        assert response.json["user_id"] == user_a.id
        assert response.json["role"] == ROLE_ADMIN
        assert 0 < response.json["expires_in"] <= 24 * 3600

    def test_session_for_deleted_user_is_401(self, app, client, db_session, user_a):
        token = token_for(app, user_a)
        user_a.soft_delete()
        db_session.commit()

        response = client.get("/api/session", headers=auth_headers(token))
        assert response.status_code == 401
