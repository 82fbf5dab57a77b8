# Overview: Pytest coverage for business registration, business login and user assignment.

import pytest

from stockroom.errors import ConflictError, ForbiddenError, NotFoundError, UnauthenticatedError
from stockroom.extensions import db
from stockroom.models import Business, User
from stockroom.services import tenant_service
from stockroom.services.auth_service import verify_password

from conftest import BUSINESS_PASSWORD, principal_for


class TestCreateBusiness:

    def test_links_creator_and_issues_token_with_new_tenant(self, db_session, codec, unassigned_admin):
        business, token = tenant_service.create_business(
            principal_for(unassigned_admin), name="Acme", password="p1", codec=codec,
        )

        assert business.id is not None
        assert db.session.get(User, unassigned_admin.id).business_id == business.id

        claims = codec.verify(token)
        assert claims.user_id == unassigned_admin.id
        assert claims.business_id == business.id

    def test_password_is_hashed(self, db_session, codec, unassigned_admin):
        business, _token = tenant_service.create_business(
            principal_for(unassigned_admin), name="Acme", password="p1", codec=codec,
        )
        assert business.password_hash != "p1"
        assert verify_password("p1", business.password_hash)

    def test_duplicate_name_conflicts(self, db_session, codec, business_a, unassigned_admin):
        with pytest.raises(ConflictError):
            tenant_service.create_business(
                principal_for(unassigned_admin), name=business_a.name, password="p1", codec=codec,
            )
        assert db.session.get(User, unassigned_admin.id).business_id is None

    def test_name_is_case_sensitive(self, db_session, codec, business_a, unassigned_admin):
        business, _token = tenant_service.create_business(
            principal_for(unassigned_admin), name=business_a.name.upper(), password="p1", codec=codec,
        )
        assert business.name == "ACME"
        assert db_session.query(Business).count() == 2


class TestLoginBusiness:

    def test_linked_user_logs_in(self, db_session, codec, business_a, employee_a):
        # Token issued before the link existed carries no tenant
        principal = principal_for(employee_a, business_id=0)

        business, token = tenant_service.login_business(
            principal, name="Acme", password=BUSINESS_PASSWORD, codec=codec,
        )

        assert business.id == business_a.id
        assert codec.verify(token).business_id == business_a.id

    def test_other_business_name_forbidden(self, db_session, codec, business_a, business_b, employee_a):
        with pytest.raises(ForbiddenError):
            tenant_service.login_business(
                principal_for(employee_a), name="Beta", password=BUSINESS_PASSWORD, codec=codec,
            )

    def test_unlinked_user_forbidden(self, db_session, codec, business_a, unassigned_user):
        with pytest.raises(ForbiddenError):
            tenant_service.login_business(
                principal_for(unassigned_user), name="Acme", password=BUSINESS_PASSWORD, codec=codec,
            )

    def test_wrong_password_unauthenticated(self, db_session, codec, employee_a):
        with pytest.raises(UnauthenticatedError):
            tenant_service.login_business(
                principal_for(employee_a), name="Acme", password="wrong", codec=codec,
            )


class TestAssignUser:

    def test_admin_assigns_user_to_own_business(self, db_session, user_a, business_a, unassigned_user):
        user = tenant_service.assign_user_to_business(principal_for(user_a), user_id=unassigned_user.id)

        assert user.business_id == business_a.id

    def test_non_admin_forbidden(self, db_session, employee_a, unassigned_user):
        with pytest.raises(ForbiddenError):
            tenant_service.assign_user_to_business(principal_for(employee_a), user_id=unassigned_user.id)
        assert db.session.get(User, unassigned_user.id).business_id is None

    def test_admin_without_business_forbidden(self, db_session, unassigned_admin, unassigned_user):
        with pytest.raises(ForbiddenError):
            tenant_service.assign_user_to_business(principal_for(unassigned_admin), user_id=unassigned_user.id)

    def test_unknown_target_not_found(self, db_session, user_a):
        with pytest.raises(NotFoundError):
            tenant_service.assign_user_to_business(principal_for(user_a), user_id=999999)


class TestChangeBusinessPassword:

    def test_changes_password(self, db_session, user_a, business_a):
        tenant_service.change_business_password(
            principal_for(user_a), old_password=BUSINESS_PASSWORD, new_password="fresh-pass",
        )
        business = db.session.get(Business, business_a.id)
        assert verify_password("fresh-pass", business.password_hash)

    def test_wrong_old_password_rejected(self, db_session, user_a, business_a):
        with pytest.raises(UnauthenticatedError):
            tenant_service.change_business_password(
                principal_for(user_a), old_password="nope", new_password="fresh-pass",
            )
        business = db.session.get(Business, business_a.id)
        assert verify_password(BUSINESS_PASSWORD, business.password_hash)

    def test_requires_tenant(self, db_session, unassigned_user):
        with pytest.raises(ForbiddenError):
            tenant_service.change_business_password(
                principal_for(unassigned_user), old_password="a", new_password="b",
            )


class TestGetBusiness:

    def test_returns_own_business_with_users(self, db_session, user_a, employee_a, user_b):
        data = tenant_service.get_business(principal_for(user_a))

        assert data["name"] == "Acme"
        emails = {u["email"] for u in data["users"]}
        assert emails == {user_a.email, employee_a.email}
