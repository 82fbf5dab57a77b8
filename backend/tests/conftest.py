"""
Pytest fixtures for stockroom backend tests.

Provides test database setup, two-tenant fixtures, principals and a test client.
"""

from datetime import timedelta

import pytest

from stockroom import create_app
from stockroom.config import TestConfig
from stockroom.extensions import db
from stockroom.models import Business, Category, Product, StockEntry, User, ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_USER
from stockroom.services.auth_service import hash_password
from stockroom.services.session_service import Principal
from stockroom.time_utils import utcnow

PASSWORD = "p1"
BUSINESS_PASSWORD = "biz-secret"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='session')
def password_hash():
    """bcrypt is slow on purpose; hash the shared test password once."""
    return hash_password(PASSWORD)


@pytest.fixture(scope='session')
def business_password_hash():
    return hash_password(BUSINESS_PASSWORD)


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def codec(app):
    return app.extensions["token_codec"]


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def business_a(db_session, business_password_hash):
    """Create Business A (first tenant)."""
    business = Business(name="Acme", password_hash=business_password_hash)
    db_session.add(business)
    db_session.commit()
    return business


@pytest.fixture(scope='function')
def business_b(db_session, business_password_hash):
    """Create Business B (second tenant)."""
    business = Business(name="Beta", password_hash=business_password_hash)
    db_session.add(business)
    db_session.commit()
    return business


def _make_user(db_session, password_hash, *, email, role, business=None):
    user = User(
        first_name=email.split("@")[0].title(),
        last_name="Tester",
        email=email,
        password_hash=password_hash,
        role=role,
        business_id=business.id if business is not None else None,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def user_a(db_session, business_a, password_hash):
    """Admin linked to Business A."""
    return _make_user(db_session, password_hash, email="admin_a@acme.com", role=ROLE_ADMIN, business=business_a)


@pytest.fixture(scope='function')
def user_b(db_session, business_b, password_hash):
    """Admin linked to Business B."""
    return _make_user(db_session, password_hash, email="admin_b@beta.com", role=ROLE_ADMIN, business=business_b)


@pytest.fixture(scope='function')
def employee_a(db_session, business_a, password_hash):
    return _make_user(db_session, password_hash, email="clerk_a@acme.com", role=ROLE_EMPLOYEE, business=business_a)


@pytest.fixture(scope='function')
def unassigned_user(db_session, password_hash):
    """Plain user with no business yet."""
    return _make_user(db_session, password_hash, email="drifter@example.com", role=ROLE_USER)


@pytest.fixture(scope='function')
def unassigned_admin(db_session, password_hash):
    return _make_user(db_session, password_hash, email="founder@example.com", role=ROLE_ADMIN)


def principal_for(user, business_id=None) -> Principal:
    """Principal as the auth gate would build it from a fresh token for `user`."""
    return Principal(
        user_id=user.id,
        business_id=business_id if business_id is not None else (user.business_id or 0),
        role=user.role,
        email=user.email,
        token_expiry=utcnow() + timedelta(hours=24),
    )


@pytest.fixture(scope='function')
def principal_a(user_a):
    return principal_for(user_a)


@pytest.fixture(scope='function')
def principal_b(user_b):
    return principal_for(user_b)


@pytest.fixture(scope='function')
def category_a(db_session, business_a):
    category = Category(business_id=business_a.id, name="Snacks")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def category_b(db_session, business_b):
    category = Category(business_id=business_b.id, name="Snacks")
    db_session.add(category)
    db_session.commit()
    return category


def _make_product(db_session, category, *, name, quantity, price):
    product = Product(
        business_id=category.business_id,
        category_id=category.id,
        name=name,
        quantity=quantity,
        price=price,
    )
    db_session.add(product)
    db_session.flush()
    if quantity > 0:
        db_session.add(StockEntry(business_id=category.business_id, product_id=product.id, quantity=quantity))
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def product_a(db_session, category_a):
    """Chips in Business A: 50 on hand at 2.00."""
    from decimal import Decimal
    return _make_product(db_session, category_a, name="Chips", quantity=50, price=Decimal("2.00"))


@pytest.fixture(scope='function')
def product_b(db_session, category_b):
    from decimal import Decimal
    return _make_product(db_session, category_b, name="Pretzels", quantity=30, price=Decimal("3.50"))


def token_for(app, user) -> str:
    """Helper to issue a session token for a user."""
    token, _claims = app.extensions["token_codec"].issue_for_user(user)
    return token


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
