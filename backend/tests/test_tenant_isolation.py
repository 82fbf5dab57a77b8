# Overview: Pytest coverage for tenant isolation behavior.

"""
Multi-Tenant Isolation Tests

SECURITY TESTS: Prove that cross-tenant access is denied for core resources.

These tests create two businesses with their own users, categories and
products, then verify that:
1. A principal of Business A cannot read or write Business B's rows
2. Passing a foreign id behaves exactly like passing a nonexistent id
3. Listings never include another tenant's rows

Test Coverage:
- Categories: cross-tenant read/edit/delete blocked
- Products: cross-tenant read/write blocked
- Stock: cross-tenant additions blocked
- Sales: cross-tenant sale and read blocked
"""

import pytest

from stockroom.errors import NotFoundError
from stockroom.extensions import db
from stockroom.models import Category, Product, Sale, StockEntry
from stockroom.services import (
    category_service,
    inventory_service,
    products_service,
    reporting_service,
    sales_service,
)
from stockroom.services.tenant_service import scoped_query

from conftest import principal_for


class TestScopedQuery:

    def test_only_own_active_rows(self, db_session, business_a, business_b, product_a, product_b):
        rows = scoped_query(Product, business_a.id).all()
        assert [p.id for p in rows] == [product_a.id]

    def test_soft_deleted_rows_hidden(self, db_session, business_a, product_a):
        product_a.soft_delete()
        db_session.commit()
        assert scoped_query(Product, business_a.id).count() == 0


class TestCategoryIsolation:

    def test_get_foreign_category_not_found(self, db_session, user_a, category_b):
        with pytest.raises(NotFoundError):
            category_service.get_category(principal_for(user_a), category_b.id)

    def test_edit_foreign_category_not_found(self, db_session, user_a, category_b):
        with pytest.raises(NotFoundError):
            category_service.edit_category(principal_for(user_a), category_b.id, name="Hijacked")
        assert db.session.get(Category, category_b.id).name == "Snacks"

    def test_delete_foreign_category_not_found(self, db_session, user_a, category_b):
        with pytest.raises(NotFoundError):
            category_service.delete_category(principal_for(user_a), category_b.id)
        assert db.session.get(Category, category_b.id).deleted_at is None

    def test_foreign_category_products_not_found(self, db_session, user_a, category_b, product_b):
        with pytest.raises(NotFoundError):
            category_service.list_category_products(principal_for(user_a), category_b.id)

    def test_listing_excludes_foreign(self, db_session, user_a, category_a, category_b):
        items = category_service.list_categories(principal_for(user_a))
        assert [c["id"] for c in items] == [category_a.id]


class TestProductIsolation:

    def test_get_foreign_product_not_found(self, db_session, user_a, product_b):
        with pytest.raises(NotFoundError):
            products_service.get_product(principal_for(user_a), product_b.id)

    def test_update_foreign_product_not_found(self, db_session, user_a, product_b):
        with pytest.raises(NotFoundError):
            products_service.update_product(principal_for(user_a), product_b.id, {"quantity": 0})
        assert db.session.get(Product, product_b.id).quantity == 30

    def test_move_into_foreign_category_not_found(self, db_session, user_a, product_a, category_b):
        with pytest.raises(NotFoundError):
            products_service.update_product(principal_for(user_a), product_a.id, {"category_id": category_b.id})
        assert db.session.get(Product, product_a.id).category_id == product_a.category_id

    def test_delete_foreign_product_not_found(self, db_session, user_a, product_b):
        with pytest.raises(NotFoundError):
            products_service.delete_product(principal_for(user_a), product_b.id)
        assert db.session.get(Product, product_b.id).deleted_at is None

    def test_aggregates_ignore_foreign(self, db_session, user_a, product_a, product_b):
        principal = principal_for(user_a)
        assert products_service.count_products(principal) == 1
        assert products_service.total_inventory_value(principal) == "100.00"
        assert [p["id"] for p in products_service.list_products(principal)] == [product_a.id]


class TestLedgerIsolation:

    def test_add_stock_to_foreign_product_not_found(self, db_session, user_a, product_b):
        with pytest.raises(NotFoundError):
            inventory_service.add_stock(principal_for(user_a), product_id=product_b.id, quantity=5)

        assert db.session.get(Product, product_b.id).quantity == 30
        assert db_session.query(StockEntry).filter_by(product_id=product_b.id).count() == 1

    def test_sell_foreign_product_not_found(self, db_session, user_a, product_b):
        with pytest.raises(NotFoundError):
            sales_service.create_sale(principal_for(user_a), product_id=product_b.id, quantity=1)

        assert db.session.get(Product, product_b.id).quantity == 30
        assert db_session.query(Sale).count() == 0

    def test_foreign_balance_not_found(self, db_session, user_a, product_b):
        with pytest.raises(NotFoundError):
            inventory_service.ledger_balance(principal_for(user_a), product_b.id)

    def test_sales_and_stock_listings_exclude_foreign(self, db_session, user_a, user_b, product_a, product_b):
        sales_service.create_sale(principal_for(user_b), product_id=product_b.id, quantity=2)

        assert sales_service.list_sales(principal_for(user_a)) == []
        entries = inventory_service.list_stock_entries(principal_for(user_a))
        assert {e["product_id"] for e in entries} == {product_a.id}

    def test_reports_exclude_foreign(self, db_session, user_a, product_a, product_b):
        report = reporting_service.build_report(
            principal_for(user_a), "current-stock", "2000-01-01T00:00:00Z", "2100-01-01T00:00:00Z",
        )
        assert [r["product"] for r in report["rows"]] == ["Chips"]
