from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from stockroom.time_utils import to_utc_z
from .base import SoftDeleteMixin, TimestampMixin


def money_str(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return str(Decimal(value).quantize(Decimal("0.01")))


class Category(TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Product category within a business.

    MULTI-TENANT: names are unique per business, compared case-insensitively,
    never globally. Two tenants may both own a "Beverages" category.
    """
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    name = db.Column(db.String(50), nullable=False)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    business = db.relationship("Business")
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r} business_id={self.business_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "name": self.name,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Product(TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Product master data with its current on-hand quantity.

    quantity is the authoritative cached count. It only changes inside a unit
    of work that also appends the matching ledger row (stock entry or sale),
    except for decreases made by direct edit, which are not ledgered.
    version_id makes a write based on a stale read fail instead of
    overwriting a concurrent change to quantity.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        db.Index("ix_products_business_category", "business_id", "category_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    version_id = db.Column(db.Integer, nullable=False, default=1)

    business = db.relationship("Business")
    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} quantity={self.quantity} business_id={self.business_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "category_id": self.category_id,
            "name": self.name,
            "description": self.description,
            "quantity": self.quantity,
            "price": money_str(self.price),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


# Uniqueness among active rows only, so a soft-deleted name can be reused.
db.Index(
    "uq_categories_business_lower_name",
    Category.business_id,
    db.func.lower(Category.name),
    unique=True,
    sqlite_where=Category.deleted_at.is_(None),
    postgresql_where=Category.deleted_at.is_(None),
)

db.Index(
    "uq_products_business_category_lower_name",
    Product.business_id,
    Product.category_id,
    db.func.lower(Product.name),
    unique=True,
    sqlite_where=Product.deleted_at.is_(None),
    postgresql_where=Product.deleted_at.is_(None),
)
