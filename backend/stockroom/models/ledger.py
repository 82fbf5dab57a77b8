from __future__ import annotations

from ..extensions import db
from stockroom.time_utils import to_utc_z, utcnow
from .base import SoftDeleteMixin, TimestampMixin
from .catalog import money_str

"""
Stockroom Ledger Invariants (authoritative)

- StockEntry and Sale are append-only: created, never edited.
- Each row is written inside the same DB transaction as the Product.quantity
  change it accounts for.
- For any product, using only the stock and sale paths:
    quantity == SUM(stock_entries.quantity) - SUM(sales.quantity)
  (the initial creation quantity is itself recorded as a stock entry).
- Sales history may be purged in bulk per business; purging never restores stock.
"""


class StockEntry(TimestampMixin, SoftDeleteMixin, db.Model):
    """One inbound-stock event."""
    __tablename__ = "stock_entries"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="quantity_positive"),
        db.Index("ix_stock_entries_business_added", "business_id", "added_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    added_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    product = db.relationship("Product", backref=db.backref("stock_entries", lazy=True))

    def __repr__(self) -> str:
        return f"<StockEntry id={self.id} product_id={self.product_id} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "added_at": to_utc_z(self.added_at),
        }


class Sale(TimestampMixin, SoftDeleteMixin, db.Model):
    """
    One outbound-stock event.

    total is quantity x unit price captured at the moment of sale, so later
    price edits never rewrite sales history.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="quantity_positive"),
        db.Index("ix_sales_business_sold", "business_id", "sold_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    total = db.Column(db.Numeric(12, 2), nullable=False)
    sold_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    product = db.relationship("Product", backref=db.backref("sales", lazy=True))

    def __repr__(self) -> str:
        return f"<Sale id={self.id} product_id={self.product_id} quantity={self.quantity} total={self.total}>"

    def to_dict(self, include_product: bool = False) -> dict:
        data = {
            "id": self.id,
            "business_id": self.business_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "total": money_str(self.total),
            "sold_at": to_utc_z(self.sold_at),
        }
        if include_product and self.product is not None:
            data["product"] = {
                "id": self.product.id,
                "name": self.product.name,
                "price": money_str(self.product.price),
            }
        return data
