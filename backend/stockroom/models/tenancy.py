from __future__ import annotations

from ..extensions import db
from stockroom.time_utils import to_utc_z
from .base import SoftDeleteMixin, TimestampMixin


class Business(TimestampMixin, SoftDeleteMixin, db.Model):
    """
    Multi-tenant root: every tenant is a Business.

    All categories, products, stock entries and sales carry the business_id
    of the tenant that created them. No data may cross business boundaries.

    The business name is globally unique and compared case-sensitively.
    The business password is a second factor checked by business login,
    layered on top of the user's own login.
    """
    __tablename__ = "businesses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed business password
    password_hash = db.Column(db.String(255), nullable=False)

    users = db.relationship("User", back_populates="business", lazy=True)

    def __repr__(self) -> str:
        return f"<Business id={self.id} name={self.name!r}>"

    def to_dict(self, include_users: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "created_at": to_utc_z(self.created_at),
        }
        if include_users:
            data["users"] = [u.to_dict() for u in self.users if not u.is_deleted]
        return data
