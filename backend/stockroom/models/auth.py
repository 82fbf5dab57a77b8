from __future__ import annotations

from ..extensions import db
from stockroom.time_utils import to_utc_z
from .base import SoftDeleteMixin, TimestampMixin

ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"
ROLE_USER = "user"
ROLES = (ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_USER)


class User(TimestampMixin, SoftDeleteMixin, db.Model):
    """
    User accounts for authentication and attribution.

    Email is globally unique. business_id is NULL until the user creates a
    business, is assigned to one by an admin, or is created as an employee.
    An admin may exist without a business; employees and plain users need one
    before any tenant-scoped operation succeeds.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_business_id", "business_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default=ROLE_USER)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=True)

    business = db.relationship("Business", back_populates="users")

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "role": self.role,
            "business_id": self.business_id,
            "created_at": to_utc_z(self.created_at),
        }
