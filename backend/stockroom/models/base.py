from __future__ import annotations

from ..extensions import db
from stockroom.time_utils import utcnow


class TimestampMixin:
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )


class SoftDeleteMixin:
    """
    Soft-delete marker.

    Rows are never physically removed by service code. Normal reads filter
    with `Model.active()`; deleted rows stay for history and reports.
    """
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    @classmethod
    def active(cls):
        return cls.deleted_at.is_(None)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        if self.deleted_at is None:
            self.deleted_at = utcnow()
