# Overview: Transaction boundaries and row locking for check-then-write sequences.

from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import ConflictError, InternalError, ServiceError
from ..extensions import db

logger = logging.getLogger(__name__)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE. There the version_id column on
    Product and Category is what stops a stale read-check-write: the UPDATE
    matches no row once another transaction has committed a newer version,
    and the unit of work fails with ConflictError.
    """
    return query.with_for_update()


@contextmanager
def unit_of_work(description: str = "unit of work"):
    """
    Run a group of writes that must commit or roll back together.

    - ServiceError raised inside the block: rollback, re-raise unchanged.
    - StaleDataError (row changed by a concurrent commit): rollback, ConflictError.
    - IntegrityError (unique/check constraint race): rollback, ConflictError.
    - Any other SQLAlchemyError: rollback, InternalError.

    No retry is attempted. A caller that gets ConflictError or InternalError
    must resubmit, and the resubmitted request re-runs every check.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except ServiceError:
        session.rollback()
        raise
    except StaleDataError as exc:
        session.rollback()
        logger.warning("%s lost a race with a concurrent change: %s", description, exc)
        raise ConflictError("Concurrent change; nothing was saved, please retry") from exc
    except IntegrityError as exc:
        session.rollback()
        logger.warning("%s rejected by constraint: %s", description, exc.orig)
        raise ConflictError("Conflicting change; nothing was saved") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("%s failed; rolled back", description)
        raise InternalError(f"Failed to complete {description}") from exc
    except Exception:
        session.rollback()
        raise
