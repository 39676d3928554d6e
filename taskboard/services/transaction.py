"""Unit-of-work boundary for every mutating operation.

One request runs one unit of work: either every statement inside it is
committed, or the session is rolled back and the error re-raised. Store
failures are translated into ConflictOrStoreError with the driver message.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from taskboard.errors import BoardError, ConflictOrStoreError
from taskboard.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(action):
    """Commit on success, roll back everything on any failure.

    Args:
        action: Short label for log lines, e.g. "card.move".
    """
    try:
        yield db.session
        db.session.commit()
    except BoardError as e:
        db.session.rollback()
        logger.warning(f"{action} rolled back: {e.message}")
        raise
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"{action} rolled back on constraint violation: {e.orig}")
        raise ConflictOrStoreError(str(e.orig), status_code=400) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"{action} failed: {e}", exc_info=True)
        raise ConflictOrStoreError(str(e)) from e
    except Exception:
        db.session.rollback()
        logger.error(f"{action} failed unexpectedly", exc_info=True)
        raise
