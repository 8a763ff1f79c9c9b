import logging
import uuid
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from erp_api import db
from erp_api.exceptions import DuplicateKeyError, NotFoundError

logger = logging.getLogger(__name__)


def is_unique_violation(error):
    text = str(error.orig).lower()
    return 'unique' in text or 'duplicate' in text


@contextmanager
def transaction_scope(duplicate_message=None):
    """
    Commit everything added to the session inside the block as one unit.

    A unique-constraint violation becomes DuplicateKeyError(duplicate_message);
    any failure rolls the whole unit back.
    """
    try:
        yield db.session
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if duplicate_message and is_unique_violation(e):
            raise DuplicateKeyError(duplicate_message) from e
        logger.error(f"Integrity error: {str(e.orig)}")
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error: {str(e)}")
        db.session.rollback()
        raise
    except Exception:
        db.session.rollback()
        raise


def parse_uuid(value):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def get_or_404(model, record_id, message):
    """Fetch by primary key regardless of isActive; malformed ids count as missing."""
    key = parse_uuid(record_id)
    record = db.session.get(model, key) if key else None
    if record is None:
        raise NotFoundError(message)
    return record


def next_sequence(column, prefix, width):
    """
    First free `prefix` + zero-padded number, counting up from (row count + 1).
    """
    model = column.class_
    number = db.session.query(model).count() + 1
    candidate = f"{prefix}{str(number).zfill(width)}"
    while db.session.query(model.id).filter(column == candidate).first() is not None:
        number += 1
        candidate = f"{prefix}{str(number).zfill(width)}"
    return candidate
