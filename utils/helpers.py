import logging

from sqlalchemy.exc import IntegrityError

from models import db

logger = logging.getLogger(__name__)


def insert_unique(instance, find_existing):
    """
    Add and commit ``instance``. A uniqueness violation means another request
    created the same row first: roll back and return that row instead.

    Returns ``(row, created)``. If the violation is not explained by an
    existing row the IntegrityError propagates.
    """
    db.session.add(instance)
    try:
        db.session.commit()
        return instance, True
    except IntegrityError:
        db.session.rollback()
        existing = find_existing()
        if existing is None:
            raise
        logger.info("Conflict ignored on %s insert; keeping existing row %s",
                    type(instance).__name__, existing.id)
        return existing, False


def format_datetime(datetime_obj):
    """Format datetime to ISO 8601, None stays None."""
    if not datetime_obj:
        return None
    return datetime_obj.isoformat()
