"""
Reminder ledger: insert-first idempotency claims
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

logger = logging.getLogger(__name__)


def claim_once(db: Session, entry) -> bool:
    """
    Insert ``entry`` and commit it.

    The ledger tables carry a unique key on the reminder instance, so when
    another run already recorded the same instance the insert fails and
    the claim is reported as taken instead of raising.
    """
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.debug(f"Ledger entry already present: {entry!r}")
        return False
    return True
