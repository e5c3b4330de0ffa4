import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger(__name__)

def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", meta=None):
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, meta=meta or {})
    db.add(entry)
    try:
        db.commit()
    except SQLAlchemyError as e:
        # The audited action itself has already been committed
        db.rollback()
        logger.error(f"Audit log write failed ({action}/{resource}): {e}")
