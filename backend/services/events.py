# backend/services/events.py
"""Post-persistence events (transactional outbox).

Writers call ``record_event`` inside their own transaction, so an event exists
exactly when the change it describes was committed. ``dispatch_pending`` runs
after the commit (as a background task) and hands events to subscribers such
as the e-mail notifier.
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, List

from sqlalchemy.orm import Session

from database import SessionLocal
from models.outbox import OutboxEvent

logger = logging.getLogger(__name__)

Handler = Callable[[dict], None]

# Pending events read per dispatch run
DISPATCH_BATCH_SIZE = 100

_subscribers: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(kind: str, handler: Handler) -> None:
    _subscribers[kind].append(handler)


def clear_subscribers() -> None:
    _subscribers.clear()


def record_event(db: Session, kind: str, payload: dict) -> OutboxEvent:
    # No commit: the caller's transaction decides
    event = OutboxEvent(kind=kind, payload=payload)
    db.add(event)
    return event


def dispatch_pending(db: Session) -> int:
    """Deliver undispatched events that have subscribers. Returns how many were delivered."""
    kinds = [kind for kind, handlers in _subscribers.items() if handlers]
    if not kinds:
        return 0

    # Kinds nobody listens to stay pending and do not take up the batch
    pending = (
        db.query(OutboxEvent)
        .filter(OutboxEvent.dispatched_at.is_(None), OutboxEvent.kind.in_(kinds))
        .order_by(OutboxEvent.id.asc())
        .limit(DISPATCH_BATCH_SIZE)
        .all()
    )
    delivered = 0
    for event in pending:
        handlers = _subscribers[event.kind]
        try:
            for handler in handlers:
                handler(event.payload)
        except Exception:
            # Left pending for the next dispatch
            logger.exception(f"Handler failed for outbox event {event.id} ({event.kind})")
            continue
        event.dispatched_at = datetime.utcnow()
        db.commit()
        delivered += 1
        logger.info(f"Dispatched outbox event {event.id} ({event.kind})")
    return delivered


def dispatch_pending_background() -> None:
    # Background tasks outlive the request session
    db = SessionLocal()
    try:
        dispatch_pending(db)
    finally:
        db.close()
