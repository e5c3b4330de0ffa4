# backend/models/outbox.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from database import Base

# Post-persistence event written in the same transaction as the change it describes.
# Delivered to subscribers (e.g. the e-mail notifier) after commit.
class OutboxEvent(Base):
    __tablename__ = "outbox_events"

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(String(50), nullable=False, index=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    dispatched_at = Column(DateTime(timezone=True), nullable=True, index=True)
