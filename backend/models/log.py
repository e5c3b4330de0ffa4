# backend/models/log.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from database import Base

# Audit trail of user-visible actions (chat turns, session and task changes)
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    action = Column(String(50), index=True)
    resource = Column(String(50), index=True)
    # SUCCESS, FAIL or FALLBACK (AI reply substituted)
    status = Column(String(20), index=True)

    # Free-form context (ids, intent, error class)
    meta = Column(JSON, nullable=True)
