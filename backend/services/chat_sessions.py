# backend/services/chat_sessions.py
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from models.chat import ChatSession, ChatMessage
from schemas.chat import ChatSessionSummary
from utils.errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Chat"
PREVIEW_LENGTH = 100


def find_owned_session(db: Session, user_id: int, session_id: Optional[int]) -> Optional[ChatSession]:
    # Ownership is plain equality on user_id; another user's session looks missing
    if session_id is None:
        return None
    return (
        db.query(ChatSession)
        .filter(ChatSession.id == session_id, ChatSession.user_id == user_id)
        .first()
    )


def _owned_or_404(db: Session, user_id: int, session_id: int) -> ChatSession:
    session = find_owned_session(db, user_id, session_id)
    if not session:
        raise NotFoundError("Session not found")
    return session


def create_session(db: Session, user_id: int, title: Optional[str] = None) -> ChatSession:
    session = ChatSession(user_id=user_id, title=(title or "").strip() or DEFAULT_TITLE)
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def list_sessions(db: Session, user_id: int) -> List[ChatSessionSummary]:
    counts = (
        db.query(ChatMessage.session_id, func.count(ChatMessage.id).label("message_count"))
        .group_by(ChatMessage.session_id)
        .subquery()
    )
    rows = (
        db.query(ChatSession, func.coalesce(counts.c.message_count, 0))
        .outerjoin(counts, counts.c.session_id == ChatSession.id)
        .filter(ChatSession.user_id == user_id)
        .order_by(ChatSession.updated_at.desc(), ChatSession.id.desc())
        .all()
    )

    result = []
    for session, message_count in rows:
        first = (
            db.query(ChatMessage.content)
            .filter(ChatMessage.session_id == session.id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
            .first()
        )
        summary = ChatSessionSummary.model_validate(session)
        summary.preview = first.content[:PREVIEW_LENGTH] if first else None
        summary.message_count = message_count
        result.append(summary)
    return result


def get_session(db: Session, user_id: int, session_id: int) -> ChatSession:
    session = (
        db.query(ChatSession)
        .options(selectinload(ChatSession.messages))
        .filter(ChatSession.id == session_id, ChatSession.user_id == user_id)
        .first()
    )
    if not session:
        raise NotFoundError("Session not found")
    return session


def rename_session(db: Session, user_id: int, session_id: int, title: str) -> ChatSession:
    session = _owned_or_404(db, user_id, session_id)
    session.title = title.strip() or DEFAULT_TITLE
    db.commit()
    db.refresh(session)
    return session


def delete_session(db: Session, user_id: int, session_id: int) -> None:
    session = _owned_or_404(db, user_id, session_id)
    db.delete(session)
    db.commit()


def append_exchange(db: Session, session: ChatSession, user_id: int, question: str, reply: str) -> None:
    """Store the user message and the assistant reply, in that order, and bump updated_at."""
    try:
        db.add(ChatMessage(session_id=session.id, user_id=user_id, role="user", content=question))
        db.flush()
        db.add(ChatMessage(session_id=session.id, user_id=user_id, role="assistant", content=reply))
        session.updated_at = func.now()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to save messages for session {session.id}") from e
