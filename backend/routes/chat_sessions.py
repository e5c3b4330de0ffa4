# backend/routes/chat_sessions.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from utils.tokenJWT import get_current_user
from utils.audit import write_log
from services import chat_sessions as store
from schemas.chat import (
    ChatSessionCreate, ChatSessionRename, ChatSessionOut, ChatSessionDetail,
    ChatSessionListResponse, ChatSessionResponse, ChatSessionDetailResponse,
)

router = APIRouter(prefix="/chat-sessions", tags=["Chat Sessions"])

# List the caller's sessions, most recently active first
@router.get("", response_model=ChatSessionListResponse)
def list_sessions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"success": True, "sessions": store.list_sessions(db, current_user.id)}


@router.post("", response_model=ChatSessionResponse)
def create_session(
    payload: Optional[ChatSessionCreate] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    session = store.create_session(db, current_user.id, payload.title if payload else None)
    write_log(db, user_id=current_user.id, action="CHAT_SESSION_CREATE", resource="chat", meta={"id": session.id})
    return {"success": True, "session": ChatSessionOut.model_validate(session)}


# Single session with its messages; 404 for sessions of other users
@router.get("/{session_id}", response_model=ChatSessionDetailResponse)
def get_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    session = store.get_session(db, current_user.id, session_id)
    return {"success": True, "session": ChatSessionDetail.model_validate(session)}


@router.patch("/{session_id}", response_model=ChatSessionResponse)
def rename_session(
    session_id: int,
    payload: ChatSessionRename,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    session = store.rename_session(db, current_user.id, session_id, payload.title)
    return {"success": True, "session": ChatSessionOut.model_validate(session)}


@router.delete("/{session_id}")
def delete_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    store.delete_session(db, current_user.id, session_id)
    write_log(db, user_id=current_user.id, action="CHAT_SESSION_DELETE", resource="chat", meta={"id": session_id})
    return {"success": True}
