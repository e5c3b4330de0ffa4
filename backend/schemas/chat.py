# schemas/chat.py
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from schemas.base import ORMBase


# Body of POST /ai/chat; the UI sends camelCase "sessionId"
class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    session_id: Optional[int] = Field(default=None, alias="sessionId")


class ChatResponse(BaseModel):
    success: bool = True
    response: str


class ChatMessageOut(ORMBase):
    id: int
    session_id: int
    user_id: int
    role: Literal["user", "assistant"]
    content: str
    created_at: datetime


class ChatSessionOut(ORMBase):
    id: int
    user_id: int
    title: str
    created_at: datetime
    updated_at: datetime


class ChatSessionSummary(ChatSessionOut):
    preview: Optional[str] = None
    message_count: int = 0


class ChatSessionDetail(ChatSessionOut):
    messages: List[ChatMessageOut] = []


class ChatSessionCreate(BaseModel):
    title: Optional[str] = None


class ChatSessionRename(BaseModel):
    title: str = Field(min_length=1)


# Envelopes
class ChatSessionListResponse(BaseModel):
    success: bool = True
    sessions: List[ChatSessionSummary]


class ChatSessionResponse(BaseModel):
    success: bool = True
    session: ChatSessionOut


class ChatSessionDetailResponse(BaseModel):
    success: bool = True
    session: ChatSessionDetail
