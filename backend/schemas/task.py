# schemas/task.py
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from schemas.base import ORMBase

TaskStatus = Literal["pending", "in-progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]


# Schema for creating a task together with the users mentioned in its description
class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    due_date: Optional[datetime] = None
    assigned_to_id: Optional[int] = None
    product_id: Optional[int] = None
    batch_id: Optional[int] = None
    mentioned_user_ids: List[int] = []


class CommentCreate(BaseModel):
    content: Optional[str] = None
    mentioned_user_ids: List[int] = []


class MentionOut(ORMBase):
    id: int
    user_id: int
    comment_id: Optional[int] = None


class CommentOut(ORMBase):
    id: int
    task_id: int
    user_id: int
    content: str
    created_at: datetime
    mentions: List[MentionOut] = []


class TaskOut(ORMBase):
    id: int
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    due_date: Optional[datetime] = None
    assigned_to_id: Optional[int] = None
    created_by_id: int
    product_id: Optional[int] = None
    batch_id: Optional[int] = None
    created_at: datetime
    mentions: List[MentionOut] = []


class TaskResponse(BaseModel):
    success: bool = True
    data: TaskOut


class CommentResponse(BaseModel):
    success: bool = True
    data: CommentOut
