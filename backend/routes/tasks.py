# backend/routes/tasks.py
from fastapi import APIRouter, Depends, BackgroundTasks, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from utils.tokenJWT import get_current_user
from utils.audit import write_log
from services import tasks as task_service
from services.events import dispatch_pending_background
from schemas.task import TaskCreate, CommentCreate, TaskOut, CommentOut, TaskResponse, CommentResponse

router = APIRouter(prefix="/tasks", tags=["Tasks"])

# Create a task with its mentions; notifications go out after commit
@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = task_service.create_task(db, current_user.id, payload)
    write_log(db, user_id=current_user.id, action="TASK_CREATE", resource="tasks", meta={"id": task.id})
    background_tasks.add_task(dispatch_pending_background)
    return TaskResponse(data=TaskOut.model_validate(task))


@router.post("/{task_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(
    task_id: int,
    payload: CommentCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = task_service.add_comment(db, task_id, current_user.id, payload.content, payload.mentioned_user_ids)
    write_log(db, user_id=current_user.id, action="TASK_COMMENT", resource="tasks",
              meta={"task_id": task_id, "comment_id": comment.id})
    background_tasks.add_task(dispatch_pending_background)
    return CommentResponse(data=CommentOut.model_validate(comment))
