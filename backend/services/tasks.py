# backend/services/tasks.py
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from models.task import Task, TaskComment, TaskMention
from models.users import User
from schemas.task import TaskCreate
from services.events import record_event
from utils.errors import InvalidInputError, NotFoundError


def _unique_ids(ids: Iterable[int]) -> List[int]:
    seen = []
    for i in ids:
        if i not in seen:
            seen.append(i)
    return seen


def _check_users_exist(db: Session, user_ids: List[int]) -> None:
    if not user_ids:
        return
    found = {uid for (uid,) in db.query(User.id).filter(User.id.in_(user_ids)).all()}
    missing = [uid for uid in user_ids if uid not in found]
    if missing:
        raise InvalidInputError(f"Unknown user(s): {', '.join(map(str, missing))}")


def create_task(db: Session, created_by_id: int, payload: TaskCreate) -> Task:
    """Create a task with its mentions and notification events in one transaction."""
    mentioned = _unique_ids(payload.mentioned_user_ids)
    _check_users_exist(db, mentioned)

    data = payload.model_dump(exclude={"mentioned_user_ids"})
    try:
        task = Task(created_by_id=created_by_id, **data)
        db.add(task)
        db.flush()

        for user_id in mentioned:
            db.add(TaskMention(task_id=task.id, user_id=user_id))
            record_event(db, "task.mentioned", {"task_id": task.id, "user_id": user_id, "by": created_by_id})
        record_event(db, "task.created", {
            "task_id": task.id, "title": task.title, "assigned_to_id": task.assigned_to_id,
        })
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(task)
    return task


def add_comment(db: Session, task_id: int, user_id: int, content: str, mentioned_user_ids: Iterable[int] = ()) -> TaskComment:
    """Add a comment and its mentions atomically."""
    if not content or not content.strip():
        raise InvalidInputError("Content is required")

    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise NotFoundError("Task not found")

    mentioned = _unique_ids(mentioned_user_ids)
    _check_users_exist(db, mentioned)

    try:
        comment = TaskComment(task_id=task.id, user_id=user_id, content=content.strip())
        db.add(comment)
        db.flush()

        for mentioned_id in mentioned:
            db.add(TaskMention(task_id=task.id, comment_id=comment.id, user_id=mentioned_id))
            record_event(db, "task.mentioned", {
                "task_id": task.id, "comment_id": comment.id, "user_id": mentioned_id, "by": user_id,
            })
        record_event(db, "comment.created", {"task_id": task.id, "comment_id": comment.id, "user_id": user_id})
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    return (
        db.query(TaskComment)
        .options(selectinload(TaskComment.mentions))
        .filter(TaskComment.id == comment.id)
        .first()
    )
