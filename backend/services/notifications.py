# backend/services/notifications.py
"""Outbox subscribers registered at startup.

E-mail delivery is an external collaborator; this notifier records each
event in the application log so the outbox drains.
"""
import logging

from config import settings
from services.events import subscribe

logger = logging.getLogger(__name__)

NOTIFIED_KINDS = ("task.created", "task.mentioned", "comment.created")


def log_notification(kind: str):
    def handler(payload: dict) -> None:
        task_link = f"{settings.APP_URL}/tasks/{payload.get('task_id')}"
        if kind == "task.mentioned":
            logger.info(f"Notify user {payload.get('user_id')}: mentioned by user {payload.get('by')} on {task_link}")
        elif kind == "comment.created":
            logger.info(f"New comment {payload.get('comment_id')} on {task_link}")
        else:
            logger.info(f"Task created: {payload.get('title')} ({task_link})")
    return handler


def register_notifiers() -> None:
    for kind in NOTIFIED_KINDS:
        subscribe(kind, log_notification(kind))
