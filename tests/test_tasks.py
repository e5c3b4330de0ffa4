import pytest
from sqlalchemy.exc import SQLAlchemyError

from models.outbox import OutboxEvent
from models.task import Task, TaskComment, TaskMention
from schemas.task import TaskCreate
from services import events, notifications
from services import tasks as task_service
from utils.errors import InvalidInputError, NotFoundError


def _kinds(db):
    db.expire_all()
    return sorted(e.kind for e in db.query(OutboxEvent).all())


def test_create_task_with_mentions(client, auth_headers, db, user, other_user):
    resp = client.post("/tasks", json={
        "title": "Order fabric",
        "priority": "high",
        "mentioned_user_ids": [other_user.id, other_user.id],
    }, headers=auth_headers)

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["created_by_id"] == user.id
    assert data["status"] == "pending"
    assert [m["user_id"] for m in data["mentions"]] == [other_user.id]
    assert _kinds(db) == ["task.created", "task.mentioned"]


def test_unknown_mention_writes_nothing(client, auth_headers, db):
    resp = client.post("/tasks", json={"title": "Ghost", "mentioned_user_ids": [999]}, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert db.query(Task).count() == 0
    assert db.query(OutboxEvent).count() == 0


def test_failed_write_rolls_back_everything(db, user, other_user, monkeypatch):
    calls = []

    def flaky_record(session, kind, payload):
        calls.append(kind)
        if kind == "task.created":
            raise SQLAlchemyError("write failed")
        return events.record_event(session, kind, payload)

    monkeypatch.setattr(task_service, "record_event", flaky_record)

    with pytest.raises(SQLAlchemyError):
        task_service.create_task(db, user.id, TaskCreate(title="Half done", mentioned_user_ids=[other_user.id]))

    assert calls == ["task.mentioned", "task.created"]
    assert db.query(Task).count() == 0
    assert db.query(TaskMention).count() == 0
    assert db.query(OutboxEvent).count() == 0


def test_comment_with_mentions(client, auth_headers, db, user, other_user, store):
    task = store.task(user)

    resp = client.post(f"/tasks/{task.id}/comments", json={
        "content": "  @intruder can you check this?  ",
        "mentioned_user_ids": [other_user.id],
    }, headers=auth_headers)

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["content"] == "@intruder can you check this?"
    assert data["mentions"][0]["comment_id"] == data["id"]
    assert _kinds(db) == ["comment.created", "task.mentioned"]


def test_comment_on_missing_task(client, auth_headers):
    resp = client.post("/tasks/77/comments", json={"content": "hello"}, headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Task not found"


def test_comment_requires_content(db, user, store):
    task = store.task(user)
    with pytest.raises(InvalidInputError):
        task_service.add_comment(db, task.id, user.id, "  ")
    assert db.query(TaskComment).count() == 0


def test_comment_service_unknown_task(db, user):
    with pytest.raises(NotFoundError):
        task_service.add_comment(db, 12345, user.id, "hi")


# =========================
# Outbox dispatch
# =========================

def test_dispatch_delivers_to_subscribers(db, user, other_user):
    received = []
    events.subscribe("task.mentioned", received.append)

    task = task_service.create_task(db, user.id, TaskCreate(title="Ship hoodies", mentioned_user_ids=[other_user.id]))
    delivered = events.dispatch_pending(db)

    assert delivered == 1
    assert received == [{"task_id": task.id, "user_id": other_user.id, "by": user.id}]
    pending = db.query(OutboxEvent).filter(OutboxEvent.dispatched_at.is_(None)).all()
    # task.created has no subscriber and waits
    assert [e.kind for e in pending] == ["task.created"]


def test_failing_handler_leaves_event_pending(db, user):
    def broken(payload):
        raise RuntimeError("smtp down")

    events.subscribe("task.created", broken)
    task_service.create_task(db, user.id, TaskCreate(title="Retry me"))

    assert events.dispatch_pending(db) == 0
    assert db.query(OutboxEvent).filter(OutboxEvent.dispatched_at.is_(None)).count() == 1


def test_route_dispatches_after_commit(client, auth_headers, db, user):
    received = []
    events.subscribe("task.created", received.append)

    resp = client.post("/tasks", json={"title": "Background"}, headers=auth_headers)

    assert resp.status_code == 201
    assert received and received[0]["title"] == "Background"
    db.expire_all()
    assert db.query(OutboxEvent).filter(OutboxEvent.dispatched_at.is_(None)).count() == 0


def test_startup_notifiers_drain_the_outbox(db, user, other_user):
    notifications.register_notifiers()

    for i in range(3):
        task_service.create_task(db, user.id, TaskCreate(title=f"Task {i}", mentioned_user_ids=[other_user.id]))
        events.dispatch_pending(db)
        assert db.query(OutboxEvent).filter(OutboxEvent.dispatched_at.is_(None)).count() == 0

    assert db.query(OutboxEvent).count() == 6


def test_dispatch_reads_a_bounded_batch(db, user, monkeypatch):
    monkeypatch.setattr(events, "DISPATCH_BATCH_SIZE", 2)
    events.subscribe("task.created", lambda payload: None)
    for i in range(3):
        task_service.create_task(db, user.id, TaskCreate(title=f"Task {i}"))

    assert events.dispatch_pending(db) == 2
    assert events.dispatch_pending(db) == 1
    assert events.dispatch_pending(db) == 0


def test_unsubscribed_kinds_do_not_block_the_batch(db, user, other_user, monkeypatch):
    monkeypatch.setattr(events, "DISPATCH_BATCH_SIZE", 1)
    events.subscribe("task.created", lambda payload: None)
    # task.mentioned is written first and has no subscriber
    task_service.create_task(db, user.id, TaskCreate(title="Mention first", mentioned_user_ids=[other_user.id]))

    assert events.dispatch_pending(db) == 1
    pending = db.query(OutboxEvent).filter(OutboxEvent.dispatched_at.is_(None)).all()
    assert [e.kind for e in pending] == ["task.mentioned"]
