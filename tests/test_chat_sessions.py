from datetime import datetime, timedelta

from models.chat import ChatMessage, ChatSession
from services import chat_sessions as store
from conftest import token_headers


def _seed_session(db, user, title, messages=(), age_minutes=0):
    session = ChatSession(user_id=user.id, title=title,
                          updated_at=datetime.utcnow() - timedelta(minutes=age_minutes))
    db.add(session)
    db.flush()
    for role, content in messages:
        db.add(ChatMessage(session_id=session.id, user_id=user.id, role=role, content=content))
    db.commit()
    return session


def test_create_uses_default_title(client, auth_headers, user):
    resp = client.post("/chat-sessions", headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["session"]["title"] == "New Chat"
    assert body["session"]["user_id"] == user.id


def test_create_with_title(client, auth_headers):
    resp = client.post("/chat-sessions", json={"title": "Q3 review"}, headers=auth_headers)
    assert resp.json()["session"]["title"] == "Q3 review"


def test_blank_title_falls_back_to_default(db, user):
    assert store.create_session(db, user.id, "   ").title == "New Chat"


def test_list_orders_by_last_activity(client, auth_headers, db, user, other_user):
    _seed_session(db, user, "Old", [("user", "first question"), ("assistant", "answer")], age_minutes=60)
    _seed_session(db, user, "Fresh", [("user", "x" * 150)], age_minutes=1)
    _seed_session(db, other_user, "Not mine")

    resp = client.get("/chat-sessions", headers=auth_headers)

    assert resp.status_code == 200
    sessions = resp.json()["sessions"]
    assert [s["title"] for s in sessions] == ["Fresh", "Old"]
    assert sessions[0]["preview"] == "x" * 100
    assert sessions[0]["message_count"] == 1
    assert sessions[1]["preview"] == "first question"
    assert sessions[1]["message_count"] == 2


def test_empty_session_has_no_preview(db, user):
    _seed_session(db, user, "Empty")
    [summary] = store.list_sessions(db, user.id)
    assert summary.preview is None
    assert summary.message_count == 0


def test_get_returns_messages_in_order(client, auth_headers, db, user):
    session = _seed_session(db, user, "Chat", [("user", "q"), ("assistant", "a")])

    resp = client.get(f"/chat-sessions/{session.id}", headers=auth_headers)

    assert resp.status_code == 200
    messages = resp.json()["session"]["messages"]
    assert [(m["role"], m["content"]) for m in messages] == [("user", "q"), ("assistant", "a")]


def test_other_users_session_looks_missing(client, db, user, other_user):
    session = _seed_session(db, user, "Private", [("user", "secret")])
    headers = token_headers(other_user)

    for resp in (
        client.get(f"/chat-sessions/{session.id}", headers=headers),
        client.patch(f"/chat-sessions/{session.id}", json={"title": "Mine now"}, headers=headers),
        client.delete(f"/chat-sessions/{session.id}", headers=headers),
    ):
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Session not found"}

    db.expire_all()
    assert db.query(ChatSession).filter(ChatSession.id == session.id).one().title == "Private"


def test_rename(client, auth_headers, db, user):
    session = _seed_session(db, user, "Untitled")

    resp = client.patch(f"/chat-sessions/{session.id}", json={"title": "Pricing ideas"}, headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json()["session"]["title"] == "Pricing ideas"


def test_rename_rejects_empty_title(client, auth_headers, db, user):
    session = _seed_session(db, user, "Untitled")
    resp = client.patch(f"/chat-sessions/{session.id}", json={"title": ""}, headers=auth_headers)
    assert resp.status_code == 422


def test_delete_removes_messages(client, auth_headers, db, user):
    session = _seed_session(db, user, "Gone", [("user", "q"), ("assistant", "a")])
    session_id = session.id

    resp = client.delete(f"/chat-sessions/{session_id}", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    db.expire_all()
    assert db.query(ChatSession).filter(ChatSession.id == session_id).first() is None
    assert db.query(ChatMessage).filter(ChatMessage.session_id == session_id).count() == 0


def test_append_exchange_bumps_activity(db, user):
    session = _seed_session(db, user, "Stale", age_minutes=120)
    before = session.updated_at

    store.append_exchange(db, session, user.id, "question", "reply")

    db.refresh(session)
    assert session.updated_at > before
    assert [m.role for m in session.messages] == ["user", "assistant"]
