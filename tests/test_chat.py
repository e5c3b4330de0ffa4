import asyncio
import threading

import pytest

from models.chat import ChatMessage, ChatSession
from models.log import Log
from services import chat as chat_service
from services.chat import FALLBACK_REPLY, handle_chat
from utils.ai_gateway import GatewayResult
from utils.errors import AuthError, InvalidInputError, PersistenceError, RequestCancelled
from conftest import FakeGateway, token_headers


def _session(db, user, title="Sales chat"):
    session = ChatSession(user_id=user.id, title=title)
    db.add(session)
    db.commit()
    return session


def _messages(db, session_id):
    db.expire_all()
    return (
        db.query(ChatMessage)
        .filter(ChatMessage.session_id == session_id)
        .order_by(ChatMessage.id)
        .all()
    )


def test_general_question_goes_straight_to_gateway(client, auth_headers, fake_gateway):
    resp = client.post("/ai/chat", json={"message": "Hello there"}, headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "response": "Here are your insights."}
    assert fake_gateway.prompts == ["Hello there"]


def test_sales_question_is_grounded_in_store_data(client, auth_headers, fake_gateway, store):
    cap = store.product("Cap")
    store.sale(cap, 3, 10.0)
    store.sale(cap, 2, 10.0)

    resp = client.post("/ai/chat", json={"message": "sales in the last 7 days"}, headers=auth_headers)

    assert resp.status_code == 200
    prompt = fake_gateway.prompts[0]
    assert "Sales Data (Last 7 days)" in prompt
    assert "Total Revenue: $50.00 USD" in prompt
    assert "Cap: 5 units" in prompt


def test_exchange_is_persisted_in_order(client, auth_headers, db, user):
    session = _session(db, user)

    resp = client.post("/ai/chat", json={"message": "How are sales?", "sessionId": session.id}, headers=auth_headers)

    assert resp.status_code == 200
    messages = _messages(db, session.id)
    assert [(m.role, m.content) for m in messages] == [
        ("user", "How are sales?"),
        ("assistant", "Here are your insights."),
    ]
    assert all(m.user_id == user.id for m in messages)


def test_gateway_failure_returns_fallback_and_persists(client, auth_headers, db, user, fake_gateway):
    fake_gateway.fail = True
    session = _session(db, user)

    resp = client.post("/ai/chat", json={"message": "dashboard please", "sessionId": session.id},
                       headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "response": FALLBACK_REPLY}
    messages = _messages(db, session.id)
    assert [m.role for m in messages] == ["user", "assistant"]
    assert messages[1].content == FALLBACK_REPLY

    log = db.query(Log).filter(Log.action == "AI_CHAT").one()
    assert log.status == "FALLBACK"
    assert log.meta["intent"] == "dashboard"


def test_foreign_session_is_not_written(client, db, user, other_user):
    session = _session(db, user)

    resp = client.post("/ai/chat", json={"message": "tasks?", "sessionId": session.id},
                       headers=token_headers(other_user))

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert _messages(db, session.id) == []


def test_unknown_session_is_skipped(client, auth_headers, db):
    resp = client.post("/ai/chat", json={"message": "tasks?", "sessionId": 4242}, headers=auth_headers)
    assert resp.status_code == 200
    assert db.query(ChatMessage).count() == 0


def test_missing_message(client, auth_headers, fake_gateway):
    resp = client.post("/ai/chat", json={}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Message is required"}
    assert fake_gateway.prompts == []


def test_blank_message(client, auth_headers):
    assert client.post("/ai/chat", json={"message": "   "}, headers=auth_headers).status_code == 400


def test_requires_token(client, fake_gateway):
    resp = client.post("/ai/chat", json={"message": "sales"})
    assert resp.status_code == 401
    assert resp.json()["success"] is False
    assert fake_gateway.prompts == []


def test_invalid_token(client):
    resp = client.post("/ai/chat", json={"message": "sales"}, headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_handle_chat_without_identity(db):
    with pytest.raises(AuthError):
        asyncio.run(handle_chat(db, None, "sales", None, FakeGateway()))


def test_handle_chat_rejects_empty_message(db, user):
    with pytest.raises(InvalidInputError):
        asyncio.run(handle_chat(db, user.id, None, None, FakeGateway()))


def test_persistence_failure_still_answers(db, user, monkeypatch):
    session = _session(db, user)

    def broken_append(*args, **kwargs):
        raise PersistenceError("disk full")

    monkeypatch.setattr(chat_service, "append_exchange", broken_append)
    reply = asyncio.run(handle_chat(db, user.id, "How are sales?", session.id, FakeGateway(reply="ok")))

    assert reply == "ok"
    assert _messages(db, session.id) == []
    log = db.query(Log).filter(Log.action == "AI_CHAT").one()
    assert log.meta["saved"] is False


class SlowGateway:
    """Never answers on its own; records whether its call was cancelled."""

    def __init__(self):
        self.cancelled = False

    async def ask(self, prompt):
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return GatewayResult.success("too late")


def test_disconnect_cancels_gateway_call(db, user, monkeypatch):
    monkeypatch.setattr(chat_service, "DISCONNECT_POLL_INTERVAL", 0.01)
    session = _session(db, user)
    gateway = SlowGateway()

    async def gone():
        return True

    with pytest.raises(RequestCancelled):
        asyncio.run(handle_chat(db, user.id, "How are sales?", session.id, gateway, is_disconnected=gone))

    assert gateway.cancelled is True
    assert _messages(db, session.id) == []
    log = db.query(Log).filter(Log.action == "AI_CHAT").one()
    assert log.status == "CANCELLED"


def test_connected_client_waits_for_reply(db, user, monkeypatch):
    monkeypatch.setattr(chat_service, "DISCONNECT_POLL_INTERVAL", 0.01)
    checks = []

    class DelayedGateway:
        async def ask(self, prompt):
            await asyncio.sleep(0.05)
            return GatewayResult.success("worth the wait")

    async def still_here():
        checks.append(True)
        return False

    reply = asyncio.run(handle_chat(db, user.id, "Hello", None, DelayedGateway(), is_disconnected=still_here))

    assert reply == "worth the wait"
    assert checks


def test_store_work_runs_off_the_event_loop(db, user, monkeypatch):
    threads = {}
    build = chat_service.build_prompt

    def recording_build(*args):
        threads["build"] = threading.get_ident()
        return build(*args)

    def recording_save(*args):
        threads["save"] = threading.get_ident()
        return False

    monkeypatch.setattr(chat_service, "build_prompt", recording_build)
    monkeypatch.setattr(chat_service, "save_turn", recording_save)

    async def turn():
        threads["loop"] = threading.get_ident()
        return await handle_chat(db, user.id, "sales?", None, FakeGateway())

    asyncio.run(turn())

    assert threads["build"] != threads["loop"]
    assert threads["save"] != threads["loop"]


def test_missing_token_is_reported_before_missing_message(client, fake_gateway):
    resp = client.post("/ai/chat", json={})
    assert resp.status_code == 401
    assert fake_gateway.prompts == []
