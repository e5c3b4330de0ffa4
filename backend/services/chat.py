# backend/services/chat.py
"""One AI-assistant turn: classify, aggregate, prompt, ask, persist, respond.

Store reads and writes are synchronous SQLAlchemy calls; they run in the
threadpool so a heavy aggregation does not block the event loop.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from services import analytics, prompts
from services.chat_sessions import find_owned_session, append_exchange
from services.intent import detect_query_intent, QueryIntent, DEFAULT_DAYS
from utils.ai_gateway import AIGatewayClient, GatewayResult
from utils.audit import write_log
from utils.errors import AuthError, InvalidInputError, PersistenceError, RequestCancelled

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "I'm having trouble connecting to the AI service right now. "
    "Please try again in a moment, or contact support if the issue persists."
)

# Seconds between client-disconnect checks while the gateway call is in flight
DISCONNECT_POLL_INTERVAL = 0.5

DisconnectCheck = Callable[[], Awaitable[bool]]


def build_prompt(db: Session, intent: QueryIntent, message: str) -> str:
    """Aggregate the data behind an intent and render it; general questions pass through."""
    days = intent.days or DEFAULT_DAYS
    if intent.type == "sales":
        return prompts.sales_prompt(analytics.get_sales_data(db, days))
    if intent.type == "expenses":
        return prompts.expenses_prompt(analytics.get_expense_data(db, days))
    if intent.type == "tasks":
        return prompts.tasks_prompt(analytics.get_task_data(db))
    if intent.type == "products":
        return prompts.products_prompt(analytics.get_product_data(db))
    if intent.type == "dashboard":
        return prompts.dashboard_prompt(analytics.get_dashboard_data(db))
    return message


async def ask_gateway(
    gateway: AIGatewayClient,
    prompt: str,
    is_disconnected: Optional[DisconnectCheck] = None,
) -> GatewayResult:
    """Await the gateway reply; cancel the call and raise RequestCancelled if the caller leaves."""
    if is_disconnected is None:
        return await gateway.ask(prompt)

    call = asyncio.ensure_future(gateway.ask(prompt))
    try:
        while True:
            done, _ = await asyncio.wait({call}, timeout=DISCONNECT_POLL_INTERVAL)
            if done:
                return call.result()
            if await is_disconnected():
                call.cancel()
                await asyncio.wait({call})
                raise RequestCancelled()
    except asyncio.CancelledError:
        call.cancel()
        raise


def save_turn(db: Session, user_id: int, session_id: Optional[int], message: str, reply: str) -> bool:
    # Unknown or foreign session ids are skipped, not rejected
    session = find_owned_session(db, user_id, session_id)
    if not session:
        if session_id is not None:
            logger.info(f"Session {session_id} not found for user {user_id}; reply not persisted")
        return False
    try:
        append_exchange(db, session, user_id, message, reply)
    except PersistenceError:
        logger.exception(f"Could not persist chat turn for session {session_id}")
        return False
    return True


async def handle_chat(
    db: Session,
    user_id: Optional[int],
    message: Optional[str],
    session_id: Optional[int],
    gateway: AIGatewayClient,
    is_disconnected: Optional[DisconnectCheck] = None,
) -> str:
    if user_id is None:
        raise AuthError()
    if not message or not message.strip():
        raise InvalidInputError("Message is required")

    intent = detect_query_intent(message)
    prompt = await run_in_threadpool(build_prompt, db, intent, message)

    try:
        result = await ask_gateway(gateway, prompt, is_disconnected)
    except RequestCancelled:
        logger.info(f"Client disconnected; gateway call cancelled for user {user_id}")
        await run_in_threadpool(
            write_log, db, user_id=user_id, action="AI_CHAT", resource="chat", status="CANCELLED",
            meta={"intent": intent.type, "days": intent.days, "session_id": session_id, "saved": False},
        )
        raise

    if result.ok:
        reply = result.reply
    else:
        logger.warning(f"AI gateway unavailable ({result.error}); answering user {user_id} with fallback")
        reply = FALLBACK_REPLY

    saved = await run_in_threadpool(save_turn, db, user_id, session_id, message, reply)

    await run_in_threadpool(
        write_log, db, user_id=user_id, action="AI_CHAT", resource="chat",
        status="SUCCESS" if result.ok else "FALLBACK",
        meta={"intent": intent.type, "days": intent.days, "session_id": session_id, "saved": saved},
    )
    return reply
