# backend/routes/ai.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.chat import ChatRequest, ChatResponse
from services.chat import handle_chat
from utils.ai_gateway import AIGatewayClient, get_ai_gateway
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/ai", tags=["AI Assistant"])

# Answer a business question; gateway outages still return success with fallback text.
# Identity is resolved by the dependency first, so a request without a token gets 401
# even when the message is missing too.
@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gateway: AIGatewayClient = Depends(get_ai_gateway),
):
    reply = await handle_chat(
        db, current_user.id, payload.message, payload.session_id, gateway,
        is_disconnected=request.is_disconnected,
    )
    return ChatResponse(response=reply)
