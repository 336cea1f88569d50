from fastapi import APIRouter, Depends

from app.api.deps import get_chat_service
from app.domain.schemas import HealthResponse
from app.services.chat import ChatService

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(chat: ChatService = Depends(get_chat_service)):
    return HealthResponse(
        status="ok",
        sessions=len(chat.registry),
        waiting=len(chat.queue),
    )
