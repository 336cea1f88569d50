import logging

from fastapi import Depends, HTTPException, Request, status

from app.core.config import Settings
from app.services.chat import ChatService
from app.services.recaptcha import RecaptchaVerifier

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """The Settings the application was created with."""
    return request.app.state.settings


def get_chat_service(request: Request) -> ChatService:
    """The ChatService created at startup."""
    return request.app.state.chat


def get_recaptcha_verifier(request: Request) -> RecaptchaVerifier:
    return request.app.state.recaptcha


async def require_session(
    request: Request,
    chat: ChatService = Depends(get_chat_service),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Resolve the caller's session id from its cookie, or reject with 401."""
    session_id = request.cookies.get(settings.session_cookie_name)
    if not chat.exists(session_id):
        logger.info("user unknown")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return session_id
