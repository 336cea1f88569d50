"""
Chat routes: the event stream plus the actions a browser can take.
"""
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from app.api.deps import (
    get_app_settings,
    get_chat_service,
    get_recaptcha_verifier,
    require_session,
)
from app.core.config import Settings
from app.domain.schemas import ErrorResponse, MessageCreate, OkResponse
from app.services.chat import ChatService, PushChannel
from app.services.recaptcha import RecaptchaVerifier

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/register")
async def register(
    request: Request,
    chat: ChatService = Depends(get_chat_service),
    settings: Settings = Depends(get_app_settings),
):
    """Open the Server-Sent Events stream and assign a session id."""
    channel = PushChannel()
    session_id = chat.connect(channel)

    async def on_close():
        # Runs after the response on every path, even if the stream never started
        logger.info(f"Client {session_id} was disconnected")
        chat.disconnect(session_id)

    async def event_stream():
        async for frame in channel.stream(
            request.is_disconnected,
            keepalive_interval=settings.keepalive_interval,
        ):
            yield frame

    response = StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "Access-Control-Allow-Origin": "*",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
        background=BackgroundTask(on_close),
    )
    response.set_cookie(settings.session_cookie_name, session_id, samesite="lax")
    return response


@router.api_route(
    "/match",
    methods=["GET", "POST"],
    response_model=OkResponse,
    responses={400: {"model": ErrorResponse}, 409: {"description": "Bot detected"}},
)
async def match(
    session_id: str = Depends(require_session),
    token: str | None = Header(None),
    chat: ChatService = Depends(get_chat_service),
    verifier: RecaptchaVerifier = Depends(get_recaptcha_verifier),
):
    """Verify the reCAPTCHA token and queue the caller for a partner."""
    if not token:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="Token is missing").model_dump(),
        )

    try:
        is_bot = await verifier.is_bot(token)
    except Exception as e:
        logger.error(f"Error while verifying if client is a bot: {e}")
        is_bot = False

    if is_bot:
        logger.info(f"Bot detected {session_id}")
        raise HTTPException(status_code=409, detail="Bot detected")

    chat.request_match(session_id)
    return OkResponse()


@router.api_route("/typing", methods=["GET", "POST"], response_model=OkResponse)
async def typing(
    session_id: str = Depends(require_session),
    chat: ChatService = Depends(get_chat_service),
):
    """Tell the caller's partner that the caller is typing."""
    chat.typing(session_id)
    return OkResponse()


@router.post("/message", response_model=OkResponse)
async def message(
    data: MessageCreate,
    session_id: str = Depends(require_session),
    chat: ChatService = Depends(get_chat_service),
):
    chat.send(session_id, data.msg)
    return OkResponse()


@router.api_route("/leave", methods=["GET", "POST"], response_model=OkResponse)
async def leave(
    session_id: str = Depends(require_session),
    chat: ChatService = Depends(get_chat_service),
):
    """Leave the current chat without closing the event stream."""
    chat.leave(session_id)
    return OkResponse()
