import logging
import re
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.api import api_router
from app.core.config import Settings, get_settings
from app.services.chat import create_chat_service
from app.services.recaptcha import create_recaptcha_verifier

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings: Settings = app.state.settings
    app.state.chat = create_chat_service(settings)
    app.state.recaptcha = create_recaptcha_verifier(settings)
    logger.info("Chat service started")
    yield
    # Shutdown
    await app.state.chat.shutdown()
    await app.state.recaptcha.aclose()
    logger.info("Chat service stopped")


class DynamicCORSMiddleware(BaseHTTPMiddleware):
    """CORS middleware that only trusts matching origins in production."""

    def __init__(self, app, environment: str = "development", origin_pattern: str = ""):
        super().__init__(app)
        self.environment = environment
        self.origin_pattern = re.compile(origin_pattern) if origin_pattern else None

    def is_allowed(self, origin: str) -> bool:
        if self.environment != "production":
            return True
        return bool(self.origin_pattern and self.origin_pattern.match(origin))

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")

        # Handle preflight requests
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)

        if origin:
            if self.is_allowed(origin):
                response.headers["Access-Control-Allow-Origin"] = origin
                response.headers["Access-Control-Allow-Credentials"] = "true"
            else:
                logger.warning(f"CORS rejected - Origin '{origin}' does not match pattern")

        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Token"

        return response


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Chat Story",
        description="Anonymous one-to-one chat relay",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        DynamicCORSMiddleware,
        environment=settings.environment,
        origin_pattern=settings.allowed_origin_pattern,
    )

    # Include all routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
