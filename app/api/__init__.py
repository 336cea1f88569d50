from fastapi import APIRouter

from .routes import (
    chat,
    health,
)

api_router = APIRouter()

# Health check
api_router.include_router(health.router, tags=["health"])

# Event stream and chat actions
api_router.include_router(chat.router, tags=["chat"])
