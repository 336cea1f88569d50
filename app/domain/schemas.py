from pydantic import BaseModel


# ============================================
# Chat Schemas
# ============================================

class MessageCreate(BaseModel):
    msg: str


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str


# ============================================
# Health Schemas
# ============================================

class HealthResponse(BaseModel):
    status: str
    sessions: int
    waiting: int
