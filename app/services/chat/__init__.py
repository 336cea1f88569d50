"""
Anonymous chat services.

This package provides:
- ClientRegistry: connected sessions and their push channels
- WaitingQueue: sessions waiting for a partner
- MatchingEngine: pairs waiting sessions
- RelayProtocol: forwards messages between paired sessions
- ChatService: ties the pieces together for the HTTP layer
"""

from .channel import EventChannel, PushChannel
from .registry import ClientRegistry, Session, generate_session_id
from .waiting_queue import WaitingQueue
from .matching import MatchingEngine
from .relay import RelayProtocol
from .service import ChatService, create_chat_service

__all__ = [
    "EventChannel",
    "PushChannel",
    "ClientRegistry",
    "Session",
    "generate_session_id",
    "WaitingQueue",
    "MatchingEngine",
    "RelayProtocol",
    "ChatService",
    "create_chat_service",
]
