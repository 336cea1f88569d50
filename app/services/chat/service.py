"""
Chat service for anonymous one-to-one conversations.

Owns the registry, the waiting queue, the matching engine and the relay, and
exposes the operations the HTTP routes call. One instance lives for the
lifetime of the application.
"""
import asyncio
import logging
from typing import Callable, Optional

from app.core.config import Settings, get_settings
from app.services.chat.channel import EventChannel
from app.services.chat.matching import MatchingEngine
from app.services.chat.registry import ClientRegistry, Session, generate_session_id
from app.services.chat.relay import RelayProtocol
from app.services.chat.waiting_queue import WaitingQueue

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(
        self,
        batch_size: int = 100,
        backoff_seconds: float = 0.1,
        id_factory: Callable[[], str] = generate_session_id,
    ):
        self.registry = ClientRegistry(id_factory=id_factory)
        self.queue = WaitingQueue()
        self.matching = MatchingEngine(
            self.registry,
            self.queue,
            batch_size=batch_size,
            backoff_seconds=backoff_seconds,
        )
        self.relay = RelayProtocol(self.registry, self.queue)
        self.registry.teardown = self.relay.process_chat_close

    def exists(self, session_id: Optional[str]) -> bool:
        return self.registry.exists(session_id)

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        return self.registry.get(session_id)

    def connect(self, channel: EventChannel) -> str:
        return self.registry.register(channel)

    def disconnect(self, session_id: str) -> None:
        self.registry.unregister(session_id)

    def request_match(self, session_id: str) -> Optional[asyncio.Task]:
        """Put a session in the waiting queue.

        A session that is still paired leaves its current chat first.
        """
        session = self.registry.get(session_id)
        if session is None:
            logger.warning(f"Match requested for unknown user {session_id}")
            return None

        if session.peer is not None:
            self.relay.process_chat_close(session_id)
        return self.matching.enqueue(session_id)

    def send(self, session_id: str, text: str) -> bool:
        return self.relay.send_message(session_id, text, is_typing=False)

    def typing(self, session_id: str) -> bool:
        return self.relay.send_message(session_id, is_typing=True)

    def leave(self, session_id: str) -> None:
        self.relay.process_chat_close(session_id)

    async def shutdown(self) -> None:
        """Close every open channel so their streams end."""
        await self.matching.wait_idle()
        for session in self.registry:
            session.channel.close()


def create_chat_service(settings: Optional[Settings] = None) -> ChatService:
    settings = settings or get_settings()
    return ChatService(
        batch_size=settings.match_batch_size,
        backoff_seconds=settings.match_backoff_seconds,
    )
