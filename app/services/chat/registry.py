"""
In-memory registry of connected chat sessions.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional

from app.domain import events
from app.services.chat.channel import EventChannel

logger = logging.getLogger(__name__)


def generate_session_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Session:
    id: str
    channel: EventChannel
    peer: Optional[str] = None

    def push(self, event: events.ChatEvent) -> None:
        self.channel.send(event)


class ClientRegistry:
    """Maps session ids to their push channel and current peer.

    `teardown` is called with the session id before an entry is removed, so
    that a paired peer can be told the conversation ended.
    """

    def __init__(
        self,
        id_factory: Callable[[], str] = generate_session_id,
        teardown: Optional[Callable[[str], None]] = None,
    ):
        self._sessions: Dict[str, Session] = {}
        self._id_factory = id_factory
        self.teardown = teardown

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def register(self, channel: EventChannel) -> str:
        session_id = self._id_factory()
        while session_id in self._sessions:
            session_id = self._id_factory()

        logger.info(f"Registering new user {session_id}")
        self._sessions[session_id] = Session(id=session_id, channel=channel)
        channel.send(events.assigned_id(session_id))
        return session_id

    def unregister(self, session_id: str) -> None:
        if session_id not in self._sessions:
            return

        if self.teardown is not None:
            self.teardown(session_id)
        del self._sessions[session_id]
        logger.info(f"Unregister user {session_id}")

    def exists(self, session_id: Optional[str]) -> bool:
        return session_id is not None and session_id in self._sessions

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if session_id is None:
            return None
        return self._sessions.get(session_id)
