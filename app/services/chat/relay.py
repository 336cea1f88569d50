"""
Forwards chat traffic between paired sessions and tears pairings down.
"""
import logging
from typing import Optional

from app.domain import events
from app.services.chat.registry import ClientRegistry, Session
from app.services.chat.waiting_queue import WaitingQueue

logger = logging.getLogger(__name__)


class RelayProtocol:
    def __init__(self, registry: ClientRegistry, queue: WaitingQueue):
        self.registry = registry
        self.queue = queue

    def active_peer(self, session: Session) -> Optional[Session]:
        """Return the peer session when the pairing is symmetric, else None."""
        if session.peer is None:
            return None
        peer = self.registry.get(session.peer)
        if peer is None or peer.peer != session.id:
            return None
        return peer

    def send_message(self, from_id: str, text: str = "", is_typing: bool = False) -> bool:
        """Relay a message or typing hint to the sender's peer.

        Returns True when something was forwarded. A broken pairing is cleared
        on the sender's side and the sender is told its peer left.
        """
        sender = self.registry.get(from_id)
        if sender is None:
            logger.warning(f"Relay requested for unknown user {from_id}")
            return False

        peer = self.active_peer(sender)
        if peer is None:
            if sender.peer is not None:
                logger.info(f"Stale pairing for user {from_id} (peer {sender.peer}), closing chat")
            sender.peer = None
            self.queue.remove(from_id)
            sender.push(events.peer_left())
            return False

        if is_typing:
            peer.push(events.typing_hint(from_id))
        else:
            logger.info(f"Sending message from {from_id} to {peer.id}")
            peer.push(events.chat_message(from_id, text))
        return True

    def process_chat_close(self, leaving_id: str) -> None:
        """End the leaving session's chat and notify the other side, if any."""
        sender = self.registry.get(leaving_id)
        if sender is None:
            return

        logger.info(f"User {leaving_id} has left the chat")

        peer = self.registry.get(sender.peer)
        # Only a peer that still points back at us is part of this chat
        if peer is not None and peer.peer == leaving_id:
            peer.peer = None
            self.queue.remove(peer.id)
            peer.push(events.peer_left())

        sender.peer = None
        self.queue.remove(leaving_id)
