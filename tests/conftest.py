import itertools

import pytest

from app.domain.events import OPER
from app.services.chat import ChatService


class RecordingChannel:
    """Channel that keeps every event it is sent."""

    def __init__(self):
        self.events = []
        self.closed = False

    def send(self, event):
        self.events.append(event)

    def close(self):
        self.closed = True

    def opers(self):
        return [e.payload["oper"] for e in self.events if e.type == OPER]

    def clear(self):
        self.events.clear()


def sequential_ids(prefix="user"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


def assert_symmetric(chat: ChatService):
    for session in chat.registry:
        if session.peer is not None:
            peer = chat.get(session.peer)
            assert peer is not None, f"{session.id} points at missing {session.peer}"
            assert peer.peer == session.id


def assert_queue_consistent(chat: ChatService):
    for session_id in chat.queue:
        assert chat.exists(session_id)


@pytest.fixture
def chat():
    return ChatService(batch_size=100, backoff_seconds=0, id_factory=sequential_ids())


@pytest.fixture
def connect(chat):
    """Register a session on a recording channel; returns (id, channel)."""

    def _connect():
        channel = RecordingChannel()
        session_id = chat.connect(channel)
        return session_id, channel

    return _connect


@pytest.fixture
def paired(chat, connect):
    """Two sessions already paired with each other, channels cleared."""
    a, a_channel = connect()
    b, b_channel = connect()
    chat.get(a).peer = b
    chat.get(b).peer = a
    a_channel.clear()
    b_channel.clear()
    return (a, a_channel), (b, b_channel)
