from app.domain.events import OPER
from app.services.chat import ClientRegistry, WaitingQueue

from conftest import RecordingChannel, sequential_ids


def test_register_pushes_assigned_id():
    registry = ClientRegistry(id_factory=sequential_ids())
    channel = RecordingChannel()

    session_id = registry.register(channel)

    assert session_id == "user-1"
    assert registry.exists(session_id)
    assert registry.get(session_id).peer is None
    assert len(channel.events) == 1
    event = channel.events[0]
    assert event.type == OPER
    assert event.payload == {"oper": "id", "data": "user-1"}


def test_register_skips_colliding_ids():
    ids = iter(["dup", "dup", "fresh"])
    registry = ClientRegistry(id_factory=lambda: next(ids))

    first = registry.register(RecordingChannel())
    second = registry.register(RecordingChannel())

    assert first == "dup"
    assert second == "fresh"
    assert len(registry) == 2


def test_default_ids_are_unique():
    registry = ClientRegistry()
    ids = {registry.register(RecordingChannel()) for _ in range(50)}
    assert len(ids) == 50


def test_lookups_for_unknown_ids():
    registry = ClientRegistry()
    assert registry.get("nope") is None
    assert registry.get(None) is None
    assert registry.exists("nope") is False
    assert registry.exists(None) is False


def test_unregister_unknown_is_noop():
    calls = []
    registry = ClientRegistry(teardown=calls.append)

    registry.unregister("ghost")

    assert calls == []
    assert len(registry) == 0


def test_unregister_runs_teardown_before_removal():
    seen = []
    registry = ClientRegistry(id_factory=sequential_ids())
    registry.teardown = lambda session_id: seen.append(registry.exists(session_id))
    session_id = registry.register(RecordingChannel())

    registry.unregister(session_id)
    registry.unregister(session_id)

    assert seen == [True]
    assert not registry.exists(session_id)


def test_unregister_paired_session_notifies_peer(chat, paired):
    (a, _), (b, b_channel) = paired

    chat.disconnect(a)

    assert not chat.exists(a)
    assert chat.get(b).peer is None
    assert b_channel.opers() == ["plve"]


def test_unregister_waiting_session_leaves_queue(chat, connect):
    a, _ = connect()
    chat.queue.add(a)

    chat.disconnect(a)

    assert a not in chat.queue


def test_waiting_queue_is_an_ordered_set():
    queue = WaitingQueue()
    assert queue.add("a") is True
    assert queue.add("b") is True
    assert queue.add("a") is False
    assert list(queue) == ["a", "b"]
    assert queue.head_pair() == ("a", "b")

    queue.remove("a")
    queue.remove("a")
    queue.remove(None)
    assert list(queue) == ["b"]
