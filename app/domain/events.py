"""
Events pushed from the server to a connected browser.

Each event is one Server-Sent Events frame: an `event:` line naming the type
and a single `data:` line holding a JSON payload.
"""
import json
from dataclasses import dataclass, field


INFO = "info"
HINT = "hint"
OPER = "oper"

OPER_ID = "id"
OPER_MATCH = "match"
OPER_PEER_LEFT = "plve"


@dataclass(frozen=True)
class ChatEvent:
    type: str
    payload: dict = field(default_factory=dict)

    def to_sse(self) -> str:
        data = json.dumps(self.payload, separators=(",", ":"))
        return f"event: {self.type}\ndata: {data}\n\n"


def assigned_id(session_id: str) -> ChatEvent:
    return ChatEvent(OPER, {"oper": OPER_ID, "data": session_id})


def matched() -> ChatEvent:
    return ChatEvent(OPER, {"oper": OPER_MATCH})


def peer_left() -> ChatEvent:
    return ChatEvent(OPER, {"oper": OPER_PEER_LEFT})


def chat_message(sender: str, text: str) -> ChatEvent:
    return ChatEvent(INFO, {"sender": sender, "msg": text})


def typing_hint(sender: str) -> ChatEvent:
    return ChatEvent(HINT, {"sender": sender})
