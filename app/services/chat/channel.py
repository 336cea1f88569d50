"""
Push channels for connected browsers.

A channel is an in-memory event queue drained by one SSE response. Writes
never block so that registry and relay operations stay single-step.
"""
import asyncio
from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol

from app.domain.events import ChatEvent


KEEPALIVE = ": keep-alive\n\n"


class EventChannel(Protocol):
    def send(self, event: ChatEvent) -> None: ...

    def close(self) -> None: ...


class PushChannel:
    """Queue-backed channel feeding a text/event-stream response."""

    def __init__(self):
        self._queue: asyncio.Queue[Optional[ChatEvent]] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: ChatEvent) -> None:
        if self._closed:
            return
        self._queue.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def stream(
        self,
        is_disconnected: Callable[[], Awaitable[bool]],
        keepalive_interval: float = 15.0,
    ) -> AsyncIterator[str]:
        """Yield SSE frames until the channel is closed or the client goes away.

        While idle, a comment frame is sent every `keepalive_interval` seconds
        and the client connection is checked.
        """
        while True:
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=keepalive_interval)
            except asyncio.TimeoutError:
                if await is_disconnected():
                    break
                yield KEEPALIVE
                continue

            if event is None:
                break
            yield event.to_sse()
