from typing import Dict, Iterator, Optional, Tuple


class WaitingQueue:
    """Insertion-ordered set of session ids waiting for a match."""

    def __init__(self):
        # dict keeps insertion order and gives set semantics
        self._ids: Dict[str, None] = {}

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def add(self, session_id: str) -> bool:
        """Add a session id. Returns False when it was already queued."""
        if session_id in self._ids:
            return False
        self._ids[session_id] = None
        return True

    def remove(self, session_id: Optional[str]) -> None:
        if session_id is None:
            return
        self._ids.pop(session_id, None)

    def head_pair(self) -> Tuple[str, str]:
        """Return the two oldest ids without removing them."""
        if len(self._ids) < 2:
            raise LookupError("fewer than two sessions waiting")
        it = iter(self._ids)
        return next(it), next(it)
