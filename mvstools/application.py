"""Application-wide shared state and the transaction context of a page."""

from __future__ import annotations

import threading

from .collection import Collection


class Application:
    """State shared by every session, guarded by one re-entrant lock."""

    def __init__(self) -> None:
        self.contents = Collection()
        self.static_objects = Collection()
        self._lock = threading.RLock()

    def lock(self) -> None:
        """Enter the application's critical section."""
        self._lock.acquire()

    def unlock(self) -> None:
        """Leave the application's critical section."""
        self._lock.release()

    def __enter__(self) -> "Application":
        self.lock()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unlock()


class ObjectContext:
    """Records how the current transaction was ended."""

    def __init__(self) -> None:
        self.outcome: str | None = None

    def set_complete(self) -> None:
        """Mark the transaction as completed."""
        self.outcome = "complete"

    def set_abort(self) -> None:
        """Mark the transaction as aborted."""
        self.outcome = "abort"