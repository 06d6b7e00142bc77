"""
Per-recipient sequencing state.

Each recipient owns one Session guarded by its own lock, so admission
decisions for one recipient are linearized while different recipients
proceed in parallel. There is no lock spanning all recipients: entries are
created with an atomic ``dict.setdefault`` and retired by marking them dead
under their own lock.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator, TypeVar

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(slots=True)
class Session:
    """Negotiation state of one recipient. Only mutated under its entry lock."""

    recipient: str
    expected_seq: int = 0
    window_occupancy: int = 0
    delivered_through: int = -1
    last_activity: float = 0.0

    @property
    def ack(self) -> int:
        """Cumulative acknowledgment: highest in-order sequence admitted."""
        return self.expected_seq - 1


@dataclass(slots=True)
class _Entry:
    session: Session
    lock: threading.Lock = field(default_factory=threading.Lock)
    dead: bool = False


class SessionRegistry:
    def __init__(self, *, clock: Clock = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    @property
    def clock(self) -> Clock:
        return self._clock

    def _live_entry(self, recipient: str) -> _Entry:
        entry = self._entries.get(recipient)
        if entry is None:
            fresh = _Entry(Session(recipient=recipient, last_activity=self._clock()))
            entry = self._entries.setdefault(recipient, fresh)
        return entry

    def transact(self, recipient: str, fn: Callable[[Session], T]) -> T:
        """
        Run ``fn`` against the recipient's session with exclusive access,
        creating the session on first reference.

        If the entry was evicted between lookup and lock acquisition the
        lookup is retried, so ``fn`` never observes a retired session.
        """
        while True:
            entry = self._live_entry(recipient)
            with entry.lock:
                if entry.dead:
                    continue
                return fn(entry.session)

    def snapshot(self, recipient: str) -> Session | None:
        """Return a consistent copy of the session, or None when absent."""
        entry = self._entries.get(recipient)
        if entry is None:
            return None
        with entry.lock:
            if entry.dead:
                return None
            return replace(entry.session)

    def current_ack(self, recipient: str) -> int:
        session = self.snapshot(recipient)
        return session.ack if session is not None else -1

    def confirm_delivery(self, recipient: str, watermark: int) -> Session | None:
        """
        Advance the delivered watermark and release window slots for every
        message at or below it. Unknown recipients are left absent.
        """
        entry = self._entries.get(recipient)
        if entry is None:
            return None
        with entry.lock:
            if entry.dead:
                return None
            session = entry.session
            target = min(watermark, session.ack)
            if target > session.delivered_through:
                released = target - session.delivered_through
                session.delivered_through = target
                session.window_occupancy = max(0, session.window_occupancy - released)
            return replace(session)

    def _retire(self, recipient: str, entry: _Entry) -> None:
        # Caller holds entry.lock.
        entry.dead = True
        if self._entries.get(recipient) is entry:
            del self._entries[recipient]

    def evict(self, recipient: str) -> bool:
        entry = self._entries.get(recipient)
        if entry is None:
            return False
        with entry.lock:
            if entry.dead:
                return False
            self._retire(recipient, entry)
            return True

    def evict_idle(self, idle_seconds: float, *, now: float | None = None) -> list[str]:
        """Remove every session idle for longer than ``idle_seconds``."""
        now = self._clock() if now is None else now
        evicted: list[str] = []
        for recipient, entry in list(self._entries.items()):
            with entry.lock:
                if entry.dead:
                    continue
                if now - entry.session.last_activity > idle_seconds:
                    self._retire(recipient, entry)
                    evicted.append(recipient)
        return evicted

    def recipients(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, recipient: object) -> bool:
        return recipient in self._entries


__all__ = ["Clock", "Session", "SessionRegistry"]
