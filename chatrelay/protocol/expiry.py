from __future__ import annotations

import threading

from chatrelay.logging_config import logger

from .session_registry import SessionRegistry


class SessionExpirySweeper:
    """
    Periodically evicts sessions idle for longer than ``idle_seconds``.

    Eviction only resets in-memory negotiation state; the delivery log and
    anything persisted for the recipient are left as they are.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        *,
        interval_seconds: float = 60,
        idle_seconds: float = 300,
    ) -> None:
        self.registry = registry
        self.interval_seconds = interval_seconds
        self.idle_seconds = idle_seconds

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._sweep_loop, name="session-expiry-sweeper", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 1.0) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
        self._thread = None

    def run_once(self, *, now: float | None = None) -> list[str]:
        evicted = self.registry.evict_idle(self.idle_seconds, now=now)
        for recipient in evicted:
            logger.info("Session for %s expired after %ss idle", recipient, self.idle_seconds)
        return evicted

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception:
                logger.exception("Unexpected error while sweeping idle sessions")


__all__ = ["SessionExpirySweeper"]
