"""
Best-effort durability side channel.

Writes run on a small dedicated thread pool so admission never waits on the
database. A failed write is rolled back and logged; it never changes a
protocol decision that was already made.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable

from sqlalchemy.orm import Session, sessionmaker

from chatrelay.logging_config import logger
from chatrelay.protocol.messages import TextMessage, now_ms
from chatrelay.repositories import message_repository as repo


class PersistenceDispatcher:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        workers: int = 2,
        timeout_seconds: float = 2.0,
    ) -> None:
        self._session_factory = session_factory
        self.timeout_seconds = timeout_seconds
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="relay-persist")
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()

    @property
    def session_factory(self) -> sessionmaker[Session]:
        return self._session_factory

    def _write(self, description: str, fn: Callable[[Session], object]) -> bool:
        session = self._session_factory()
        try:
            fn(session)
            return True
        except Exception:
            session.rollback()
            logger.exception("Failed to persist %s", description)
            return False
        finally:
            session.close()

    def _submit(self, description: str, fn: Callable[[Session], object]) -> Future:
        future = self._executor.submit(self._write, description, fn)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def persist_message(self, message: TextMessage) -> Future:
        """Queue a write of an accepted text message and return immediately."""
        return self._submit(
            f"message seq={message.seq} to {message.recipient}",
            lambda db: repo.insert_message(
                db,
                sender=message.sender,
                receiver=message.recipient,
                seq=message.seq,
                content=message.payload,
                message_type=message.kind.value,
                timestamp=message.timestamp,
            ),
        )

    def persist_chunk(
        self,
        *,
        sender: str,
        recipient: str,
        file_name: str,
        chunk_index: int,
        total_chunks: int,
        data: str,
    ) -> bool:
        """
        Write a file chunk, waiting at most ``timeout_seconds``.

        Returns True when the write committed in time. A slow write keeps
        running in the background.
        """
        stamp = now_ms()
        future = self._submit(
            f"chunk {chunk_index}/{total_chunks} of {file_name!r} to {recipient}",
            lambda db: repo.upsert_file_chunk(
                db,
                sender=sender,
                receiver=recipient,
                file_name=file_name,
                chunk_index=chunk_index,
                total_chunks=total_chunks,
                chunk_data=data,
                timestamp=stamp,
            ),
        )
        try:
            return bool(future.result(timeout=self.timeout_seconds))
        except FutureTimeoutError:
            logger.warning(
                "Chunk %d of %r to %s still persisting after %.1fs",
                chunk_index,
                file_name,
                recipient,
                self.timeout_seconds,
            )
            return False

    def touch_activity(self, identity: str) -> Future:
        stamp = now_ms()
        return self._submit(
            f"activity of {identity}",
            lambda db: repo.touch_user_activity(db, identity, at_ms=stamp),
        )

    def query_chunks(self, file_name: str, recipient: str) -> list[str]:
        with self._session_factory() as db:
            return repo.list_file_chunks(db, file_name=file_name, receiver=recipient)

    def query_active_identities(self, since_ms: int) -> list[str]:
        with self._session_factory() as db:
            return repo.list_active_usernames(db, since_ms=since_ms)

    def drain(self, timeout: float | None = None) -> bool:
        """Wait for queued writes; returns False if some are still running."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._pending_lock:
                pending = [f for f in self._pending if not f.done()]
            if not pending:
                return True
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            _, not_done = wait(pending, timeout=remaining)
            if not_done and deadline is not None and time.monotonic() >= deadline:
                return False

    def shutdown(self, timeout: float = 5.0) -> None:
        if not self.drain(timeout):
            logger.warning("Shutting down with persistence writes still in flight")
        self._executor.shutdown(wait=False)


__all__ = ["PersistenceDispatcher"]
