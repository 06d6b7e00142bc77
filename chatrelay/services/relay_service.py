"""
Relay facade used by the HTTP layer.

Wires the fault injector, admission control, session registry, delivery log,
expiry sweep and chunk path together, and owns the persistence dispatcher.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from sqlalchemy import Engine

from chatrelay.db import create_db_engine, create_session_factory, init_db
from chatrelay.logging_config import logger
from chatrelay.protocol import (
    AdmissionController,
    AdmissionDecision,
    ChunkReceipt,
    ChunkTransfer,
    DeliveryLog,
    FaultInjector,
    Message,
    Session,
    SessionExpirySweeper,
    SessionRegistry,
)
from chatrelay.protocol.messages import now_ms
from chatrelay.protocol.session_registry import Clock
from chatrelay.settings import Settings

from .persistence import PersistenceDispatcher


@dataclass(frozen=True, slots=True)
class TextSubmission:
    """Outcome of a text submission. ``decision`` is None when the channel dropped it."""

    decision: AdmissionDecision | None

    @property
    def dropped(self) -> bool:
        return self.decision is None


@dataclass(frozen=True, slots=True)
class PollResult:
    messages: list[Message]
    ack: int


class RelayService:
    def __init__(
        self,
        *,
        persistence: PersistenceDispatcher,
        fault_injector: FaultInjector,
        window_size: int = 5,
        idle_timeout_seconds: float = 300,
        sweep_interval_seconds: float = 60,
        active_user_window_seconds: int = 300,
        clock: Clock = time.time,
        engine: Engine | None = None,
    ) -> None:
        self.persistence = persistence
        self.fault_injector = fault_injector
        self.active_user_window_seconds = active_user_window_seconds
        self.engine = engine

        self.registry = SessionRegistry(clock=clock)
        self.log = DeliveryLog()
        self.admission = AdmissionController(
            self.registry,
            self.log,
            window_size=window_size,
            persist=persistence.persist_message,
        )
        self.chunks = ChunkTransfer(self.log, persistence)
        self.sweeper = SessionExpirySweeper(
            self.registry,
            interval_seconds=sweep_interval_seconds,
            idle_seconds=idle_timeout_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelayService":
        engine = create_db_engine(settings.database_url)
        init_db(engine)
        persistence = PersistenceDispatcher(
            create_session_factory(engine),
            workers=settings.persistence_workers,
            timeout_seconds=settings.persistence_timeout_seconds,
        )
        fault_injector = FaultInjector(
            settings.packet_loss_probability,
            enabled=settings.packet_loss_enabled,
        )
        return cls(
            persistence=persistence,
            fault_injector=fault_injector,
            window_size=settings.receive_window_size,
            idle_timeout_seconds=settings.session_idle_timeout_seconds,
            sweep_interval_seconds=settings.session_sweep_interval_seconds,
            active_user_window_seconds=settings.active_user_window_seconds,
            engine=engine,
        )

    # Lifecycle

    def start(self) -> None:
        self.sweeper.start()
        logger.info(
            "Relay started (window=%d, loss=%s@%.2f, idle timeout=%ss)",
            self.admission.window_size,
            "on" if self.fault_injector.enabled else "off",
            self.fault_injector.drop_probability,
            self.sweeper.idle_seconds,
        )

    def stop(self) -> None:
        self.sweeper.stop()
        self.persistence.shutdown()
        if self.engine is not None:
            self.engine.dispose()
        logger.info("Relay stopped")

    # Text path

    def submit_text(self, *, sender: str, recipient: str, seq: int, payload: str) -> TextSubmission:
        if self.fault_injector.should_drop(recipient=recipient, seq=seq):
            return TextSubmission(decision=None)
        decision = self.admission.admit(recipient, sender, seq, payload)
        return TextSubmission(decision=decision)

    def poll(self, recipient: str, last_ack: int) -> PollResult:
        messages = self.log.poll(recipient, last_ack)
        session = self.registry.confirm_delivery(recipient, last_ack)
        self.persistence.touch_activity(recipient)
        return PollResult(messages=messages, ack=session.ack if session is not None else -1)

    # Chunk path

    def submit_chunk(
        self,
        *,
        sender: str,
        recipient: str,
        file_name: str,
        chunk_index: int,
        total_chunks: int,
        chunk_data: str,
        seq: int,
    ) -> ChunkReceipt:
        return self.chunks.submit(
            sender=sender,
            recipient=recipient,
            file_name=file_name,
            chunk_index=chunk_index,
            total_chunks=total_chunks,
            chunk_data=chunk_data,
            seq=seq,
        )

    def fetch_file_chunks(self, file_name: str, recipient: str) -> list[str]:
        return self.chunks.fetch(file_name, recipient)

    # Presence / inspection

    def active_users(self) -> list[str]:
        since = now_ms() - self.active_user_window_seconds * 1000
        return self.persistence.query_active_identities(since)

    def session(self, recipient: str) -> Session | None:
        return self.registry.snapshot(recipient)

    def reset_session(self, recipient: str) -> bool:
        reset = self.registry.evict(recipient)
        if reset:
            logger.info("Session for %s reset on request", recipient)
        return reset


__all__ = ["PollResult", "RelayService", "TextSubmission"]
