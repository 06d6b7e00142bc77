"""
Go-Back-N admission for text messages.

A submission is accepted only when it carries exactly the recipient's next
expected sequence number and the recipient's window has room. Every other
case is a negative decision expressed through the cumulative ACK, never an
error.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Optional

from chatrelay.logging_config import logger

from .delivery_log import DeliveryLog
from .messages import TextMessage
from .session_registry import Session, SessionRegistry

PersistHook = Callable[[TextMessage], None]


class AdmissionOutcome(str, enum.Enum):
    ACCEPTED = "accepted"
    BACKPRESSURE = "backpressure"
    DUPLICATE = "duplicate"
    OUT_OF_ORDER = "out_of_order"


@dataclass(frozen=True, slots=True)
class AdmissionDecision:
    outcome: AdmissionOutcome
    ack: int
    message: Optional[TextMessage] = None

    @property
    def accepted(self) -> bool:
        return self.outcome is AdmissionOutcome.ACCEPTED


class AdmissionController:
    def __init__(
        self,
        registry: SessionRegistry,
        log: DeliveryLog,
        *,
        window_size: int = 5,
        persist: PersistHook | None = None,
    ) -> None:
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        self.registry = registry
        self.log = log
        self.window_size = window_size
        self._persist = persist

    def admit(self, recipient: str, sender: str, seq: int, payload: str) -> AdmissionDecision:
        decision = self.registry.transact(
            recipient, lambda session: self._decide(session, sender, seq, payload)
        )

        if decision.accepted:
            logger.info("Accepted message seq=%d from %s to %s", seq, sender, recipient)
            if self._persist is not None and decision.message is not None:
                self._persist(decision.message)
        elif decision.outcome is AdmissionOutcome.BACKPRESSURE:
            logger.info("Buffer full for %s, rejecting seq=%d (ack=%d)", recipient, seq, decision.ack)
        elif decision.outcome is AdmissionOutcome.DUPLICATE:
            logger.info("Duplicate packet seq=%d for %s (ack=%d)", seq, recipient, decision.ack)
        else:
            logger.info("Out of order packet seq=%d for %s (ack=%d)", seq, recipient, decision.ack)
        return decision

    def _decide(self, session: Session, sender: str, seq: int, payload: str) -> AdmissionDecision:
        # Runs under the recipient's lock: evaluate and apply in one step.
        session.last_activity = self.registry.clock()

        if seq < session.expected_seq:
            return AdmissionDecision(AdmissionOutcome.DUPLICATE, session.ack)
        if seq > session.expected_seq:
            return AdmissionDecision(AdmissionOutcome.OUT_OF_ORDER, session.ack)
        if session.window_occupancy >= self.window_size:
            return AdmissionDecision(AdmissionOutcome.BACKPRESSURE, session.ack)

        message = TextMessage(
            sender=sender,
            recipient=session.recipient,
            seq=seq,
            payload=payload,
        )
        self.log.append(session.recipient, message)
        session.expected_seq += 1
        session.window_occupancy += 1
        return AdmissionDecision(AdmissionOutcome.ACCEPTED, session.ack, message)


__all__ = ["AdmissionController", "AdmissionDecision", "AdmissionOutcome", "PersistHook"]
