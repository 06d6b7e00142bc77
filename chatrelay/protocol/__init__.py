"""Emulated Go-Back-N reliability layer: sessions, admission, delivery."""

from .admission import AdmissionController, AdmissionDecision, AdmissionOutcome
from .chunks import ChunkReceipt, ChunkTransfer
from .delivery_log import DeliveryLog
from .expiry import SessionExpirySweeper
from .fault_injector import FaultInjector
from .messages import FileChunkMessage, Message, MessageKind, TextMessage
from .session_registry import Session, SessionRegistry

__all__ = [
    "AdmissionController",
    "AdmissionDecision",
    "AdmissionOutcome",
    "ChunkReceipt",
    "ChunkTransfer",
    "DeliveryLog",
    "FaultInjector",
    "FileChunkMessage",
    "Message",
    "MessageKind",
    "Session",
    "SessionExpirySweeper",
    "SessionRegistry",
    "TextMessage",
]
