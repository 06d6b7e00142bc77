"""
Segmented file transfer.

Chunks are admitted without sequence or window gating: each one is stored
under (file_name, recipient, chunk_index) and announced to the recipient
through the delivery log. The chunk ACK simply echoes the sender's seq and
lives in a numbering space separate from the text path.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from chatrelay.logging_config import logger

from .delivery_log import DeliveryLog
from .messages import FileChunkMessage

CHUNK_RECEIVED = "chunk_received"


class ChunkStore(Protocol):
    def persist_chunk(
        self,
        *,
        sender: str,
        recipient: str,
        file_name: str,
        chunk_index: int,
        total_chunks: int,
        data: str,
    ) -> bool: ...

    def query_chunks(self, file_name: str, recipient: str) -> list[str]: ...


@dataclass(frozen=True, slots=True)
class ChunkReceipt:
    ack: int
    status: str
    persisted: bool


class ChunkTransfer:
    def __init__(self, log: DeliveryLog, store: ChunkStore) -> None:
        self.log = log
        self.store = store

    def submit(
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
        persisted = self.store.persist_chunk(
            sender=sender,
            recipient=recipient,
            file_name=file_name,
            chunk_index=chunk_index,
            total_chunks=total_chunks,
            data=chunk_data,
        )
        self.log.append(
            recipient,
            FileChunkMessage(
                sender=sender,
                recipient=recipient,
                seq=seq,
                file_name=file_name,
                chunk_index=chunk_index,
                total_chunks=total_chunks,
            ),
        )
        logger.info(
            "Received chunk %d/%d of %r from %s to %s",
            chunk_index + 1,
            total_chunks,
            file_name,
            sender,
            recipient,
        )
        return ChunkReceipt(ack=seq, status=CHUNK_RECEIVED, persisted=persisted)

    def fetch(self, file_name: str, recipient: str) -> list[str]:
        """Stored chunk payloads in ascending chunk_index order."""
        return self.store.query_chunks(file_name, recipient)


__all__ = ["CHUNK_RECEIVED", "ChunkReceipt", "ChunkStore", "ChunkTransfer"]
