"""
Relay message records.

Two variants share the delivery log: in-order text messages gated by the
recipient's session, and file chunk notifications that bypass sequencing.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Union


def now_ms() -> int:
    """Current Unix timestamp in milliseconds."""
    return int(time.time() * 1000)


class MessageKind(str, enum.Enum):
    TEXT = "text"
    FILE_CHUNK = "file_chunk"


@dataclass(frozen=True, slots=True)
class TextMessage:
    sender: str
    recipient: str
    seq: int
    payload: str
    timestamp: int = field(default_factory=now_ms)

    kind = MessageKind.TEXT


@dataclass(frozen=True, slots=True)
class FileChunkMessage:
    sender: str
    recipient: str
    seq: int
    file_name: str
    chunk_index: int
    total_chunks: int
    timestamp: int = field(default_factory=now_ms)

    kind = MessageKind.FILE_CHUNK

    @property
    def payload(self) -> str:
        return f"File chunk: {self.file_name}"


Message = Union[TextMessage, FileChunkMessage]


__all__ = ["FileChunkMessage", "Message", "MessageKind", "TextMessage", "now_ms"]
