from typing import Literal

from pydantic import Field

from chatrelay.protocol import FileChunkMessage, Message

from .common import CamelModel, Identity


class SendMessageRequest(CamelModel):
    sender: Identity = Field(..., description="Sending identity")
    receiver: Identity = Field(..., description="Recipient identity")
    seq: int = Field(..., ge=0, description="Sender-assigned sequence number")
    message: str = Field(..., description="Text payload")
    type: Literal["text"] = Field("text", description="Only text travels on this path")


class AckResponse(CamelModel):
    ack: int = Field(..., description="Recipient's cumulative acknowledgment")


class PolledMessage(CamelModel):
    sender: str
    seq: int
    message: str
    type: str
    timestamp: int = Field(..., description="Acceptance time, epoch milliseconds")
    file_name: str | None = Field(default=None, alias="fileName")
    chunk_index: int | None = Field(default=None, alias="chunkIndex")
    total_chunks: int | None = Field(default=None, alias="totalChunks")

    @classmethod
    def from_message(cls, message: Message) -> "PolledMessage":
        extra = {}
        if isinstance(message, FileChunkMessage):
            extra = {
                "file_name": message.file_name,
                "chunk_index": message.chunk_index,
                "total_chunks": message.total_chunks,
            }
        return cls(
            sender=message.sender,
            seq=message.seq,
            message=message.payload,
            type=message.kind.value,
            timestamp=message.timestamp,
            **extra,
        )


class ReceiveResponse(CamelModel):
    messages: list[PolledMessage] = Field(default_factory=list)
    ack: int = Field(..., description="Recipient's cumulative acknowledgment, -1 when none")


__all__ = ["AckResponse", "PolledMessage", "ReceiveResponse", "SendMessageRequest"]
