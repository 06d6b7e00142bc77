from __future__ import annotations

from sqlalchemy import BigInteger, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class StoredMessage(Base):
    """
    Durable copy of an accepted text message.

    Written best-effort after admission; the in-memory delivery log stays the
    source of truth for polling.
    """

    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_receiver_seq", "receiver", "seq"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender: Mapped[str] = mapped_column(String(255), nullable=False)
    receiver: Mapped[str] = mapped_column(String(255), nullable=False)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="text")
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)


__all__ = ["StoredMessage"]
