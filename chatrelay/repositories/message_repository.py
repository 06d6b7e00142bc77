from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chatrelay.models import FileChunk, StoredMessage, UserActivity


def insert_message(
    db: Session,
    *,
    sender: str,
    receiver: str,
    seq: int,
    content: str,
    message_type: str,
    timestamp: int,
) -> StoredMessage:
    """Insert one accepted message and refresh both parties' activity."""
    row = StoredMessage(
        sender=sender,
        receiver=receiver,
        seq=seq,
        content=content,
        type=message_type,
        timestamp=timestamp,
    )
    db.add(row)
    touch_user_activity(db, sender, at_ms=timestamp, commit=False)
    touch_user_activity(db, receiver, at_ms=timestamp, commit=False)
    db.commit()
    return row


def upsert_file_chunk(
    db: Session,
    *,
    sender: str,
    receiver: str,
    file_name: str,
    chunk_index: int,
    total_chunks: int,
    chunk_data: str,
    timestamp: int,
) -> FileChunk:
    """
    Store a chunk keyed by (file_name, receiver, chunk_index).

    A retransmitted chunk replaces the stored payload instead of adding a
    second row, so reassembly sees each index once.
    """
    row = db.execute(
        select(FileChunk).where(
            FileChunk.file_name == file_name,
            FileChunk.receiver == receiver,
            FileChunk.chunk_index == chunk_index,
        )
    ).scalar_one_or_none()
    if row is None:
        row = FileChunk(
            sender=sender,
            receiver=receiver,
            file_name=file_name,
            chunk_index=chunk_index,
            total_chunks=total_chunks,
            chunk_data=chunk_data,
            timestamp=timestamp,
        )
        db.add(row)
    else:
        row.sender = sender
        row.total_chunks = total_chunks
        row.chunk_data = chunk_data
        row.timestamp = timestamp

    touch_user_activity(db, sender, at_ms=timestamp, commit=False)
    touch_user_activity(db, receiver, at_ms=timestamp, commit=False)
    db.commit()
    return row


def list_file_chunks(db: Session, *, file_name: str, receiver: str) -> list[str]:
    stmt = (
        select(FileChunk.chunk_data)
        .where(FileChunk.file_name == file_name, FileChunk.receiver == receiver)
        .order_by(FileChunk.chunk_index.asc())
    )
    return list(db.execute(stmt).scalars().all())


def touch_user_activity(db: Session, username: str, *, at_ms: int, commit: bool = True) -> None:
    row = _find_user(db, username)
    if row is None:
        try:
            # Savepoint: a concurrent writer may register the same name first.
            with db.begin_nested():
                db.add(UserActivity(username=username, last_activity=at_ms))
        except IntegrityError:
            row = _find_user(db, username)
    if row is not None and at_ms > row.last_activity:
        row.last_activity = at_ms
    if commit:
        db.commit()


def _find_user(db: Session, username: str) -> UserActivity | None:
    return db.execute(
        select(UserActivity).where(UserActivity.username == username)
    ).scalar_one_or_none()


def list_active_usernames(db: Session, *, since_ms: int) -> list[str]:
    stmt = (
        select(UserActivity.username)
        .where(UserActivity.last_activity > since_ms)
        .order_by(UserActivity.username.asc())
    )
    return list(db.execute(stmt).scalars().all())


__all__ = [
    "insert_message",
    "list_active_usernames",
    "list_file_chunks",
    "touch_user_activity",
    "upsert_file_chunk",
]
