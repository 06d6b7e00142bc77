"""
Append-only per-recipient record of accepted messages.

Polling never consumes entries: the same watermark always replays the same
result. Reads take a slice snapshot of the backing list without locking,
entries being immutable once appended.
"""

from __future__ import annotations

import threading

from .messages import FileChunkMessage, Message, TextMessage


class _RecipientLog:
    __slots__ = ("entries", "append_lock")

    def __init__(self) -> None:
        self.entries: list[Message] = []
        self.append_lock = threading.Lock()


class DeliveryLog:
    def __init__(self) -> None:
        self._logs: dict[str, _RecipientLog] = {}

    def _log_for(self, recipient: str) -> _RecipientLog:
        log = self._logs.get(recipient)
        if log is None:
            log = self._logs.setdefault(recipient, _RecipientLog())
        return log

    def append(self, recipient: str, message: Message) -> None:
        log = self._log_for(recipient)
        # Text appends are already serialized by admission; chunk uploads
        # are not, and share this per-recipient lock. Readers never take it.
        with log.append_lock:
            log.entries.append(message)

    def entries(self, recipient: str) -> list[Message]:
        log = self._logs.get(recipient)
        if log is None:
            return []
        return log.entries[:]

    def poll(self, recipient: str, last_ack: int) -> list[Message]:
        """
        Messages for ``recipient`` past the ``last_ack`` watermark.

        Text messages qualify when ``seq > last_ack``. File chunk
        notifications qualify when appended after the last text message the
        watermark already covers.
        """
        snapshot = self.entries(recipient)
        start = 0
        for index, message in enumerate(snapshot):
            if isinstance(message, TextMessage) and message.seq <= last_ack:
                start = index + 1

        result: list[Message] = []
        for index, message in enumerate(snapshot):
            if isinstance(message, FileChunkMessage):
                if index >= start:
                    result.append(message)
            elif message.seq > last_ack:
                result.append(message)
        return result

    def __len__(self) -> int:
        return sum(len(log.entries) for log in list(self._logs.values()))


__all__ = ["DeliveryLog"]
