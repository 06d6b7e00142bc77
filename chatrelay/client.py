"""
Sender/receiver client for the relay.

Text goes out with Go-Back-N: up to ``window_size`` sequence numbers past the
last cumulative ACK are in flight, and any round that leaves a gap restarts
from the first unacknowledged sequence number. Files are split into base64
chunks on the unordered chunk path.
"""

from __future__ import annotations

import base64
import time
from typing import Sequence

import httpx

from chatrelay.logging_config import logger
from chatrelay.schemas import ReceiveResponse

DEFAULT_CHUNK_SIZE = 64 * 1024


class DeliveryFailed(RuntimeError):
    """Raised when a sequence number is still unacknowledged after all retries."""

    def __init__(self, seq: int, ack: int):
        self.seq = seq
        self.ack = ack
        super().__init__(f"seq {seq} not acknowledged (last ack {ack})")


class RelayClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        http: httpx.Client | None = None,
        window_size: int = 5,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        timeout: float = 3.0,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.window_size = max(1, window_size)
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "RelayClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _send_one(self, sender: str, recipient: str, seq: int, text: str) -> int | None:
        """POST one text message; None means the submission was lost."""
        resp = self._http.post(
            "/send-message",
            json={"sender": sender, "receiver": recipient, "seq": seq, "message": text, "type": "text"},
        )
        resp.raise_for_status()
        if not resp.content:
            return None
        return int(resp.json()["ack"])

    def send_texts(
        self,
        sender: str,
        recipient: str,
        texts: Sequence[str],
        *,
        start_seq: int = 0,
    ) -> int:
        """
        Deliver ``texts`` as sequence numbers ``start_seq``, ``start_seq + 1``, ...

        Returns the final cumulative ACK. Raises DeliveryFailed after
        ``max_retries`` consecutive rounds without progress (lost requests,
        or a full recipient window that is not being drained).
        """
        end = start_seq + len(texts)
        base = start_seq
        last_ack = start_seq - 1
        stalled_rounds = 0

        while base < end:
            round_start = base
            next_seq = base
            while next_seq < min(base + self.window_size, end):
                ack = self._send_one(sender, recipient, next_seq, texts[next_seq - start_seq])
                if ack is not None:
                    last_ack = ack
                    if ack >= base:
                        base = ack + 1
                if ack is None or ack < next_seq:
                    # Everything after a gap would be refused as out of order.
                    break
                next_seq += 1

            if base > round_start:
                stalled_rounds = 0
                continue

            stalled_rounds += 1
            if stalled_rounds > self.max_retries:
                raise DeliveryFailed(base, last_ack)
            logger.debug(
                "No progress for %s at seq=%d (ack=%d), retransmitting window (retry %d)",
                recipient,
                base,
                last_ack,
                stalled_rounds,
            )
            if self.retry_delay > 0:
                time.sleep(self.retry_delay)

        return last_ack

    def poll(self, user: str, last_ack: int = -1) -> ReceiveResponse:
        resp = self._http.get("/receive", params={"user": user, "lastAck": last_ack})
        resp.raise_for_status()
        return ReceiveResponse.model_validate(resp.json())

    def upload_file(
        self,
        sender: str,
        recipient: str,
        file_name: str,
        data: bytes,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        start_seq: int = 0,
    ) -> int:
        """Upload ``data`` in base64 chunks; returns the number of chunks sent."""
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        total_chunks = -(-len(data) // chunk_size)
        for index in range(total_chunks):
            piece = data[index * chunk_size : (index + 1) * chunk_size]
            resp = self._http.post(
                "/upload-chunk",
                json={
                    "sender": sender,
                    "receiver": recipient,
                    "fileName": file_name,
                    "chunkIndex": index,
                    "totalChunks": total_chunks,
                    "chunkData": base64.b64encode(piece).decode("ascii"),
                    "seq": start_seq + index,
                },
            )
            resp.raise_for_status()
        return total_chunks

    def download_file(self, file_name: str, recipient: str) -> bytes:
        resp = self._http.get(
            "/download-file", params={"fileName": file_name, "receiver": recipient}
        )
        resp.raise_for_status()
        return b"".join(base64.b64decode(chunk) for chunk in resp.json().get("chunks", []))

    def active_users(self) -> list[str]:
        resp = self._http.get("/users")
        resp.raise_for_status()
        return list(resp.json())


__all__ = ["DEFAULT_CHUNK_SIZE", "DeliveryFailed", "RelayClient"]
