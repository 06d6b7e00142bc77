from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from chatrelay.deps import get_relay
from chatrelay.schemas import ChunkAckResponse, DownloadFileResponse, UploadChunkRequest
from chatrelay.schemas.common import FileName, Identity
from chatrelay.services import RelayService

router = APIRouter(tags=["files"])


@router.post("/upload-chunk", response_model=ChunkAckResponse)
def upload_chunk(
    payload: UploadChunkRequest,
    relay: RelayService = Depends(get_relay),
) -> ChunkAckResponse:
    receipt = relay.submit_chunk(
        sender=payload.sender,
        recipient=payload.receiver,
        file_name=payload.file_name,
        chunk_index=payload.chunk_index,
        total_chunks=payload.total_chunks,
        chunk_data=payload.chunk_data,
        seq=payload.seq,
    )
    return ChunkAckResponse(ack=receipt.ack, status=receipt.status)


@router.get("/download-file", response_model=DownloadFileResponse)
def download_file(
    file_name: Annotated[FileName, Query(alias="fileName")],
    receiver: Annotated[Identity, Query()],
    relay: RelayService = Depends(get_relay),
) -> DownloadFileResponse:
    """
    Return every stored chunk of a file in chunk order.

    Concatenating the decoded chunks is left to the caller.
    """
    chunks = relay.fetch_file_chunks(file_name, receiver)
    return DownloadFileResponse(file_name=file_name, chunks=chunks)


__all__ = ["router"]
