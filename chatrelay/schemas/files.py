from pydantic import Field, model_validator

from .common import CamelModel, FileName, Identity


class UploadChunkRequest(CamelModel):
    sender: Identity
    receiver: Identity
    file_name: FileName = Field(..., alias="fileName")
    chunk_index: int = Field(..., alias="chunkIndex", ge=0)
    total_chunks: int = Field(..., alias="totalChunks", ge=1)
    chunk_data: str = Field(..., alias="chunkData", description="Base64 encoded chunk bytes")
    seq: int = Field(..., ge=0, description="Echoed back as the chunk ACK")

    @model_validator(mode="after")
    def _index_within_total(self) -> "UploadChunkRequest":
        if self.chunk_index >= self.total_chunks:
            raise ValueError("chunkIndex must be smaller than totalChunks")
        return self


class ChunkAckResponse(CamelModel):
    ack: int
    status: str


class DownloadFileResponse(CamelModel):
    file_name: str = Field(..., alias="fileName")
    chunks: list[str] = Field(default_factory=list, description="Chunk payloads by ascending index")


__all__ = ["ChunkAckResponse", "DownloadFileResponse", "UploadChunkRequest"]
