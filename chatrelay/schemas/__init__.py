from .files import ChunkAckResponse, DownloadFileResponse, UploadChunkRequest
from .messages import AckResponse, PolledMessage, ReceiveResponse, SendMessageRequest
from .sessions import HealthResponse, SessionResponse

__all__ = [
    "AckResponse",
    "ChunkAckResponse",
    "DownloadFileResponse",
    "HealthResponse",
    "PolledMessage",
    "ReceiveResponse",
    "SendMessageRequest",
    "SessionResponse",
    "UploadChunkRequest",
]
