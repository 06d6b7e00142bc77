from .base import Base
from .file_chunk import FileChunk
from .message import StoredMessage
from .user import UserActivity

__all__ = [
    "Base",
    "FileChunk",
    "StoredMessage",
    "UserActivity",
]
