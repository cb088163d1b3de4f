"""Upload services module."""
from .file_service import FileValidator, AsyncFileReader
from .handle_service import RemoteFileHandle
from .chunk_service import ChunkWriter

__all__ = [
    'FileValidator',
    'AsyncFileReader',
    'RemoteFileHandle',
    'ChunkWriter',
]
