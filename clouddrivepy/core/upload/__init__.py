"""
Upload module for CloudDrive file uploads.

Streams a local file into a remote file through a server-side handle
in fixed-size chunks. The chunking strategy and file reader are pluggable.
"""
from .coordinator import UploadCoordinator, ChunkedUploadSession
from .models import UploadState, UploadResult, UploadConfig, UploadProgress
from .protocols import ChunkingStrategy, FileReaderProtocol

__all__ = [
    # Main classes
    'UploadCoordinator',
    'ChunkedUploadSession',

    # Models
    'UploadState',
    'UploadResult',
    'UploadConfig',
    'UploadProgress',

    # Protocols
    'ChunkingStrategy',
    'FileReaderProtocol',
]
