"""
Data models for upload module.

Uses dataclasses for type-safe data structures.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class UploadState(Enum):
    """
    Lifecycle of one chunked upload.

    CREATED -> OPEN (remote file created) -> STREAMING (local source open)
    -> CLOSING -> CLOSED. A failure in OPEN or STREAMING goes straight to
    CLOSING and then CLOSED.
    """
    CREATED = "created"
    OPEN = "open"
    STREAMING = "streaming"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class UploadConfig:
    """
    Configuration for file upload.

    Attributes:
        file_path: Path to the local file
        dest_folder: Remote folder the file is created in
        file_name: Remote file name (defaults to the local base name)
    """
    file_path: Path
    dest_folder: str
    file_name: Optional[str] = None

    def __post_init__(self):
        """Validate and normalize config."""
        if isinstance(self.file_path, str):
            self.file_path = Path(self.file_path)

        if not self.file_name:
            self.file_name = self.file_path.name

        if not self.dest_folder:
            raise ValueError("Destination folder is required")


@dataclass(frozen=True)
class UploadResult:
    """
    Result of a successful upload.

    Attributes:
        remote_path: Full remote path reported by the server
        file_handle: Server-side handle used for the transfer
        file_size: Bytes read from the local source
        bytes_written: Bytes acknowledged by the server
        chunks: Number of write calls
    """
    remote_path: str
    file_handle: int
    file_size: int
    bytes_written: int
    chunks: int

    @property
    def is_complete(self) -> bool:
        return self.bytes_written == self.file_size


@dataclass
class UploadProgress:
    """
    Upload progress information.

    Attributes:
        total_bytes: Local file size when the upload started
        uploaded_bytes: Bytes acknowledged so far
        total_chunks: Expected number of chunks
        uploaded_chunks: Chunks written so far
    """
    total_bytes: int
    uploaded_bytes: int = 0
    total_chunks: int = 0
    uploaded_chunks: int = 0

    @property
    def percentage(self) -> float:
        """Returns upload progress as percentage."""
        if self.total_bytes == 0:
            return 100.0 if self.uploaded_chunks >= self.total_chunks else 0.0
        return min(100.0, (self.uploaded_bytes / self.total_bytes) * 100)

    @property
    def is_complete(self) -> bool:
        """Returns True if upload is complete."""
        return self.uploaded_bytes >= self.total_bytes

