"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import Optional, Tuple, Union
import logging

import aiofiles


class FileValidator:
    """
    Validates files before upload.

    Responsibilities:
    - Check file existence
    - Verify file is not a directory
    - Get file size
    """

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.

        Empty files are valid: they produce a remote file with no writes.

        Args:
            file_path: Path to the file

        Returns:
            Tuple of (validated Path, file size in bytes)

        Raises:
            FileNotFoundError: If file doesn't exist
            IsADirectoryError: If path is a directory
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        if path.is_dir():
            raise IsADirectoryError(f"Path is a directory: {path}")

        file_size = path.stat().st_size

        return path, file_size


class AsyncFileReader:
    """
    Asynchronous sequential file reader.

    Uses aiofiles for non-blocking I/O. One handle is opened per upload
    and every read continues where the previous one stopped. Read errors
    propagate unchanged.
    """

    def __init__(self):
        """Initialize file reader."""
        self._logger = logging.getLogger('clouddrivepy.upload.file')
        self._file_handle = None
        self._current_file_path: Optional[Path] = None
        self._position = 0

    @property
    def position(self) -> int:
        """Bytes consumed so far."""
        return self._position

    @property
    def is_open(self) -> bool:
        return self._file_handle is not None

    async def open_file(self, file_path: Path) -> None:
        """
        Open file for reading. Call this before reading chunks.

        Raises:
            OSError: If the file cannot be opened
        """
        if self._file_handle is not None:
            await self.close_file()

        self._file_handle = await aiofiles.open(file_path, 'rb')
        self._current_file_path = file_path
        self._position = 0
        self._logger.debug(f"Opened {file_path} for reading")

    async def close_file(self) -> None:
        """Close the currently open file."""
        if self._file_handle is not None:
            handle, self._file_handle = self._file_handle, None
            self._current_file_path = None
            await handle.close()

    async def read_chunk(self, size: int) -> bytes:
        """
        Read the next chunk.

        Args:
            size: Maximum number of bytes to read

        Returns:
            Up to ``size`` bytes; empty bytes at end of file

        Raises:
            ValueError: If no file is open
            OSError: If reading fails
        """
        if self._file_handle is None:
            raise ValueError("No file is open")

        data = await self._file_handle.read(size)
        if data:
            self._logger.debug(f"Read chunk: {self._position}-{self._position + len(data)} ({len(data)} bytes)")
            self._position += len(data)
        return data

    async def __aenter__(self) -> 'AsyncFileReader':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close_file()
