"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
"""
from pathlib import Path
from typing import List, Protocol, Tuple


class ChunkingStrategy(Protocol):
    """
    Protocol for file chunking strategies.
    """

    chunk_size: int

    def calculate_chunks(self, file_size: int) -> List[Tuple[int, int]]:
        """
        Calculate chunk boundaries for a file.

        Args:
            file_size: Total file size in bytes

        Returns:
            List of (start, end) tuples representing chunk boundaries
        """
        ...


class FileReaderProtocol(Protocol):
    """Protocol for sequential file reading."""

    async def open_file(self, file_path: Path) -> None:
        """Open the local source."""
        ...

    async def read_chunk(self, size: int) -> bytes:
        """Read up to ``size`` bytes; empty bytes at end of file."""
        ...

    async def close_file(self) -> None:
        """Close the local source."""
        ...
