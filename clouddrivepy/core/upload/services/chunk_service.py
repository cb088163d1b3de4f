"""
Chunk write service.

Writes individual chunks to an open remote file handle.
"""
import logging
import time

from .handle_service import RemoteFileHandle
from ...api.protocol import WriteFileRequest
from ...exceptions import CloudDriveUploadError
from ...session.models import AuthorizedContext


class ChunkWriter:
    """
    Writes chunks sequentially at the handle's current offset.

    The handle's offset advances by the byte count the server
    acknowledges. A short write is fatal: there is no retry or resume.
    """

    def __init__(self, api, context: AuthorizedContext):
        """
        Args:
            api: Connected API client
            context: Authorization context
        """
        self._api = api
        self._context = context
        self._logger = logging.getLogger('clouddrivepy.upload.chunk')

    async def write(self, handle: RemoteFileHandle, chunk_index: int, data: bytes) -> int:
        """
        Write one chunk.

        Args:
            handle: Open remote handle
            chunk_index: Index of the chunk (for logging)
            data: Chunk bytes

        Returns:
            Bytes written

        Raises:
            ValueError: If chunk is empty
            CloudDriveRequestError: If the write call fails
            CloudDriveUploadError: If the server acknowledges fewer bytes
        """
        if not data:
            raise ValueError(f"Cannot write empty chunk {chunk_index}")

        start_position = handle.offset
        request = WriteFileRequest(
            fileHandle=handle.file_handle,
            startPos=start_position,
            length=len(data),
            buffer=data,
            closeFile=False,
        )

        write_start = time.time()
        reply = await self._api.unary('WriteToFile', request, context=self._context)
        # Servers that leave bytesWritten unset acknowledge the whole chunk
        written = reply.bytesWritten or len(data)

        if written != len(data):
            raise CloudDriveUploadError(
                f"Short write on chunk {chunk_index} of {handle.file_path}: "
                f"{written} of {len(data)} bytes at offset {start_position}",
                file_path=handle.file_path,
                bytes_read=start_position + len(data),
                bytes_written=start_position + written,
            )

        handle.advance(written)
        elapsed = time.time() - write_start
        self._logger.debug(
            f"Chunk {chunk_index} written at position {start_position} "
            f"({written} bytes in {elapsed:.3f}s)"
        )
        return written
