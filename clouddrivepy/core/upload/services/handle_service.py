"""
Remote file handle service.

Wraps the CreateFile / CloseFile pair so the server-side handle is
released exactly once.
"""
from typing import Optional
import logging

from ...api.protocol import CloseFileRequest, CreateFileRequest
from ...exceptions import CloudDriveRequestError
from ...session.models import AuthorizedContext


class RemoteFileHandle:
    """
    A server-side write session for one file.

    Used as an async context manager: entering creates the remote file,
    leaving closes it. If creation fails nothing is closed. If the body
    raises, a close failure is logged and the original error propagates.

    Example:
        >>> async with RemoteFileHandle(api, context, "/upload", "a.txt") as handle:
        ...     await writer.write(handle, b"data")
    """

    def __init__(self, api, context: AuthorizedContext, parent_path: str, file_name: str):
        self._api = api
        self._context = context
        self._parent_path = parent_path
        self._file_name = file_name
        self._file_handle: Optional[int] = None
        self._file_path: str = ''
        self._offset = 0
        self._closed = False
        self._logger = logging.getLogger('clouddrivepy.upload.handle')

    @property
    def file_handle(self) -> int:
        if self._file_handle is None:
            raise ValueError("Remote file has not been created")
        return self._file_handle

    @property
    def file_path(self) -> str:
        """Remote path reported by the server (or parent/name before that)."""
        if self._file_path:
            return self._file_path
        return f"{self._parent_path.rstrip('/')}/{self._file_name}"

    @property
    def offset(self) -> int:
        """Next write position."""
        return self._offset

    @property
    def is_created(self) -> bool:
        return self._file_handle is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    def advance(self, written: int) -> int:
        """Move the write position forward; returns the new offset."""
        if written < 0:
            raise ValueError("Cannot move the write position backwards")
        self._offset += written
        return self._offset

    async def create(self) -> int:
        """
        Create the remote file.

        Raises:
            CloudDriveRequestError: If the server refuses
        """
        if self._file_handle is not None:
            raise ValueError("Remote file already created")

        request = CreateFileRequest(parentPath=self._parent_path, fileName=self._file_name)
        reply = await self._api.unary('CreateFile', request, context=self._context)

        self._file_handle = reply.fileHandle
        self._file_path = reply.filePath
        self._logger.debug(f"Created remote file {self.file_path} (handle {self._file_handle})")
        return self._file_handle

    async def close(self) -> None:
        """
        Close the remote file. Does nothing if it was never created or is
        already closed.

        Raises:
            CloudDriveRequestError: If the server reports a failure
        """
        if self._file_handle is None or self._closed:
            return

        # Marked first: a failed close is not attempted twice
        self._closed = True
        request = CloseFileRequest(fileHandle=self._file_handle)
        reply = await self._api.unary('CloseFile', request, context=self._context)
        if not reply.success:
            message = reply.errorMessage or "server did not confirm the close"
            raise CloudDriveRequestError(f"Closing {self.file_path} failed: {message}")
        self._logger.debug(f"Closed remote file {self.file_path} at offset {self._offset}")

    async def __aenter__(self) -> 'RemoteFileHandle':
        await self.create()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            await self.close()
            return

        try:
            await self.close()
        except CloudDriveRequestError as e:
            self._logger.warning(f"Failed to close {self.file_path} after error: {e}")
