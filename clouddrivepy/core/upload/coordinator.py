"""
Upload coordinator.

Orchestrates the upload process using injected dependencies.
Follows Dependency Inversion Principle - depends on abstractions, not concretions.
"""
import logging
from typing import Callable, List, Optional

from .protocols import ChunkingStrategy, FileReaderProtocol
from .models import UploadConfig, UploadResult, UploadProgress, UploadState
from .strategies import FixedSizeChunkingStrategy
from .services import FileValidator, AsyncFileReader, RemoteFileHandle, ChunkWriter
from ..exceptions import CloudDriveUploadError
from ..session.models import AuthorizedContext

logger = logging.getLogger('clouddrivepy.upload.coordinator')

ProgressCallback = Callable[[UploadProgress], None]


class ChunkedUploadSession:
    """
    One transfer of a local file into a remote file.

    The remote file is created first, then the local source is opened and
    streamed chunk by chunk. The remote handle is closed exactly once
    whenever it was created, whether streaming succeeded or not.

    Attributes:
        state: Current lifecycle state
        history: Every state the session has been in, in order
    """

    def __init__(
        self,
        api,
        context: AuthorizedContext,
        config: UploadConfig,
        file_size: int,
        chunking_strategy: ChunkingStrategy,
        file_reader: FileReaderProtocol,
        progress_callback: Optional[ProgressCallback] = None
    ):
        self._api = api
        self._context = context
        self._config = config
        self._file_size = file_size
        self._chunking = chunking_strategy
        self._reader = file_reader
        self._writer = ChunkWriter(api, context)
        self._progress_callback = progress_callback
        self.state = UploadState.CREATED
        self.history: List[UploadState] = [UploadState.CREATED]

    def _transition(self, state: UploadState) -> None:
        logger.debug(f"Upload of {self._config.file_name}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    async def run(self) -> UploadResult:
        """
        Execute the transfer.

        Returns:
            Upload result

        Raises:
            CloudDriveRequestError: If a remote call fails
            CloudDriveUploadError: If the server acknowledged fewer bytes than were read
            OSError: If the local source cannot be opened or read
        """
        handle = RemoteFileHandle(
            self._api, self._context, self._config.dest_folder, self._config.file_name
        )
        try:
            async with handle:
                self._transition(UploadState.OPEN)
                try:
                    result = await self._stream(handle)
                finally:
                    self._transition(UploadState.CLOSING)
                    await self._reader.close_file()
        finally:
            self._transition(UploadState.CLOSED)

        logger.info(f"Upload closed: {result.remote_path} ({result.bytes_written} bytes)")
        return result

    async def _stream(self, handle: RemoteFileHandle) -> UploadResult:
        await self._reader.open_file(self._config.file_path)
        self._transition(UploadState.STREAMING)

        chunk_size = self._chunking.chunk_size
        progress = UploadProgress(
            total_bytes=self._file_size,
            total_chunks=len(self._chunking.calculate_chunks(self._file_size))
        )
        bytes_read = 0
        chunk_index = 0

        while True:
            data = await self._reader.read_chunk(chunk_size)
            if not data:
                break
            bytes_read += len(data)

            written = await self._writer.write(handle, chunk_index, data)
            chunk_index += 1

            progress.uploaded_bytes += written
            progress.uploaded_chunks = chunk_index
            if self._progress_callback:
                self._progress_callback(progress)

        if handle.offset != bytes_read:
            raise CloudDriveUploadError(
                f"Upload of {handle.file_path} incomplete: "
                f"{handle.offset} of {bytes_read} bytes written",
                file_path=handle.file_path,
                bytes_read=bytes_read,
                bytes_written=handle.offset,
            )

        return UploadResult(
            remote_path=handle.file_path,
            file_handle=handle.file_handle,
            file_size=bytes_read,
            bytes_written=handle.offset,
            chunks=chunk_index,
        )


class UploadCoordinator:
    """
    Coordinates the file upload process.

    Uses dependency injection for all components, making it:
    - Testable (mock dependencies)
    - Extensible (swap strategies)
    """

    def __init__(
        self,
        api,
        context: AuthorizedContext,
        chunking_strategy: Optional[ChunkingStrategy] = None,
        file_reader_factory: Callable[[], FileReaderProtocol] = AsyncFileReader,
        progress_callback: Optional[ProgressCallback] = None
    ):
        """
        Initialize upload coordinator.

        Args:
            api: Connected API client
            context: Authorization context
            chunking_strategy: Strategy for chunking files
            file_reader_factory: Creates a fresh reader per upload
            progress_callback: Optional callback for progress updates
        """
        self._api = api
        self._context = context
        self._chunking = chunking_strategy or FixedSizeChunkingStrategy()
        self._file_reader_factory = file_reader_factory
        self._validator = FileValidator()
        self._progress_callback = progress_callback

    async def upload(
        self,
        config: UploadConfig,
        progress_callback: Optional[ProgressCallback] = None
    ) -> UploadResult:
        """
        Execute the complete upload process.

        The local source is validated before anything is created remotely,
        so a missing file costs no remote calls.

        Args:
            config: Upload configuration
            progress_callback: Overrides the coordinator's callback for this upload

        Returns:
            Upload result

        Raises:
            FileNotFoundError: If file doesn't exist
            IsADirectoryError: If path is a directory
            CloudDriveRequestError: If a remote call fails
        """
        path, file_size = self._validator.validate(config.file_path)
        file_size_mb = file_size / (1024 * 1024)
        logger.info(
            f"Starting upload: {path.name} ({file_size_mb:.2f} MB) "
            f"-> {config.dest_folder.rstrip('/')}/{config.file_name}"
        )

        session = ChunkedUploadSession(
            self._api,
            self._context,
            config,
            file_size,
            self._chunking,
            self._file_reader_factory(),
            progress_callback or self._progress_callback,
        )
        return await session.run()
