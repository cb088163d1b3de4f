"""
CloudDriveClient - High-level async client for a CloudDrive server.

Example:
    >>> async with CloudDriveClient("127.0.0.1:19798", "user", "pass") as drive:
    ...     for entry in await drive.list_directory("/"):
    ...         print(entry)
"""
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .core.api import APIConfig, AsyncAPIClient, Session
from .core.api.events import EventEmitter
from .core.exceptions import CloudDriveNotConnectedError, CloudDriveRequestError
from .core.logging import get_logger
from .core.offline import DEFAULT_OFFLINE_FOLDER, OfflineDownloadManager, OfflineFilePage
from .core.session import AuthorizedContext
from .core.storage import (
    CloudBackend,
    CloudService,
    DirectoryEntry,
    DirectoryLister,
    RefreshReport,
    RefreshWalker,
)
from .core.upload import UploadConfig, UploadCoordinator, UploadProgress, UploadResult

DEFAULT_UPLOAD_FOLDER = '/上传文件夹'


class CloudDriveClient:
    """
    High-level async client for CloudDrive.

    Authenticates on entry and closes the channel on exit. Every service
    receives the same connected API client and AuthorizedContext.

    Basic usage:
        >>> async with CloudDriveClient("http://nas:19798", "user", "pass") as drive:
        ...     report = await drive.refresh_tree("/", exclusions=["/movies"])
        ...     print(report.summary())

    With custom configuration:
        >>> config = APIConfig.secure(ca_file="ca.pem")
        >>> drive = CloudDriveClient("nas:19798", "user", "pass", config=config)
        >>> await drive.connect()
    """

    def __init__(
        self,
        address: str,
        username: str,
        password: str,
        *,
        config: Optional[APIConfig] = None,
        offline_folder: str = DEFAULT_OFFLINE_FOLDER,
        upload_folder: str = DEFAULT_UPLOAD_FOLDER
    ):
        """
        Initialize CloudDrive client.

        Args:
            address: Server address (host:port or http(s)://host:port)
            username: Account user name
            password: Account password
            config: Optional API configuration
            offline_folder: Default target folder for offline downloads
            upload_folder: Default destination folder for uploads
        """
        self._address = address
        self._username = username
        self._password = password
        self._config = config or APIConfig.default()
        self._offline_folder = offline_folder
        self._upload_folder = upload_folder
        self._logger = get_logger('clouddrivepy.client')

        self._session: Optional[Session] = None
        self._events = EventEmitter('clouddrivepy.client.events')

        # Services (bound on connect)
        self._lister: Optional[DirectoryLister] = None
        self._clouds: Optional[CloudService] = None
        self._walker: Optional[RefreshWalker] = None
        self._uploader: Optional[UploadCoordinator] = None
        self._offline: Optional[OfflineDownloadManager] = None

    # =========================================================================
    # Connection
    # =========================================================================

    @property
    def address(self) -> str:
        return self._address

    @property
    def upload_folder(self) -> str:
        return self._upload_folder

    @property
    def offline_folder(self) -> str:
        return self._offline_folder

    @property
    def is_connected(self) -> bool:
        return self._session is not None and self._session.is_authenticated

    @property
    def context(self) -> AuthorizedContext:
        """Authorization context of the current session."""
        self._ensure_connected()
        return self._session.context

    async def connect(self) -> AuthorizedContext:
        """
        Connect and authenticate.

        Raises:
            CloudDriveAuthError: If the server is unreachable, rejects the
                credentials or does not answer within the login timeout
        """
        if self.is_connected:
            return self._session.context

        session = Session(self._config, client_factory=AsyncAPIClient)
        context = await session.authenticate(self._address, self._username, self._password)
        self._session = session
        self._bind_services(session.api, context)
        self._logger.info(f"Connected to {session.api.address} as {self._username}")
        return context

    def _bind_services(self, api, context: AuthorizedContext) -> None:
        self._lister = DirectoryLister(api, context)
        self._clouds = CloudService(api, context)
        self._walker = RefreshWalker(self._lister, self._clouds, self._events)
        self._uploader = UploadCoordinator(api, context)
        self._offline = OfflineDownloadManager(api, context, self._offline_folder)

    async def close(self) -> None:
        """Close the client and release the channel."""
        session, self._session = self._session, None
        self._lister = self._clouds = self._walker = None
        self._uploader = self._offline = None
        if session is not None:
            await session.close()

    async def __aenter__(self) -> 'CloudDriveClient':
        """Enter async context - connects and logs in."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context - cleanup."""
        await self.close()

    def _ensure_connected(self):
        """Ensure the client is authenticated."""
        if not self.is_connected:
            raise CloudDriveNotConnectedError(
                "Not connected. Call connect() or use 'async with' first."
            )

    def on(self, event: str, callback) -> 'CloudDriveClient':
        """
        Register a handler for refresh events.

        Events: directory_refreshed, directory_skipped, directory_failed,
        cloud_started, cloud_finished.
        """
        self._events.on(event, callback)
        return self

    # =========================================================================
    # Namespace
    # =========================================================================

    async def list_clouds(self) -> List[CloudBackend]:
        """Enumerate the cloud backends aggregated by the server."""
        self._ensure_connected()
        return await self._clouds.list_clouds()

    async def list_directory(self, path: str = '/', force_refresh: bool = False) -> List[DirectoryEntry]:
        """
        List the immediate children of a remote directory.

        Args:
            path: Remote directory path
            force_refresh: Ask the server to bypass its cache

        Returns:
            Entries in server order
        """
        self._ensure_connected()
        return await self._lister.list(path, force_refresh=force_refresh)

    async def find_file(self, path: str) -> DirectoryEntry:
        """Look up a single remote entry by its full path."""
        self._ensure_connected()
        return await self._clouds.find_file(path)

    # =========================================================================
    # Backend accounts
    # =========================================================================

    async def login_115_with_cookie(self, cookie: str) -> None:
        """Add a 115 account from an EditThisCookie cookie export."""
        self._ensure_connected()
        await self._clouds.login_115_with_cookie(cookie)

    async def get_115_qrcode(self, platform: Optional[str] = None) -> str:
        """
        Start a 115 QR code login.

        Returns:
            The QR code content to show to the user
        """
        self._ensure_connected()
        return await self._clouds.get_115_qrcode(platform)

    # =========================================================================
    # Refresh
    # =========================================================================

    async def refresh_tree(self, root_path: str = '/', exclusions: Iterable[str] = ()) -> RefreshReport:
        """Force-refresh a whole subtree, skipping excluded paths."""
        self._ensure_connected()
        return await self._walker.refresh_tree(root_path, exclusions)

    async def refresh_all(self, exclusions: Iterable[str] = ()) -> List[Tuple[CloudBackend, RefreshReport]]:
        """Force-refresh the namespace once per configured backend."""
        self._ensure_connected()
        return await self._walker.refresh_all(exclusions)

    async def refresh_directory(self, path: str) -> int:
        """Force-refresh one directory without descending; returns its child count."""
        self._ensure_connected()
        return await self._walker.refresh_one(path)

    async def refresh_directories(
        self,
        paths: Sequence[str]
    ) -> Dict[str, Union[int, CloudDriveRequestError]]:
        """Force-refresh several directories, continuing past failures."""
        self._ensure_connected()
        return await self._walker.refresh_many(paths)

    # =========================================================================
    # Upload
    # =========================================================================

    async def upload(
        self,
        file_path: Union[str, Path],
        name: Optional[str] = None,
        dest: Optional[str] = None,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None
    ) -> UploadResult:
        """
        Upload a local file.

        Args:
            file_path: Local file path
            name: Remote file name (defaults to the local base name)
            dest: Remote folder (defaults to the upload folder)
            progress_callback: Optional callback for progress updates

        Returns:
            Upload result

        Example:
            >>> result = await drive.upload("report.pdf", dest="/docs")
            >>> print(result.remote_path)
        """
        self._ensure_connected()
        config = UploadConfig(
            file_path=Path(file_path),
            dest_folder=dest or self._upload_folder,
            file_name=name,
        )
        return await self._uploader.upload(config, progress_callback)

    # =========================================================================
    # Offline downloads
    # =========================================================================

    async def add_offline_files(
        self,
        urls: Union[str, Iterable[str]],
        target_folder: Optional[str] = None
    ) -> List[str]:
        """Submit URLs for the server to download into a cloud folder."""
        self._ensure_connected()
        return await self._offline.submit(urls, target_folder)

    async def list_offline_files(self, cloud_name: str, account_id: str, page: int = 0) -> OfflineFilePage:
        """Fetch one page of offline download tasks for a cloud account."""
        self._ensure_connected()
        return await self._offline.list_page(cloud_name, account_id, page)
