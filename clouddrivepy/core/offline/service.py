"""
Offline (remote) downloads.

The server fetches URLs (http, magnet, ed2k) straight into a cloud
folder. This module submits such tasks and pages through their status.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Iterable, List, Optional, Union
import logging

from ..api.protocol import AddOfflineFileRequest, OfflineFileListAllRequest
from ..exceptions import CloudDriveRequestError
from ..session.models import AuthorizedContext

# Folder the server-side downloads land in unless told otherwise
DEFAULT_OFFLINE_FOLDER = '/离线下载'


class OfflineFileStatus(IntEnum):
    """Task status as reported by the server."""
    INIT = 0
    DOWNLOADING = 1
    FINISHED = 2
    ERROR = 3
    UNKNOWN = 4

    @classmethod
    def parse(cls, value: int) -> 'OfflineFileStatus':
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class OfflineFile:
    """
    One offline download task.

    Attributes:
        name: Name of the file being fetched
        size: Size in bytes (0 while unknown)
        url: Source URL
        status: Task status
        info_hash: Torrent info hash, if any
        file_id: Cloud-side identifier of the result
        add_time: Submission time as a Unix timestamp
        parent_id: Cloud-side identifier of the target folder
        percent_done: Progress between 0 and 100
        peers: Connected peers for torrent tasks
    """
    name: str
    size: int = 0
    url: str = ''
    status: OfflineFileStatus = OfflineFileStatus.UNKNOWN
    info_hash: str = ''
    file_id: str = ''
    add_time: int = 0
    parent_id: str = ''
    percent_done: float = 0.0
    peers: int = 0

    @classmethod
    def from_proto(cls, message: Any) -> 'OfflineFile':
        return cls(
            name=message.name,
            size=message.size,
            url=message.url,
            status=OfflineFileStatus.parse(message.status),
            info_hash=message.infoHash,
            file_id=message.fileId,
            add_time=message.add_time,
            parent_id=message.parentId,
            percent_done=message.percendDone,
            peers=message.peers,
        )

    @property
    def added_at(self) -> Optional[datetime]:
        if not self.add_time:
            return None
        return datetime.fromtimestamp(self.add_time, tz=timezone.utc)

    @property
    def is_finished(self) -> bool:
        return self.status == OfflineFileStatus.FINISHED


@dataclass
class OfflineFilePage:
    """One page of the offline task list."""
    page_no: int
    page_row_count: int
    page_count: int
    total_count: int
    files: List[OfflineFile] = field(default_factory=list)

    @classmethod
    def from_proto(cls, message: Any) -> 'OfflineFilePage':
        return cls(
            page_no=message.pageNo,
            page_row_count=message.pageRowCount,
            page_count=message.pageCount,
            total_count=message.totalCount,
            files=[OfflineFile.from_proto(item) for item in message.offlineFiles],
        )

    @property
    def has_next(self) -> bool:
        return self.page_no + 1 < self.page_count


class OfflineDownloadManager:
    """
    Submits and lists offline download tasks.

    Example:
        >>> manager = OfflineDownloadManager(api, context)
        >>> paths = await manager.submit(["magnet:?xt=urn:btih:..."])
    """

    def __init__(self, api, context: AuthorizedContext, default_folder: str = DEFAULT_OFFLINE_FOLDER):
        """
        Args:
            api: Connected API client
            context: Authorization context
            default_folder: Target folder used when none is given
        """
        self._api = api
        self._context = context
        self._default_folder = default_folder
        self._logger = logging.getLogger('clouddrivepy.offline')

    async def submit(
        self,
        urls: Union[str, Iterable[str]],
        target_folder: Optional[str] = None
    ) -> List[str]:
        """
        Ask the server to fetch one or more URLs.

        Args:
            urls: A URL or several URLs
            target_folder: Remote folder for the results (default folder if omitted)

        Returns:
            Paths the server reports for the created tasks

        Raises:
            ValueError: If no URL is given
            CloudDriveRequestError: If the server refuses the request
        """
        if isinstance(urls, str):
            urls = [urls]
        url_list = [url.strip() for url in urls if url and url.strip()]
        if not url_list:
            raise ValueError("At least one URL is required")

        folder = target_folder or self._default_folder
        request = AddOfflineFileRequest(urls='\n'.join(url_list), toFolder=folder)
        reply = await self._api.unary('AddOfflineFiles', request, context=self._context)

        if not reply.success:
            raise CloudDriveRequestError(
                f"Adding offline files to {folder} failed: {reply.errorMessage or 'unknown error'}"
            )

        self._logger.info(f"Submitted {len(url_list)} offline download(s) to {folder}")
        return list(reply.resultFilePaths)

    async def list_page(self, cloud_name: str, account_id: str, page: int = 0) -> OfflineFilePage:
        """
        Fetch one page of the offline task list of a cloud account.

        Args:
            cloud_name: Backend name
            account_id: Account identity on that backend
            page: Zero-based page number

        Raises:
            CloudDriveRequestError: If the call fails
        """
        if page < 0:
            raise ValueError("Page number cannot be negative")

        request = OfflineFileListAllRequest(
            cloudName=cloud_name,
            cloudAccountId=account_id,
            page=page,
        )
        reply = await self._api.unary('ListAllOfflineFiles', request, context=self._context)
        result = OfflineFilePage.from_proto(reply)
        self._logger.debug(
            f"Offline page {result.page_no + 1}/{result.page_count} for {cloud_name}: "
            f"{len(result.files)} task(s)"
        )
        return result
