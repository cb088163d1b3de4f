"""Cloud backend enumeration, path lookup and backend account login."""
import posixpath
from enum import IntEnum
from typing import List, Optional

from ..models import CloudBackend, DirectoryEntry
from ...api.protocol import (
    Empty,
    FindFileByPathRequest,
    Login115EditthiscookieRequest,
    Login115QrCodeRequest,
)
from ...exceptions import CloudDriveRequestError
from ...logging import get_logger
from ...session.models import AuthorizedContext


class QRCodeScanType(IntEnum):
    """Kind of message on a QR code login stream."""
    SHOW_IMAGE = 0
    SHOW_IMAGE_CONTENT = 1
    CHANGE_STATUS = 2
    CLOSE = 3
    ERROR = 4


class CloudService:
    """Queries about the aggregated namespace that are not listings."""

    def __init__(self, api, context: AuthorizedContext):
        self._api = api
        self._context = context
        self._logger = get_logger('clouddrivepy.storage.clouds')

    async def list_clouds(self) -> List[CloudBackend]:
        """
        Enumerate the configured cloud backends.

        Raises:
            CloudDriveRequestError: If the call fails
        """
        reply = await self._api.unary('GetAllCloudApis', Empty(), context=self._context)
        return [CloudBackend.from_proto(api) for api in reply.apis]

    async def find_file(self, path: str) -> DirectoryEntry:
        """
        Look up a single entry by its full path.

        Raises:
            CloudDriveRequestError: If the entry does not exist or the call fails
        """
        normalized = posixpath.normpath('/' + path.strip('/'))
        request = FindFileByPathRequest(
            parentPath=posixpath.dirname(normalized),
            path=posixpath.basename(normalized),
        )
        reply = await self._api.unary('FindFileByPath', request, context=self._context)
        return DirectoryEntry.from_proto(reply)

    async def login_115_with_cookie(self, cookie: str) -> None:
        """
        Add a 115 account to the server from an EditThisCookie export.

        Args:
            cookie: Cookie string as exported by the EditThisCookie extension

        Raises:
            ValueError: If the cookie string is blank
            CloudDriveRequestError: If the server rejects the cookie or the call fails
        """
        if not cookie.strip():
            raise ValueError("A cookie string is required")

        request = Login115EditthiscookieRequest(editThiscookieString=cookie)
        reply = await self._api.unary('APILogin115Editthiscookie', request, context=self._context)
        if not reply.success:
            message = reply.errorMessage or "rejected by server"
            raise CloudDriveRequestError(f"115 cookie login failed: {message}")

        self._logger.info("115 account added from cookie")

    async def get_115_qrcode(self, platform: Optional[str] = None) -> str:
        """
        Start a 115 QR code login.

        Only the first message of the scan stream is read; it carries the
        QR code to show. The stream is closed afterwards.

        Args:
            platform: 115 client platform to log in as; server default if None

        Returns:
            Content of the first scan message

        Raises:
            CloudDriveRequestError: If the call fails, the first message is an
                error, or the stream ends without any message
        """
        request = Login115QrCodeRequest()
        if platform is not None:
            request.platformString = platform

        stream = self._api.stream('APILogin115QRCode', request, context=self._context)
        try:
            async for message in stream:
                if message.messageType == QRCodeScanType.ERROR:
                    raise CloudDriveRequestError(f"115 QR code login failed: {message.message}")
                self._logger.debug(f"115 QR code received (message type {message.messageType})")
                return message.message
        finally:
            await stream.aclose()

        raise CloudDriveRequestError("115 QR code login ended without a QR code")
