"""
Remote directory lister.

Wraps the server-streamed GetSubFiles call into one ordered list.
"""
from typing import List

from .models import DirectoryEntry
from ..api.protocol import ListSubFileRequest
from ..logging import get_logger
from ..session.models import AuthorizedContext


class DirectoryLister:
    """
    Lists the immediate children of one remote directory.

    The server streams the listing in batches; batches are concatenated
    in arrival order and empty batches are skipped. A stream error fails
    the whole call and nothing collected so far is returned. There is no
    retry.
    """

    def __init__(self, api, context: AuthorizedContext):
        """
        Args:
            api: Connected API client (AsyncAPIClient)
            context: Authorization context
        """
        self._api = api
        self._context = context
        self._logger = get_logger('clouddrivepy.storage.lister')

    async def list(
        self,
        path: str,
        force_refresh: bool = False,
        check_expires: bool = True
    ) -> List[DirectoryEntry]:
        """
        List a directory.

        Args:
            path: Remote directory path
            force_refresh: Ask the server to bypass its own cache
            check_expires: Ask the server to validate link/metadata expiry

        Returns:
            Entries in server stream order

        Raises:
            CloudDriveRequestError: If the call fails or the stream aborts
        """
        request = ListSubFileRequest(
            path=path,
            forceRefresh=force_refresh,
            checkExpires=check_expires,
        )

        entries: List[DirectoryEntry] = []
        batches = 0
        async for reply in self._api.stream('GetSubFiles', request, context=self._context):
            batches += 1
            if not reply.subFiles:
                continue
            entries.extend(DirectoryEntry.from_proto(f) for f in reply.subFiles)

        self._logger.debug(f"Listed {path}: {len(entries)} entries in {batches} batches")
        return entries
