"""Session manager for the CloudDrive channel."""
from typing import Callable, Optional

from ..async_auth import AsyncAuthService
from ..async_client import AsyncAPIClient
from ..config import APIConfig
from ...exceptions import CloudDriveAuthError, CloudDriveNotConnectedError
from ...logging import get_logger
from ...session.models import AuthorizedContext


class Session:
    """
    Owns the authenticated channel to the CloudDrive server.

    Credentials are exchanged once; afterwards the session exposes the
    connected API client and an immutable AuthorizedContext. The channel
    is released by close(), on every exit path when used as an async
    context manager.

    Example:
        >>> async with Session() as session:
        ...     context = await session.authenticate("127.0.0.1:19798", "user", "pass")
        ...     lister = DirectoryLister(session.api, context)
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        client_factory: Callable[[str, APIConfig], AsyncAPIClient] = AsyncAPIClient
    ):
        """
        Initialize session.

        Args:
            config: API configuration
            client_factory: Builds the API client for an address
        """
        self._config = config or APIConfig.default()
        self._client_factory = client_factory
        self._client: Optional[AsyncAPIClient] = None
        self._context: Optional[AuthorizedContext] = None
        self._logger = get_logger('clouddrivepy.session')

    @property
    def config(self) -> APIConfig:
        return self._config

    @property
    def is_authenticated(self) -> bool:
        return self._context is not None

    @property
    def api(self) -> AsyncAPIClient:
        """Connected API client."""
        if self._client is None or self._context is None:
            raise CloudDriveNotConnectedError("Session is not authenticated")
        return self._client

    @property
    def context(self) -> AuthorizedContext:
        """Authorization context for remote calls."""
        if self._context is None:
            raise CloudDriveNotConnectedError("Session is not authenticated")
        return self._context

    async def authenticate(self, address: str, username: str, password: str) -> AuthorizedContext:
        """
        Open the channel and exchange credentials for a token.

        Args:
            address: Server address (host:port or http(s)://host:port)
            username: Account user name
            password: Account password

        Returns:
            AuthorizedContext to attach to every subsequent call

        Raises:
            CloudDriveAuthError: On bad address, rejection, unreachable
                server or timeout. The channel is closed before raising.
        """
        if self._context is not None:
            raise CloudDriveAuthError("Session is already authenticated")

        try:
            client = self._client_factory(address, self._config)
        except ValueError as e:
            raise CloudDriveAuthError(f"Invalid server address: {e}") from e

        try:
            await client.connect()
            context = await AsyncAuthService(client).login(username, password)
        except BaseException:
            await client.close()
            raise

        self._client = client
        self._context = context
        self._logger.debug(f"Session established with {client.address}")
        return context

    async def close(self) -> None:
        """Release the channel (idempotent)."""
        client, self._client = self._client, None
        self._context = None
        if client is not None:
            await client.close()
            self._logger.debug("Session closed")

    async def __aenter__(self) -> 'Session':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
