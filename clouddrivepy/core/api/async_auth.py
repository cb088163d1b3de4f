"""
Async authentication service.

Handles the CloudDrive token exchange.
"""
from datetime import timezone
from typing import Optional

from .async_client import AsyncAPIClient
from .errors import CloudDriveAPIError
from .protocol import GetTokenRequest
from ..exceptions import CloudDriveAuthError
from ..logging import get_logger
from ..session.models import AuthorizedContext


class AsyncAuthService:
    """
    Asynchronous authentication service.

    Exchanges username/password for a bearer token, bounded by the
    configured login timeout.
    """

    def __init__(self, client: AsyncAPIClient):
        """
        Initialize auth service.

        Args:
            client: Connected async API client
        """
        self._client = client
        self._logger = get_logger('clouddrivepy.auth')

    async def login(
        self,
        username: str,
        password: str,
        timeout: Optional[float] = None
    ) -> AuthorizedContext:
        """
        Login to CloudDrive.

        Args:
            username: Account user name
            password: Account password
            timeout: Override for the login timeout (seconds)

        Returns:
            AuthorizedContext carrying the bearer token

        Raises:
            CloudDriveAuthError: If the server rejects the credentials, is
                unreachable, or does not answer before the timeout
        """
        config = self._client.config
        if timeout is None:
            timeout = config.timeout.login

        request = GetTokenRequest(userName=username, password=password)
        self._logger.debug(f"Requesting token for {username} at {self._client.address}")

        try:
            reply = await self._client.unary('GetToken', request, timeout=timeout)
        except CloudDriveAPIError as e:
            raise CloudDriveAuthError(f"Login failed: {e}", e.code) from e

        if not reply.success or not reply.token:
            message = reply.errorMessage or (
                "server returned no token" if reply.success else "server refused the login"
            )
            raise CloudDriveAuthError(f"Login failed: {message}")

        expires_at = None
        if reply.HasField('expiration') and reply.expiration.seconds:
            expires_at = reply.expiration.ToDatetime(tzinfo=timezone.utc)

        self._logger.info(f"Logged in as {username}")

        return AuthorizedContext(
            address=self._client.address,
            username=username,
            token=reply.token,
            expires_at=expires_at,
            extra_metadata=tuple(config.extra_metadata.items()),
        )
