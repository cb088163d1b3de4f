"""
Async CloudDrive API client.

Owns the gRPC channel to the CloudDrive server and invokes the service
methods described in ``protocol``.
"""
from typing import Any, AsyncIterator, Dict, Optional, TYPE_CHECKING

import grpc
import grpc.aio

from .config import APIConfig, SSLConfig, is_tls_address, normalize_address
from .errors import CloudDriveAPIError
from .protocol import RpcMethod, get_method
from ..exceptions import CloudDriveNotConnectedError
from ..logging import get_logger

if TYPE_CHECKING:
    from ..session.models import AuthorizedContext


class AsyncAPIClient:
    """
    Asynchronous CloudDrive API client.

    Features:
    - One long-lived grpc.aio channel per client
    - Plaintext or TLS channels
    - Per-call authorization metadata taken from an AuthorizedContext
    - gRPC errors translated to CloudDriveAPIError

    No call is retried: a failed call fails its caller.

    Example:
        >>> async with AsyncAPIClient("127.0.0.1:19798") as client:
        ...     reply = await client.unary('GetToken', request)
    """

    def __init__(self, address: str, config: Optional[APIConfig] = None):
        """
        Initialize async API client.

        Args:
            address: Server address (host:port or http(s)://host:port)
            config: API configuration (uses defaults if not provided)
        """
        self._config = config or APIConfig.default()
        self._raw_address = address
        self._target = normalize_address(address)
        self._channel: Optional[grpc.aio.Channel] = None
        self._callables: Dict[str, Any] = {}
        self._closed = False

        self._logger = get_logger('clouddrivepy.api')

    @property
    def address(self) -> str:
        """Normalized host:port the channel dials."""
        return self._target

    @property
    def config(self) -> APIConfig:
        """Get current configuration."""
        return self._config

    @property
    def is_connected(self) -> bool:
        """True while the channel is open."""
        return self._channel is not None

    async def __aenter__(self) -> 'AsyncAPIClient':
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def connect(self) -> grpc.aio.Channel:
        """Open the channel (idempotent)."""
        if self._closed:
            raise CloudDriveNotConnectedError("Client is closed")

        if self._channel is None:
            options = self._config.get_channel_options()
            credentials = self._create_credentials()
            if credentials is None:
                self._channel = grpc.aio.insecure_channel(self._target, options=options)
            else:
                self._channel = grpc.aio.secure_channel(self._target, credentials, options=options)
            self._logger.debug(f"Opened channel to {self._target} (tls={credentials is not None})")

        return self._channel

    def _create_credentials(self) -> Optional[grpc.ChannelCredentials]:
        ssl_config = self._config.ssl
        if not ssl_config.enabled and is_tls_address(self._raw_address):
            ssl_config = SSLConfig(enabled=True)
        return ssl_config.create_credentials()

    async def close(self):
        """Close client and release the channel."""
        self._closed = True
        self._callables.clear()

        if self._channel is not None:
            channel, self._channel = self._channel, None
            await channel.close()
            self._logger.debug(f"Closed channel to {self._target}")

    def _multicallable(self, method: RpcMethod):
        if self._channel is None:
            raise CloudDriveNotConnectedError(
                f"Cannot call {method.name}: client is not connected"
            )

        rpc = self._callables.get(method.name)
        if rpc is None:
            factory = (
                self._channel.unary_stream if method.server_streaming
                else self._channel.unary_unary
            )
            rpc = factory(
                method.path,
                request_serializer=method.request.SerializeToString,
                response_deserializer=method.response.FromString,
            )
            self._callables[method.name] = rpc
        return rpc

    def _metadata(self, method: RpcMethod, context: Optional['AuthorizedContext']):
        if context is None:
            if method.requires_auth:
                raise CloudDriveNotConnectedError(
                    f"{method.name} requires an authenticated session"
                )
            return None
        return context.metadata

    async def unary(
        self,
        name: str,
        request: Any,
        *,
        context: Optional['AuthorizedContext'] = None,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Invoke a unary RPC.

        Args:
            name: Method name (e.g. 'CreateFile')
            request: Request message
            context: Authorization context (required for all methods but GetToken)
            timeout: Deadline in seconds (defaults to config.timeout.call)

        Returns:
            Response message

        Raises:
            CloudDriveAPIError: If the RPC fails
            CloudDriveNotConnectedError: If no channel or context is available
        """
        method = get_method(name)
        if method.server_streaming:
            raise ValueError(f"{name} is a streaming method, use stream()")

        metadata = self._metadata(method, context)
        rpc = self._multicallable(method)
        if timeout is None:
            timeout = self._config.timeout.call

        self._logger.debug(f"-> {name}")
        try:
            response = await rpc(request, metadata=metadata, timeout=timeout)
        except grpc.RpcError as e:
            error = CloudDriveAPIError.from_rpc_error(e, name)
            self._logger.debug(f"<- {name} failed: {error}")
            raise error from e

        self._logger.debug(f"<- {name}")
        return response

    async def stream(
        self,
        name: str,
        request: Any,
        *,
        context: Optional['AuthorizedContext'] = None,
        timeout: Optional[float] = None
    ) -> AsyncIterator[Any]:
        """
        Invoke a server-streaming RPC and yield each reply.

        Raises:
            CloudDriveAPIError: If the call fails before or during the stream
            CloudDriveNotConnectedError: If no channel or context is available
        """
        method = get_method(name)
        if not method.server_streaming:
            raise ValueError(f"{name} is a unary method, use unary()")

        metadata = self._metadata(method, context)
        rpc = self._multicallable(method)
        if timeout is None:
            timeout = self._config.timeout.call

        self._logger.debug(f"-> {name} (stream)")
        call = rpc(request, metadata=metadata, timeout=timeout)
        replies = 0
        try:
            async for reply in call:
                replies += 1
                yield reply
        except grpc.RpcError as e:
            error = CloudDriveAPIError.from_rpc_error(e, name)
            self._logger.debug(f"<- {name} aborted after {replies} replies: {error}")
            raise error from e
        finally:
            # No-op once the stream has finished
            call.cancel()

        self._logger.debug(f"<- {name} ({replies} replies)")
