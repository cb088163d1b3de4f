"""CloudDrive gRPC API module."""
from .errors import CloudDriveAPIError, APIErrorCodes
from .events import EventEmitter
from .config import APIConfig, SSLConfig, TimeoutConfig, ChannelConfig, normalize_address
from .protocol import METHODS, RpcMethod, get_method
from .async_client import AsyncAPIClient
from .async_auth import AsyncAuthService
from .session import Session

__all__ = [
    # Client
    'AsyncAPIClient',
    'AsyncAuthService',
    'Session',

    # Protocol
    'METHODS',
    'RpcMethod',
    'get_method',

    # Configuration
    'APIConfig',
    'SSLConfig',
    'TimeoutConfig',
    'ChannelConfig',
    'normalize_address',

    # Errors
    'CloudDriveAPIError',
    'APIErrorCodes',

    # Events
    'EventEmitter',
]
