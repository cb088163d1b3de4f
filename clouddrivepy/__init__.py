"""
clouddrivepy - Async Python client for CloudDrive aggregation servers.

Usage:
    >>> from clouddrivepy import CloudDriveClient
    >>>
    >>> async with CloudDriveClient("127.0.0.1:19798", "user", "pass") as drive:
    ...     for backend in await drive.list_clouds():
    ...         print(backend)
"""
import logging
from .client import CloudDriveClient

# Configuration
from .core.api import (
    APIConfig,
    SSLConfig,
    TimeoutConfig,
    ChannelConfig,
    AsyncAPIClient,
    AsyncAuthService,
    Session,
    normalize_address
)

# Errors
from .core.exceptions import (
    CloudDriveException,
    CloudDriveAuthError,
    CloudDriveNotConnectedError,
    CloudDriveRequestError,
    CloudDriveUploadError
)
from .core.api.errors import CloudDriveAPIError

# Models
from .core.session import AuthorizedContext
from .core.storage import (
    CloudBackend,
    DirectoryEntry,
    FileType,
    RefreshReport,
    RefreshOutcome,
    RefreshStatus
)
from .core.upload import UploadResult, UploadProgress
from .core.offline import OfflineFile, OfflineFilePage, OfflineFileStatus

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for clouddrivepy modules.

    This ensures that all clouddrivepy loggers are properly configured
    to show log messages at the specified level.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'clouddrivepy',
        'clouddrivepy.api',
        'clouddrivepy.auth',
        'clouddrivepy.session',
        'clouddrivepy.client',
        'clouddrivepy.offline',
        'clouddrivepy.storage.clouds',
        'clouddrivepy.storage.lister',
        'clouddrivepy.storage.walker',
        'clouddrivepy.upload.coordinator',
        'clouddrivepy.upload.chunk',
        'clouddrivepy.upload.file',
        'clouddrivepy.upload.handle',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        # Ensure propagation is enabled
        logger.propagate = True


__all__ = [
    'CloudDriveClient',
    'Session',
    'AuthorizedContext',

    # Models
    'CloudBackend',
    'DirectoryEntry',
    'FileType',
    'RefreshReport',
    'RefreshOutcome',
    'RefreshStatus',
    'UploadResult',
    'UploadProgress',
    'OfflineFile',
    'OfflineFilePage',
    'OfflineFileStatus',

    # Config
    'APIConfig',
    'SSLConfig',
    'TimeoutConfig',
    'ChannelConfig',
    'normalize_address',

    # Low-level
    'AsyncAPIClient',
    'AsyncAuthService',

    # Errors
    'CloudDriveException',
    'CloudDriveAuthError',
    'CloudDriveNotConnectedError',
    'CloudDriveRequestError',
    'CloudDriveUploadError',
    'CloudDriveAPIError',

    'setup_logging',
]
