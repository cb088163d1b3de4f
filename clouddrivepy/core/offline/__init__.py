"""Offline download tasks."""
from .service import (
    DEFAULT_OFFLINE_FOLDER,
    OfflineDownloadManager,
    OfflineFile,
    OfflineFilePage,
    OfflineFileStatus,
)

__all__ = [
    'DEFAULT_OFFLINE_FOLDER',
    'OfflineDownloadManager',
    'OfflineFile',
    'OfflineFilePage',
    'OfflineFileStatus',
]
