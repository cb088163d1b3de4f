"""Storage module: listing and refreshing the remote namespace."""
from .models import (
    CloudBackend,
    DirectoryEntry,
    FileType,
    RefreshError,
    RefreshOutcome,
    RefreshReport,
    RefreshStatus,
)
from .lister import DirectoryLister
from .services import CloudService, QRCodeScanType
from .walker import RefreshWalker

__all__ = [
    'CloudBackend',
    'DirectoryEntry',
    'FileType',
    'RefreshError',
    'RefreshOutcome',
    'RefreshReport',
    'RefreshStatus',
    'DirectoryLister',
    'CloudService',
    'QRCodeScanType',
    'RefreshWalker',
]
