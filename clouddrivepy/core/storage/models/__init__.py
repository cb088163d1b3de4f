"""Storage models."""
from .entry import CloudBackend, DirectoryEntry, FileType
from .refresh import RefreshError, RefreshOutcome, RefreshReport, RefreshStatus

__all__ = [
    'CloudBackend',
    'DirectoryEntry',
    'FileType',
    'RefreshError',
    'RefreshOutcome',
    'RefreshReport',
    'RefreshStatus',
]
