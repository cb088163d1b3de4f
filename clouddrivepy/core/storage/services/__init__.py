"""Storage services."""
from .cloud_service import CloudService, QRCodeScanType

__all__ = [
    'CloudService',
    'QRCodeScanType',
]
