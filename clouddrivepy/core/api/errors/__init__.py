"""CloudDrive API errors and exceptions."""
from .api_errors import CloudDriveAPIError, APIErrorCodes

__all__ = [
    'CloudDriveAPIError',
    'APIErrorCodes',
]
