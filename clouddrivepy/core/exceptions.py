"""
Custom exceptions for CloudDrive operations.

This module defines the exception classes raised by the client.
Local file errors are not wrapped: they propagate as the builtin OSError family.
"""
from typing import Optional


class CloudDriveException(Exception):
    """Base exception for all CloudDrive-related errors."""

    def __init__(self, message: str, error_code: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: gRPC status name (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class CloudDriveAuthError(CloudDriveException):
    """Exception raised when authentication fails or the server is unreachable."""
    pass


class CloudDriveNotConnectedError(CloudDriveException):
    """Exception raised when a remote call is made without an authenticated session."""
    pass


class CloudDriveRequestError(CloudDriveException):
    """Exception raised when a remote call fails or a stream aborts."""
    pass


class CloudDriveUploadError(CloudDriveRequestError):
    """
    Exception raised when the remote handle does not account for every byte.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        bytes_read: int = 0,
        bytes_written: int = 0,
        error_code: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            file_path: Remote path of the file being written
            bytes_read: Bytes read from the local source
            bytes_written: Bytes acknowledged by the server
            error_code: gRPC status name (if available)
        """
        self.file_path = file_path
        self.bytes_read = bytes_read
        self.bytes_written = bytes_written
        super().__init__(message, error_code)
