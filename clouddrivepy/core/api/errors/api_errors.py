"""CloudDrive API error codes and exceptions."""
from typing import Dict, Optional

import grpc

from ...exceptions import CloudDriveRequestError


class APIErrorCodes:
    """gRPC status codes as reported by the CloudDrive server."""

    ERROR_CODES: Dict[str, str] = {
        'CANCELLED': 'CANCELLED: The call was cancelled.',
        'UNKNOWN': 'UNKNOWN: The server raised an unexpected error.',
        'INVALID_ARGUMENT': 'INVALID_ARGUMENT: The request was rejected as malformed.',
        'DEADLINE_EXCEEDED': 'DEADLINE_EXCEEDED: The server did not answer in time.',
        'NOT_FOUND': 'NOT_FOUND: The file or directory does not exist.',
        'ALREADY_EXISTS': 'ALREADY_EXISTS: The file or directory already exists.',
        'PERMISSION_DENIED': 'PERMISSION_DENIED: The account may not perform this operation.',
        'RESOURCE_EXHAUSTED': 'RESOURCE_EXHAUSTED: The server or cloud quota is exhausted.',
        'FAILED_PRECONDITION': 'FAILED_PRECONDITION: The target is not in a usable state.',
        'ABORTED': 'ABORTED: The operation was aborted by the server.',
        'OUT_OF_RANGE': 'OUT_OF_RANGE: The write position is outside the file.',
        'UNIMPLEMENTED': 'UNIMPLEMENTED: The server does not support this method.',
        'INTERNAL': 'INTERNAL: The server reported an internal error.',
        'UNAVAILABLE': 'UNAVAILABLE: The server is unreachable.',
        'DATA_LOSS': 'DATA_LOSS: Unrecoverable data loss or corruption.',
        'UNAUTHENTICATED': 'UNAUTHENTICATED: Invalid or expired token, please log in again.',
    }

    @classmethod
    def get_message(cls, code: str) -> str:
        """Gets error message for a status name."""
        return cls.ERROR_CODES.get(code, f"Unknown error: {code}")


class CloudDriveAPIError(CloudDriveRequestError):
    """Exception raised for failed CloudDrive RPCs."""

    def __init__(self, code: str, details: Optional[str] = None, method: Optional[str] = None):
        self.code = code
        self.details = details or ''
        self.method = method
        self.message = APIErrorCodes.get_message(code)

        text = self.message
        if method:
            text = f"{method}: {text}"
        if self.details:
            text = f"{text} ({self.details})"
        super().__init__(text, code)

    @classmethod
    def from_rpc_error(cls, error: grpc.RpcError, method: Optional[str] = None) -> 'CloudDriveAPIError':
        """Create from a grpc.RpcError (or grpc.aio.AioRpcError)."""
        code = 'UNKNOWN'
        details = str(error)
        status = error.code() if hasattr(error, 'code') else None
        if isinstance(status, grpc.StatusCode):
            code = status.name
        if hasattr(error, 'details'):
            details = error.details() or ''
        return cls(code, details, method)
