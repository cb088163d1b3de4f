"""Directory entry and cloud backend models."""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Optional


class FileType(IntEnum):
    """File type as reported by the server."""
    DIRECTORY = 0
    FILE = 1
    OTHER = 2


def timestamp_to_datetime(message: Any, field_name: str) -> Optional[datetime]:
    """Convert an optional protobuf Timestamp field to an aware datetime."""
    if not message.HasField(field_name):
        return None
    value = getattr(message, field_name)
    if not value.seconds and not value.nanos:
        return None
    return value.ToDatetime(tzinfo=timezone.utc)


@dataclass(frozen=True)
class CloudBackend:
    """
    One cloud storage account aggregated by the server.

    Attributes:
        name: Backend name (e.g. '115', 'Aliyundrive')
        user_name: Account identity on that backend
        nick_name: Display name
        is_locked: Whether the account is locked
        path: Mount path of the backend in the namespace
    """
    name: str
    user_name: str
    nick_name: str = ''
    is_locked: bool = False
    path: str = ''

    @classmethod
    def from_proto(cls, message: Any) -> 'CloudBackend':
        return cls(
            name=message.name,
            user_name=message.userName,
            nick_name=message.nickName,
            is_locked=message.isLocked,
            path=message.path,
        )

    def __str__(self) -> str:
        return f"{self.name} (user: {self.user_name})"


@dataclass(frozen=True)
class DirectoryEntry:
    """
    One entry of a remote directory listing.

    Entries are transient: they are produced by a listing and never
    cached.
    """
    name: str
    full_path: str
    is_directory: bool
    size: int = 0
    id: str = ''
    file_type: FileType = FileType.FILE
    create_time: Optional[datetime] = None
    write_time: Optional[datetime] = None
    is_cloud_root: bool = False
    is_cloud_directory: bool = False
    is_cloud_file: bool = False
    cloud: Optional[CloudBackend] = None

    @classmethod
    def from_proto(cls, message: Any) -> 'DirectoryEntry':
        """Create from a CloudDriveFile message."""
        try:
            file_type = FileType(message.fileType)
        except ValueError:
            file_type = FileType.OTHER

        cloud = None
        if message.HasField('CloudAPI'):
            cloud = CloudBackend.from_proto(message.CloudAPI)

        return cls(
            name=message.name,
            full_path=message.fullPathName,
            is_directory=message.isDirectory,
            size=message.size,
            id=message.id,
            file_type=file_type,
            create_time=timestamp_to_datetime(message, 'createTime'),
            write_time=timestamp_to_datetime(message, 'writeTime'),
            is_cloud_root=message.isCloudRoot,
            is_cloud_directory=message.isCloudDirectory,
            is_cloud_file=message.isCloudFile,
            cloud=cloud,
        )

    @property
    def is_file(self) -> bool:
        return not self.is_directory

    def __str__(self) -> str:
        if self.is_directory:
            return f"{self.name}/"
        return f"{self.name} ({self.size:,} bytes)"
