"""
CloudDrive gRPC protocol definitions.

Builds the protobuf message classes for the subset of the
``clouddrive.CloudDriveFileSrv`` service used by this client and
describes each RPC method. Field names and numbers are transcribed by hand
from the server's CloudDrive.proto, at the revision that carries
proto3-optional ``ListSubFileRequest.checkExpires`` and the
``APILogin115Editthiscookie`` / ``APILogin115QRCode`` methods (the same
revision the clouddrive2api Go bindings are generated from). Nothing here
is generated by protoc, so the wire tags of every request this client
sends are pinned in the unit tests; re-check them against a newer .proto
before extending the table. Enum-typed fields are declared as int32,
which is wire-compatible.
"""
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Type

from google.protobuf import (
    descriptor_pb2,
    descriptor_pool,
    empty_pb2,
    message_factory,
    timestamp_pb2,
)
from google.protobuf.message import Message

PACKAGE = 'clouddrive'
SERVICE = f'{PACKAGE}.CloudDriveFileSrv'
PROTO_FILE = 'clouddrive/CloudDrive.proto'

_Field = descriptor_pb2.FieldDescriptorProto

STRING = _Field.TYPE_STRING
BYTES = _Field.TYPE_BYTES
BOOL = _Field.TYPE_BOOL
INT32 = _Field.TYPE_INT32
INT64 = _Field.TYPE_INT64
UINT32 = _Field.TYPE_UINT32
UINT64 = _Field.TYPE_UINT64
DOUBLE = _Field.TYPE_DOUBLE
MESSAGE = _Field.TYPE_MESSAGE

TIMESTAMP = '.google.protobuf.Timestamp'


class FieldSpec(NamedTuple):
    """One message field."""
    name: str
    number: int
    kind: int
    type_name: Optional[str] = None
    repeated: bool = False
    optional: bool = False


_MESSAGES: Dict[str, List[FieldSpec]] = {
    'GetTokenRequest': [
        FieldSpec('userName', 1, STRING),
        FieldSpec('password', 2, STRING),
    ],
    'JWTToken': [
        FieldSpec('success', 1, BOOL),
        FieldSpec('errorMessage', 2, STRING),
        FieldSpec('token', 3, STRING),
        FieldSpec('expiration', 4, MESSAGE, TIMESTAMP),
    ],
    'CloudAPI': [
        FieldSpec('name', 1, STRING),
        FieldSpec('userName', 2, STRING),
        FieldSpec('nickName', 3, STRING),
        FieldSpec('isLocked', 4, BOOL),
        FieldSpec('supportMultiThreadUploading', 5, BOOL),
        FieldSpec('supportQpsLimit', 6, BOOL),
        FieldSpec('isCloudEventListenerRunning', 7, BOOL),
        FieldSpec('hasPromotions', 8, BOOL),
        FieldSpec('promotionTitle', 9, STRING),
        FieldSpec('path', 10, STRING),
    ],
    'CloudAPIList': [
        FieldSpec('apis', 1, MESSAGE, f'.{PACKAGE}.CloudAPI', repeated=True),
    ],
    'CloudDriveFile': [
        FieldSpec('id', 1, STRING),
        FieldSpec('name', 2, STRING),
        FieldSpec('fullPathName', 3, STRING),
        FieldSpec('size', 4, INT64),
        FieldSpec('fileType', 5, INT32),
        FieldSpec('createTime', 6, MESSAGE, TIMESTAMP),
        FieldSpec('writeTime', 7, MESSAGE, TIMESTAMP),
        FieldSpec('accessTime', 8, MESSAGE, TIMESTAMP),
        FieldSpec('CloudAPI', 9, MESSAGE, f'.{PACKAGE}.CloudAPI'),
        FieldSpec('thumbnailUrl', 10, STRING),
        FieldSpec('previewUrl', 11, STRING),
        FieldSpec('originalPath', 14, STRING),
        FieldSpec('isDirectory', 30, BOOL),
        FieldSpec('isRoot', 31, BOOL),
        FieldSpec('isCloudRoot', 32, BOOL),
        FieldSpec('isCloudDirectory', 33, BOOL),
        FieldSpec('isCloudFile', 34, BOOL),
        FieldSpec('isSearchResult', 35, BOOL),
        FieldSpec('isForbidden', 36, BOOL),
        FieldSpec('isLocal', 37, BOOL),
    ],
    'ListSubFileRequest': [
        FieldSpec('path', 1, STRING),
        FieldSpec('forceRefresh', 2, BOOL),
        FieldSpec('checkExpires', 3, BOOL, optional=True),
    ],
    'SubFilesReply': [
        FieldSpec('subFiles', 1, MESSAGE, f'.{PACKAGE}.CloudDriveFile', repeated=True),
    ],
    'FindFileByPathRequest': [
        FieldSpec('parentPath', 1, STRING),
        FieldSpec('path', 2, STRING),
    ],
    'CreateFileRequest': [
        FieldSpec('parentPath', 1, STRING),
        FieldSpec('fileName', 2, STRING),
    ],
    'CreateFileResult': [
        FieldSpec('fileHandle', 1, UINT64),
        FieldSpec('filePath', 2, STRING),
    ],
    'WriteFileRequest': [
        FieldSpec('fileHandle', 1, UINT64),
        FieldSpec('startPos', 2, UINT64),
        FieldSpec('length', 3, UINT64),
        FieldSpec('buffer', 4, BYTES),
        FieldSpec('closeFile', 5, BOOL),
    ],
    'WriteFileResult': [
        FieldSpec('bytesWritten', 1, UINT64),
    ],
    'CloseFileRequest': [
        FieldSpec('fileHandle', 1, UINT64),
    ],
    'FileOperationResult': [
        FieldSpec('success', 1, BOOL),
        FieldSpec('errorMessage', 2, STRING),
        FieldSpec('resultFilePaths', 3, STRING, repeated=True),
    ],
    'AddOfflineFileRequest': [
        FieldSpec('urls', 1, STRING),
        FieldSpec('toFolder', 2, STRING),
        FieldSpec('checkFolderAfterSecs', 3, UINT32),
    ],
    'OfflineFileListAllRequest': [
        FieldSpec('cloudName', 1, STRING),
        FieldSpec('cloudAccountId', 2, STRING),
        FieldSpec('page', 3, UINT32),
    ],
    'OfflineFile': [
        FieldSpec('name', 1, STRING),
        FieldSpec('size', 2, UINT64),
        FieldSpec('url', 3, STRING),
        FieldSpec('status', 4, INT32),
        FieldSpec('infoHash', 5, STRING),
        FieldSpec('fileId', 6, STRING),
        FieldSpec('add_time', 7, UINT64),
        FieldSpec('parentId', 8, STRING),
        FieldSpec('percendDone', 9, DOUBLE),
        FieldSpec('peers', 10, UINT64),
    ],
    'Login115EditthiscookieRequest': [
        FieldSpec('editThiscookieString', 1, STRING),
    ],
    'Login115QrCodeRequest': [
        FieldSpec('platformString', 1, STRING, optional=True),
    ],
    'APILoginResult': [
        FieldSpec('success', 1, BOOL),
        FieldSpec('errorMessage', 2, STRING),
    ],
    'QRCodeScanMessage': [
        FieldSpec('messageType', 1, INT32),
        FieldSpec('message', 2, STRING),
    ],
    'OfflineFileListAllResult': [
        FieldSpec('pageNo', 1, UINT32),
        FieldSpec('pageRowCount', 2, UINT32),
        FieldSpec('pageCount', 3, UINT32),
        FieldSpec('totalCount', 4, UINT32),
        FieldSpec('offlineFiles', 6, MESSAGE, f'.{PACKAGE}.OfflineFile', repeated=True),
    ],
}


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Build the FileDescriptorProto for the messages above."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=PROTO_FILE,
        package=PACKAGE,
        syntax='proto3',
        dependency=[
            timestamp_pb2.DESCRIPTOR.name,
            empty_pb2.DESCRIPTOR.name,
        ],
    )

    for message_name, fields in _MESSAGES.items():
        message = file_proto.message_type.add(name=message_name)
        for spec in fields:
            field = message.field.add(
                name=spec.name,
                number=spec.number,
                type=spec.kind,
                label=_Field.LABEL_REPEATED if spec.repeated else _Field.LABEL_OPTIONAL,
            )
            if spec.type_name:
                field.type_name = spec.type_name
            if spec.optional:
                # proto3 `optional` is a synthetic single-field oneof
                field.oneof_index = len(message.oneof_decl)
                field.proto3_optional = True
                message.oneof_decl.add(name=f'_{spec.name}')

    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(timestamp_pb2.DESCRIPTOR.serialized_pb)
_pool.AddSerializedFile(empty_pb2.DESCRIPTOR.serialized_pb)
_pool.AddSerializedFile(build_file_descriptor().SerializeToString())


def message_class(name: str) -> Type[Message]:
    """Returns the generated message class for a CloudDrive message name."""
    full_name = name if '.' in name else f'{PACKAGE}.{name}'
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(full_name))


Empty = message_class('google.protobuf.Empty')
GetTokenRequest = message_class('GetTokenRequest')
JWTToken = message_class('JWTToken')
CloudAPI = message_class('CloudAPI')
CloudAPIList = message_class('CloudAPIList')
CloudDriveFile = message_class('CloudDriveFile')
ListSubFileRequest = message_class('ListSubFileRequest')
SubFilesReply = message_class('SubFilesReply')
FindFileByPathRequest = message_class('FindFileByPathRequest')
CreateFileRequest = message_class('CreateFileRequest')
CreateFileResult = message_class('CreateFileResult')
WriteFileRequest = message_class('WriteFileRequest')
WriteFileResult = message_class('WriteFileResult')
CloseFileRequest = message_class('CloseFileRequest')
FileOperationResult = message_class('FileOperationResult')
AddOfflineFileRequest = message_class('AddOfflineFileRequest')
OfflineFileListAllRequest = message_class('OfflineFileListAllRequest')
OfflineFile = message_class('OfflineFile')
OfflineFileListAllResult = message_class('OfflineFileListAllResult')
Login115EditthiscookieRequest = message_class('Login115EditthiscookieRequest')
Login115QrCodeRequest = message_class('Login115QrCodeRequest')
APILoginResult = message_class('APILoginResult')
QRCodeScanMessage = message_class('QRCodeScanMessage')


@dataclass(frozen=True)
class RpcMethod:
    """Describes one method of the CloudDrive service."""
    name: str
    request: Type[Message]
    response: Type[Message]
    server_streaming: bool = False
    requires_auth: bool = True

    @property
    def path(self) -> str:
        """Fully-qualified method path used on the wire."""
        return f'/{SERVICE}/{self.name}'


METHODS: Dict[str, RpcMethod] = {
    method.name: method
    for method in (
        RpcMethod('GetToken', GetTokenRequest, JWTToken, requires_auth=False),
        RpcMethod('GetSubFiles', ListSubFileRequest, SubFilesReply, server_streaming=True),
        RpcMethod('GetAllCloudApis', Empty, CloudAPIList),
        RpcMethod('FindFileByPath', FindFileByPathRequest, CloudDriveFile),
        RpcMethod('CreateFile', CreateFileRequest, CreateFileResult),
        RpcMethod('WriteToFile', WriteFileRequest, WriteFileResult),
        RpcMethod('CloseFile', CloseFileRequest, FileOperationResult),
        RpcMethod('AddOfflineFiles', AddOfflineFileRequest, FileOperationResult),
        RpcMethod('ListAllOfflineFiles', OfflineFileListAllRequest, OfflineFileListAllResult),
        RpcMethod('APILogin115Editthiscookie', Login115EditthiscookieRequest, APILoginResult),
        RpcMethod('APILogin115QRCode', Login115QrCodeRequest, QRCodeScanMessage, server_streaming=True),
    )
}


def get_method(name: str) -> RpcMethod:
    """
    Look up a method by name.

    Raises:
        KeyError: If the method is not part of the supported protocol
    """
    try:
        return METHODS[name]
    except KeyError:
        raise KeyError(f"Unknown CloudDrive method: {name}") from None
