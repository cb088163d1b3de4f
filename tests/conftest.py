"""Pytest fixtures for clouddrivepy tests."""
from typing import Callable, Dict, List, Tuple

import pytest

from clouddrivepy.core.api.protocol import CloudDriveFile, SubFilesReply
from clouddrivepy.core.session.models import AuthorizedContext


class FakeAPI:
    """
    Stands in for AsyncAPIClient.

    Unary handlers map a method name to a callable returning the reply;
    stream handlers return an iterable of replies. An exception instance
    returned or yielded by a handler is raised in its place.
    """

    def __init__(self):
        self.calls: List[Tuple[str, object]] = []
        self.contexts: List[object] = []
        self._unary: Dict[str, Callable] = {}
        self._stream: Dict[str, Callable] = {}

    def on_unary(self, name: str, handler: Callable) -> 'FakeAPI':
        self._unary[name] = handler
        return self

    def on_stream(self, name: str, handler: Callable) -> 'FakeAPI':
        self._stream[name] = handler
        return self

    def count(self, name: str) -> int:
        return sum(1 for call_name, _ in self.calls if call_name == name)

    def requests(self, name: str) -> list:
        return [request for call_name, request in self.calls if call_name == name]

    async def unary(self, name, request, *, context=None, timeout=None):
        self.calls.append((name, request))
        self.contexts.append(context)
        result = self._unary[name](request)
        if isinstance(result, BaseException):
            raise result
        return result

    async def stream(self, name, request, *, context=None, timeout=None):
        self.calls.append((name, request))
        self.contexts.append(context)
        for item in self._stream[name](request):
            if isinstance(item, BaseException):
                raise item
            yield item


def make_file(parent: str, name: str, is_directory: bool = False, size: int = 0):
    """Build a CloudDriveFile message under a parent path."""
    full_path = f"{parent.rstrip('/')}/{name}"
    return CloudDriveFile(
        name=name,
        fullPathName=full_path,
        isDirectory=is_directory,
        size=size,
        fileType=0 if is_directory else 1,
    )


def tree_handler(tree: Dict[str, object]) -> Callable:
    """
    GetSubFiles handler serving a static tree.

    ``tree`` maps a directory path to either a list of CloudDriveFile
    messages (sent as one batch) or an exception to raise.
    """
    def handler(request):
        content = tree.get(request.path, [])
        if isinstance(content, BaseException):
            return [content]
        return [SubFilesReply(subFiles=content)]
    return handler


@pytest.fixture
def fake_api():
    """Fresh fake API client."""
    return FakeAPI()


@pytest.fixture
def context():
    """Authorization context for a test user."""
    return AuthorizedContext(
        address="127.0.0.1:19798",
        username="tester",
        token="secret-token",
    )


@pytest.fixture
def example_tree():
    """
    The tree used across refresh tests:

    /            -> docs/, movies/, readme.md
    /docs        -> a.txt (10 bytes)
    /movies      -> film.mkv
    """
    return {
        '/': [
            make_file('/', 'docs', is_directory=True),
            make_file('/', 'movies', is_directory=True),
            make_file('/', 'readme.md', size=42),
        ],
        '/docs': [make_file('/docs', 'a.txt', size=10)],
        '/movies': [make_file('/movies', 'film.mkv', size=1 << 30)],
    }


@pytest.fixture
def make_entry():
    """Factory for CloudDriveFile messages."""
    return make_file


@pytest.fixture
def serve_tree(fake_api):
    """Installs a static GetSubFiles tree on the fake API."""
    def serve(tree: Dict[str, object]) -> FakeAPI:
        fake_api.on_stream('GetSubFiles', tree_handler(tree))
        return fake_api
    return serve
