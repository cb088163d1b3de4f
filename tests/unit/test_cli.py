"""Tests for the command-line interface."""
import pytest
from typer.testing import CliRunner

from clouddrivepy.cli.main import app, split_paths
from clouddrivepy.core.api.errors import CloudDriveAPIError
from clouddrivepy.core.exceptions import CloudDriveAuthError
from clouddrivepy.core.offline import OfflineFile, OfflineFilePage, OfflineFileStatus
from clouddrivepy.core.storage import (
    CloudBackend,
    DirectoryEntry,
    RefreshOutcome,
    RefreshReport,
    RefreshStatus,
)
from clouddrivepy.core.upload import UploadResult

CREDENTIALS = ["--server", "http://nas:19798", "--username", "alice", "--password", "pw"]

runner = CliRunner()


class FakeDriveClient:
    """Records how the CLI drives the client."""

    instances = []
    connect_error = None
    failing_paths = set()

    def __init__(self, address, username, password):
        self.address = address
        self.username = username
        self.password = password
        self.upload_folder = "/upload"
        self.calls = []
        self.closed = 0
        self.handlers = {}
        FakeDriveClient.instances.append(self)

    async def connect(self):
        if self.connect_error:
            raise self.connect_error

    async def close(self):
        self.closed += 1

    def on(self, event, callback):
        self.handlers[event] = callback
        return self

    async def list_clouds(self):
        self.calls.append(('list_clouds',))
        return [CloudBackend("115", "alice", path="/115"), CloudBackend("Aliyundrive", "bob")]

    async def refresh_all(self, exclusions):
        self.calls.append(('refresh_all', list(exclusions)))
        good = RefreshReport('/', [RefreshOutcome('/', RefreshStatus.REFRESHED, 2)])
        bad = RefreshReport('/', [
            RefreshOutcome('/', RefreshStatus.REFRESHED, 2),
            RefreshOutcome('/x', RefreshStatus.FAILED),
        ])
        return [(CloudBackend("115", "alice"), good), (CloudBackend("Aliyundrive", "bob"), bad)]

    async def refresh_directories(self, paths):
        self.calls.append(('refresh_directories', list(paths)))
        return {
            path: CloudDriveAPIError('NOT_FOUND', method='GetSubFiles') if path in self.failing_paths else 3
            for path in paths
        }

    async def list_directory(self, path, force_refresh=False):
        self.calls.append(('list_directory', path, force_refresh))
        return [
            DirectoryEntry("docs", "/docs", True),
            DirectoryEntry("a.txt", "/a.txt", False, size=10),
        ]

    async def upload(self, file_path, name=None, dest=None, progress_callback=None):
        self.calls.append(('upload', file_path, name, dest))
        return UploadResult(f"{dest}/{name or file_path.name}", 1, 5, 5, 1)

    async def add_offline_files(self, urls, target_folder=None):
        self.calls.append(('add_offline_files', list(urls), target_folder))
        return ["/offline/a.iso"]

    async def list_offline_files(self, cloud_name, account_id, page=0):
        self.calls.append(('list_offline_files', cloud_name, account_id, page))
        return OfflineFilePage(0, 30, 1, 1, [
            OfflineFile("a.iso", size=1024, status=OfflineFileStatus.DOWNLOADING, percent_done=50.0),
        ])

    async def find_file(self, path):
        self.calls.append(('find_file', path))
        if path in self.failing_paths:
            raise CloudDriveAPIError('NOT_FOUND', method='FindFileByPath')
        return DirectoryEntry("a.txt", path, False, size=10)

    async def login_115_with_cookie(self, cookie):
        self.calls.append(('login_115_with_cookie', cookie))

    async def get_115_qrcode(self, platform=None):
        self.calls.append(('get_115_qrcode', platform))
        return "https://qr/abc[1]"


@pytest.fixture(autouse=True)
def fake_client(monkeypatch):
    FakeDriveClient.instances = []
    FakeDriveClient.connect_error = None
    FakeDriveClient.failing_paths = set()
    monkeypatch.setattr("clouddrivepy.CloudDriveClient", FakeDriveClient)
    return FakeDriveClient


def last_client():
    return FakeDriveClient.instances[-1]


class TestHelpers:
    """Test suite for argument helpers."""

    def test_split_paths(self):
        """Test comma-separated lists are trimmed and blanks dropped."""
        assert split_paths(" /tmp, /temp ,,") == ["/tmp", "/temp"]
        assert split_paths(None) == []


class TestGlobalOptions:
    """Test suite for connection options."""

    def test_credentials_passed_to_client(self):
        """Test server and credentials reach the client."""
        result = runner.invoke(app, CREDENTIALS + ["list"])

        assert result.exit_code == 0, result.output
        client = last_client()
        assert (client.address, client.username, client.password) == ("http://nas:19798", "alice", "pw")
        assert client.closed == 1

    def test_environment_variables(self):
        """Test options can come from the environment."""
        result = runner.invoke(app, ["list"], env={
            "CLOUDDRIVE_SERVER": "nas:19798",
            "CLOUDDRIVE_USERNAME": "bob",
            "CLOUDDRIVE_PASSWORD": "secret",
        })

        assert result.exit_code == 0, result.output
        assert last_client().username == "bob"

    def test_missing_server(self):
        """Test a server address is required."""
        result = runner.invoke(app, ["--username", "a", "--password", "b", "list"], env={"CLOUDDRIVE_SERVER": ""})

        assert result.exit_code == 1
        assert FakeDriveClient.instances == []

    def test_login_failure(self, fake_client):
        """Test authentication failure exits non-zero and closes."""
        fake_client.connect_error = CloudDriveAuthError("Login failed: UNAVAILABLE")

        result = runner.invoke(app, CREDENTIALS + ["list"])

        assert result.exit_code == 1
        assert "Login failed" in result.output
        assert last_client().closed == 1

    def test_unknown_command(self):
        """Test unknown commands are rejected."""
        result = runner.invoke(app, CREDENTIALS + ["explode"])

        assert result.exit_code != 0


class TestCommands:
    """Test suite for each command."""

    def test_list(self):
        """Test cloud storages are printed."""
        result = runner.invoke(app, CREDENTIALS + ["list"])

        assert result.exit_code == 0
        assert "Found 2 cloud storage(s)" in result.output
        assert "Aliyundrive" in result.output

    def test_refresh_all_reports_and_succeeds(self):
        """Test failures inside walks are summarized, not fatal."""
        result = runner.invoke(app, CREDENTIALS + ["refresh-all", "--exclude", "/tmp, /temp"])

        assert result.exit_code == 0, result.output
        assert last_client().calls == [('refresh_all', ['/tmp', '/temp'])]
        assert "1 failed" in result.output

    def test_refresh_dir_several_paths_continue(self, fake_client):
        """Test a failing path does not stop the others."""
        fake_client.failing_paths = {"/b"}

        result = runner.invoke(app, CREDENTIALS + ["refresh-dir", "--path", "/a, /b,/c"])

        assert result.exit_code == 0, result.output
        assert last_client().calls == [('refresh_directories', ['/a', '/b', '/c'])]
        assert "Failed to refresh /b" in result.output
        assert "Refreshed /c" in result.output

    def test_refresh_dir_single_path_failure(self, fake_client):
        """Test a single failing path exits non-zero."""
        fake_client.failing_paths = {"/a"}

        result = runner.invoke(app, CREDENTIALS + ["refresh-dir", "--path", "/a"])

        assert result.exit_code == 1

    def test_refresh_dir_requires_path(self):
        """Test --path is mandatory."""
        result = runner.invoke(app, CREDENTIALS + ["refresh-dir"])

        assert result.exit_code != 0
        assert FakeDriveClient.instances == []

    def test_list_dir_defaults(self):
        """Test root is listed with a forced refresh by default."""
        result = runner.invoke(app, CREDENTIALS + ["list-dir"])

        assert result.exit_code == 0, result.output
        assert last_client().calls == [('list_directory', '/', True)]
        assert "contains 2 entries" in result.output

    def test_list_dir_without_refresh(self):
        """Test the server cache can be used."""
        result = runner.invoke(app, CREDENTIALS + ["list-dir", "--path", "/docs", "--no-refresh"])

        assert result.exit_code == 0
        assert last_client().calls == [('list_directory', '/docs', False)]

    def test_upload_default_folder(self, tmp_path):
        """Test upload goes to the upload folder unless told otherwise."""
        source = tmp_path / "hello.txt"
        source.write_bytes(b"hello")

        result = runner.invoke(app, CREDENTIALS + ["upload", str(source)])

        assert result.exit_code == 0, result.output
        assert last_client().calls == [('upload', source, None, '/upload')]
        assert "/upload/hello.txt" in result.output

    def test_upload_destination_and_name(self, tmp_path):
        """Test destination and name options."""
        source = tmp_path / "hello.txt"
        source.write_bytes(b"hello")

        result = runner.invoke(app, CREDENTIALS + ["upload", str(source), "--dest", "/docs", "--name", "hi.txt"])

        assert result.exit_code == 0, result.output
        assert last_client().calls == [('upload', source, 'hi.txt', '/docs')]

    def test_upload_requires_file(self):
        """Test upload without a file is rejected."""
        result = runner.invoke(app, CREDENTIALS + ["upload"])

        assert result.exit_code != 0
        assert FakeDriveClient.instances == []

    def test_upload_missing_file(self, tmp_path):
        """Test a non-existent file is rejected before connecting."""
        result = runner.invoke(app, CREDENTIALS + ["upload", str(tmp_path / "nope.txt")])

        assert result.exit_code != 0
        assert FakeDriveClient.instances == []

    def test_offline_add(self):
        """Test offline URLs and folder are forwarded."""
        result = runner.invoke(app, CREDENTIALS + ["offline-add", "http://x/a.iso", "http://x/b.iso", "--to", "/dl"])

        assert result.exit_code == 0, result.output
        assert last_client().calls == [('add_offline_files', ["http://x/a.iso", "http://x/b.iso"], "/dl")]

    def test_offline_list(self):
        """Test offline tasks are printed."""
        result = runner.invoke(app, CREDENTIALS + ["offline-list", "115", "alice", "--page", "0"])

        assert result.exit_code == 0, result.output
        assert last_client().calls == [('list_offline_files', '115', 'alice', 0)]
        assert "a.iso" in result.output

    def test_info(self):
        """Test entry details are printed."""
        result = runner.invoke(app, CREDENTIALS + ["info", "/docs/a.txt"])

        assert result.exit_code == 0, result.output
        assert "Size:" in result.output

    def test_info_failure(self, fake_client):
        """Test a remote error exits non-zero and still closes."""
        fake_client.failing_paths = {"/missing"}

        result = runner.invoke(app, CREDENTIALS + ["info", "/missing"])

        assert result.exit_code == 1
        assert "Failed to get info" in result.output
        assert last_client().closed == 1

    def test_login_115_cookie(self):
        """Test the cookie login reaches the client."""
        result = runner.invoke(app, CREDENTIALS + ["login-115", "--cookie", "UID=1; CID=2"])

        assert result.exit_code == 0, result.output
        assert last_client().calls == [('login_115_with_cookie', "UID=1; CID=2")]
        assert "115 account added" in result.output

    def test_login_115_qrcode(self):
        """Test the QR code content is printed verbatim."""
        result = runner.invoke(app, CREDENTIALS + ["login-115", "--qrcode", "--platform", "web"])

        assert result.exit_code == 0, result.output
        assert last_client().calls == [('get_115_qrcode', "web")]
        assert "https://qr/abc[1]" in result.output

    def test_login_115_needs_one_mode(self, fake_client):
        """Test cookie and QR code modes are exclusive and one is required."""
        neither = runner.invoke(app, CREDENTIALS + ["login-115"])
        both = runner.invoke(app, CREDENTIALS + ["login-115", "--cookie", "UID=1", "--qrcode"])

        assert neither.exit_code == 1
        assert both.exit_code == 1
        assert fake_client.instances == []
