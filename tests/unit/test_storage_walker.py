"""Tests for the directory refresh walker."""
import pytest

from clouddrivepy.core.api.errors import CloudDriveAPIError
from clouddrivepy.core.api.protocol import CloudAPI, CloudAPIList, SubFilesReply
from clouddrivepy.core.exceptions import CloudDriveNotConnectedError
from clouddrivepy.core.storage import (
    CloudService,
    DirectoryLister,
    RefreshStatus,
    RefreshWalker,
)


def listed_paths(fake_api):
    return [request.path for request in fake_api.requests('GetSubFiles')]


@pytest.fixture
def nested_tree(make_entry):
    """
    /      -> a/, b/, ab/, f
    /a     -> a1/, a2/
    /b     -> b1/
    """
    return {
        '/': [
            make_entry('/', 'a', is_directory=True),
            make_entry('/', 'b', is_directory=True),
            make_entry('/', 'ab', is_directory=True),
            make_entry('/', 'f', size=1),
        ],
        '/a': [
            make_entry('/a', 'a1', is_directory=True),
            make_entry('/a', 'a2', is_directory=True),
        ],
        '/a/a1': [],
        '/a/a2': [],
        '/b': [make_entry('/b', 'b1', is_directory=True)],
        '/b/b1': [],
        '/ab': [],
    }


@pytest.fixture
def walker(fake_api, context):
    return RefreshWalker(DirectoryLister(fake_api, context))


class TestRefreshTree:
    """Test suite for RefreshWalker.refresh_tree."""

    @pytest.mark.asyncio
    async def test_pre_order_each_directory_once(self, walker, serve_tree, nested_tree):
        """Test every directory is listed exactly once in pre-order."""
        fake_api = serve_tree(nested_tree)

        report = await walker.refresh_tree('/')

        expected = ['/', '/a', '/a/a1', '/a/a2', '/b', '/b/b1', '/ab']
        assert listed_paths(fake_api) == expected
        assert report.visited_paths == expected
        assert report.ok

    @pytest.mark.asyncio
    async def test_listing_forces_refresh(self, walker, serve_tree, nested_tree):
        """Test the walk asks the server to bypass its cache."""
        fake_api = serve_tree(nested_tree)

        await walker.refresh_tree('/')

        for request in fake_api.requests('GetSubFiles'):
            assert request.forceRefresh is True
            assert request.checkExpires is True

    @pytest.mark.asyncio
    async def test_child_counts(self, walker, serve_tree, nested_tree):
        """Test each outcome records the listing size."""
        serve_tree(nested_tree)

        report = await walker.refresh_tree('/')

        counts = {o.path: o.child_count for o in report.outcomes}
        assert counts['/'] == 4
        assert counts['/a'] == 2
        assert counts['/ab'] == 0

    @pytest.mark.asyncio
    async def test_excluded_subtree_never_listed(self, walker, serve_tree, nested_tree):
        """Test an excluded directory and its descendants are skipped."""
        fake_api = serve_tree(nested_tree)

        report = await walker.refresh_tree('/', exclusions=['/a'])

        assert listed_paths(fake_api) == ['/', '/b', '/b/b1', '/ab']
        assert [o.path for o in report.skipped] == ['/a']

    @pytest.mark.asyncio
    async def test_exclusion_is_not_a_prefix_match(self, walker, serve_tree, nested_tree):
        """Test excluding /a leaves /ab alone and /a/a1 leaves /a/a2 alone."""
        fake_api = serve_tree(nested_tree)

        await walker.refresh_tree('/', exclusions=['/a/a1', '/b/'])

        paths = listed_paths(fake_api)
        assert '/a/a1' not in paths
        assert '/a/a2' in paths
        # '/b/' is not '/b'
        assert '/b' in paths and '/b/b1' in paths

    @pytest.mark.asyncio
    async def test_excluded_root(self, walker, serve_tree, nested_tree):
        """Test excluding the root lists nothing."""
        fake_api = serve_tree(nested_tree)

        report = await walker.refresh_tree('/', exclusions=['/'])

        assert listed_paths(fake_api) == []
        assert [o.status for o in report.outcomes] == [RefreshStatus.SKIPPED]

    @pytest.mark.asyncio
    async def test_failure_isolated_to_subtree(self, walker, serve_tree, nested_tree):
        """Test a failing directory does not stop its siblings."""
        nested_tree['/a'] = CloudDriveAPIError('PERMISSION_DENIED', 'locked', 'GetSubFiles')
        fake_api = serve_tree(nested_tree)

        report = await walker.refresh_tree('/')

        assert listed_paths(fake_api) == ['/', '/a', '/b', '/b/b1', '/ab']
        assert [o.path for o in report.failed] == ['/a']
        assert len(report.refreshed) == 4
        assert not report.ok

    @pytest.mark.asyncio
    async def test_failure_reported_to_parent(self, walker, serve_tree, nested_tree):
        """Test a child failure is attached to the parent outcome."""
        nested_tree['/b/b1'] = CloudDriveAPIError('UNAVAILABLE', method='GetSubFiles')
        serve_tree(nested_tree)

        report = await walker.refresh_tree('/')

        outcomes = {o.path: o for o in report.outcomes}
        assert outcomes['/b'].status is RefreshStatus.REFRESHED
        assert [e.path for e in outcomes['/b'].errors] == ['/b/b1']
        assert outcomes['/b'].errors[0].error_code == 'UNAVAILABLE'
        assert not outcomes['/b'].ok
        assert outcomes['/'].ok

    @pytest.mark.asyncio
    async def test_failing_root(self, walker, serve_tree):
        """Test a failing root yields a single failed outcome."""
        serve_tree({'/': CloudDriveAPIError('UNAVAILABLE', method='GetSubFiles')})

        report = await walker.refresh_tree('/')

        assert [o.path for o in report.failed] == ['/']
        assert len(report.errors) == 1

    @pytest.mark.asyncio
    async def test_cycle_does_not_loop(self, walker, serve_tree, make_entry):
        """Test a directory reported twice is listed once."""
        fake_api = serve_tree({
            '/': [make_entry('/', 'loop', is_directory=True)],
            '/loop': [
                make_entry('/loop', 'inner', is_directory=True),
                make_entry('', '', is_directory=True),
            ],
            '/loop/inner': [make_entry('/', 'loop', is_directory=True)],
        })

        report = await walker.refresh_tree('/')

        assert listed_paths(fake_api) == ['/', '/loop', '/loop/inner']
        assert len(report.outcomes) == 3

    @pytest.mark.asyncio
    async def test_not_connected_propagates(self, walker, fake_api):
        """Test errors other than remote failures abort the walk."""
        fake_api.on_stream('GetSubFiles', lambda request: [CloudDriveNotConnectedError("closed")])

        with pytest.raises(CloudDriveNotConnectedError):
            await walker.refresh_tree('/')

    @pytest.mark.asyncio
    async def test_events(self, walker, serve_tree, nested_tree):
        """Test per-directory events are emitted."""
        nested_tree['/b'] = CloudDriveAPIError('UNAVAILABLE', method='GetSubFiles')
        serve_tree(nested_tree)
        seen = []
        walker.on('directory_refreshed', lambda outcome: seen.append(('ok', outcome.path)))
        walker.on('directory_skipped', lambda outcome: seen.append(('skip', outcome.path)))
        walker.on('directory_failed', lambda outcome, error: seen.append(('fail', outcome.path)))

        await walker.refresh_tree('/', exclusions=['/a'])

        assert seen == [('ok', '/'), ('skip', '/a'), ('fail', '/b'), ('ok', '/ab')]


class TestExampleScenario:
    """Root with an excluded /movies and a /docs holding one file."""

    @pytest.mark.asyncio
    async def test_movies_skipped_docs_listed_once(self, walker, serve_tree, make_entry):
        """Test the documented example end to end."""
        fake_api = serve_tree({
            '/': [
                make_entry('/', 'movies', is_directory=True),
                make_entry('/', 'docs', is_directory=True),
            ],
            '/movies': [],
            '/docs': [make_entry('/docs', 'a.txt', size=10)],
        })
        docs_entries = []
        walker.on(
            'directory_refreshed',
            lambda outcome: docs_entries.append(outcome) if outcome.path == '/docs' else None
        )

        report = await walker.refresh_tree('/', exclusions=['/movies'])

        assert '/movies' not in listed_paths(fake_api)
        assert listed_paths(fake_api).count('/docs') == 1
        assert docs_entries[0].child_count == 1
        subtrees = [o for o in report.outcomes if o.path != '/']
        assert [(o.path, o.status) for o in subtrees] == [
            ('/movies', RefreshStatus.SKIPPED),
            ('/docs', RefreshStatus.REFRESHED),
        ]
        assert report.errors == []

    @pytest.mark.asyncio
    async def test_docs_listing_content(self, fake_api, context, serve_tree, make_entry):
        """Test /docs yields a.txt with size 10."""
        serve_tree({'/docs': [make_entry('/docs', 'a.txt', size=10)]})

        entries = await DirectoryLister(fake_api, context).list('/docs', force_refresh=True)

        assert [(e.name, e.size, e.is_directory) for e in entries] == [('a.txt', 10, False)]


class TestRefreshOne:
    """Test suite for single-directory refresh."""

    @pytest.mark.asyncio
    async def test_returns_child_count(self, walker, serve_tree, nested_tree):
        """Test only the immediate children are counted."""
        fake_api = serve_tree(nested_tree)

        assert await walker.refresh_one('/a') == 2
        assert listed_paths(fake_api) == ['/a']

    @pytest.mark.asyncio
    async def test_failure_is_fatal(self, walker, serve_tree):
        """Test a single refresh propagates the remote error."""
        serve_tree({'/x': CloudDriveAPIError('NOT_FOUND', method='GetSubFiles')})

        with pytest.raises(CloudDriveAPIError):
            await walker.refresh_one('/x')

    @pytest.mark.asyncio
    async def test_refresh_many_continues(self, walker, serve_tree, nested_tree):
        """Test several paths are processed past failures."""
        nested_tree['/bad'] = CloudDriveAPIError('NOT_FOUND', method='GetSubFiles')
        fake_api = serve_tree(nested_tree)

        results = await walker.refresh_many(['/a', '  ', '/bad', ' /b '])

        assert list(results) == ['/a', '/bad', '/b']
        assert results['/a'] == 2
        assert isinstance(results['/bad'], CloudDriveAPIError)
        assert results['/b'] == 1
        assert listed_paths(fake_api) == ['/a', '/bad', '/b']

    @pytest.mark.asyncio
    async def test_refresh_many_repeated_path(self, walker, serve_tree, nested_tree):
        """Test a repeated path is refreshed and reported once."""
        fake_api = serve_tree(nested_tree)

        results = await walker.refresh_many(['/a', '/b', ' /a'])

        assert results == {'/a': 2, '/b': 1}
        assert listed_paths(fake_api) == ['/a', '/b']


class TestRefreshAll:
    """Test suite for refreshing every backend."""

    @pytest.fixture
    def clouds(self, fake_api, context):
        fake_api.on_unary('GetAllCloudApis', lambda request: CloudAPIList(apis=[
            CloudAPI(name="115", userName="alice"),
            CloudAPI(name="Aliyundrive", userName="bob"),
        ]))
        return CloudService(fake_api, context)

    @pytest.mark.asyncio
    async def test_walks_once_per_backend(self, fake_api, context, clouds, serve_tree, nested_tree):
        """Test each backend gets its own walk and report."""
        serve_tree(nested_tree)
        walker = RefreshWalker(DirectoryLister(fake_api, context), clouds)

        results = await walker.refresh_all(exclusions=['/a'])

        assert [backend.name for backend, _ in results] == ["115", "Aliyundrive"]
        assert listed_paths(fake_api).count('/') == 2
        assert '/a' not in listed_paths(fake_api)
        for _, report in results:
            assert report.root == '/'
            assert [o.path for o in report.skipped] == ['/a']

    @pytest.mark.asyncio
    async def test_next_backend_after_failures(self, fake_api, context, clouds, nested_tree):
        """Test a walk with failures does not stop the next backend."""
        calls = {'/b': 0}

        def handler(request):
            if request.path == '/b':
                calls['/b'] += 1
                if calls['/b'] == 1:
                    return [CloudDriveAPIError('UNAVAILABLE', method='GetSubFiles')]
            return [SubFilesReply(subFiles=nested_tree.get(request.path, []))]

        fake_api.on_stream('GetSubFiles', handler)
        walker = RefreshWalker(DirectoryLister(fake_api, context), clouds)
        finished = []
        walker.on('cloud_finished', lambda backend, report: finished.append((backend.name, report.ok)))

        results = await walker.refresh_all()

        assert finished == [("115", False), ("Aliyundrive", True)]
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_requires_cloud_service(self, walker):
        """Test refresh_all needs backend enumeration."""
        with pytest.raises(ValueError):
            await walker.refresh_all()
