"""
Directory refresh walker.

Drives a forced refresh over a remote tree, one directory listing at a
time, isolating failures per subtree.
"""
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .lister import DirectoryLister
from .models import CloudBackend, RefreshError, RefreshOutcome, RefreshReport, RefreshStatus
from .services import CloudService
from ..api.events import EventEmitter
from ..exceptions import CloudDriveRequestError
from ..logging import get_logger

logger = get_logger('clouddrivepy.storage.walker')


class RefreshWalker:
    """
    Refreshes remote directories through the lister.

    Traversal is depth-first pre-order over an explicit stack, with a
    visited-path set so a server reporting a cycle (or the same directory
    twice) cannot make the walk loop. Excluded paths are matched by exact
    string equality and are never listed, nor are their descendants.

    Events (via ``on``):
        directory_refreshed(outcome)
        directory_skipped(outcome)
        directory_failed(outcome, error)
        cloud_started(backend)
        cloud_finished(backend, report)
    """

    def __init__(
        self,
        lister: DirectoryLister,
        clouds: Optional[CloudService] = None,
        events: Optional[EventEmitter] = None
    ):
        """
        Args:
            lister: Directory lister
            clouds: Backend enumeration service (required for refresh_all)
            events: Event emitter for per-directory notifications
        """
        self._lister = lister
        self._clouds = clouds
        self._events = events or EventEmitter('clouddrivepy.storage.walker.events')

    def on(self, event: str, callback) -> 'RefreshWalker':
        """Register an event handler."""
        self._events.on(event, callback)
        return self

    async def refresh_tree(
        self,
        root_path: str = '/',
        exclusions: Iterable[str] = ()
    ) -> RefreshReport:
        """
        Force-refresh every directory reachable from root_path.

        A listing failure is recorded for that subtree and the walk goes
        on with the remaining siblings.

        Args:
            root_path: Directory to start from
            exclusions: Paths to skip, compared by exact equality

        Returns:
            Report with one outcome per directory, in visiting order
        """
        excluded = frozenset(exclusions)
        report = RefreshReport(root=root_path)
        visited: Set[str] = set()

        # (path, parent outcome)
        stack: List[Tuple[str, Optional[RefreshOutcome]]] = [(root_path, None)]

        while stack:
            path, parent = stack.pop()

            if path in visited:
                logger.warning(f"Directory reported twice, not listing again: {path}")
                continue
            visited.add(path)

            if path in excluded:
                logger.info(f"Skipping excluded directory: {path}")
                outcome = report.add(RefreshOutcome(path, RefreshStatus.SKIPPED))
                self._events.emit('directory_skipped', outcome)
                continue

            logger.info(f"Refreshing directory: {path}")
            try:
                entries = await self._lister.list(path, force_refresh=True, check_expires=True)
            except CloudDriveRequestError as e:
                logger.error(f"Failed to refresh directory {path}: {e}")
                error = RefreshError(path, str(e), e.error_code)
                outcome = report.add(RefreshOutcome(path, RefreshStatus.FAILED, errors=[error]))
                if parent is not None:
                    parent.errors.append(error)
                self._events.emit('directory_failed', outcome, e)
                continue

            outcome = report.add(
                RefreshOutcome(path, RefreshStatus.REFRESHED, child_count=len(entries))
            )
            self._events.emit('directory_refreshed', outcome)

            subdirectories = [entry.full_path for entry in entries if entry.is_directory]
            for subdirectory in subdirectories:
                logger.debug(f"Found subdirectory: {subdirectory}")

            # Reversed so the first child is popped first
            stack.extend((subdirectory, outcome) for subdirectory in reversed(subdirectories))

        logger.info(f"Refresh finished: {report.summary()}")
        return report

    async def refresh_one(self, path: str) -> int:
        """
        Force-refresh a single directory, without descending.

        Returns:
            Number of immediate children

        Raises:
            CloudDriveRequestError: If the listing fails
        """
        logger.info(f"Refreshing directory: {path}")
        entries = await self._lister.list(path, force_refresh=True, check_expires=True)
        logger.info(f"Directory {path} refreshed, {len(entries)} entries")
        return len(entries)

    async def refresh_many(self, paths: Sequence[str]) -> Dict[str, Union[int, CloudDriveRequestError]]:
        """
        Refresh several directories one by one, continuing past failures.

        Blank paths are ignored; surrounding whitespace is stripped. A path
        given more than once is refreshed once.

        Returns:
            Mapping of path to child count, or to the error that path raised
        """
        results: Dict[str, Union[int, CloudDriveRequestError]] = {}
        for raw_path in paths:
            path = raw_path.strip()
            if not path or path in results:
                continue
            try:
                results[path] = await self.refresh_one(path)
            except CloudDriveRequestError as e:
                logger.error(f"Failed to refresh directory {path}: {e}")
                results[path] = e
        return results

    async def refresh_all(
        self,
        exclusions: Iterable[str] = ()
    ) -> List[Tuple[CloudBackend, RefreshReport]]:
        """
        Refresh the whole tree once per configured cloud backend.

        Walks with internal failures are reported and the next backend is
        processed regardless.

        Returns:
            (backend, report) pairs in backend order

        Raises:
            CloudDriveRequestError: If the backends cannot be enumerated
        """
        if self._clouds is None:
            raise ValueError("refresh_all requires a CloudService")

        excluded = frozenset(exclusions)
        backends = await self._clouds.list_clouds()
        logger.info(f"Refreshing {len(backends)} cloud backend(s)")

        results: List[Tuple[CloudBackend, RefreshReport]] = []
        for backend in backends:
            logger.info(f"Processing cloud storage: {backend}")
            self._events.emit('cloud_started', backend)

            report = await self.refresh_tree('/', excluded)
            if not report.ok:
                logger.warning(
                    f"Cloud storage {backend.name} finished with "
                    f"{len(report.failed)} failed directories"
                )

            self._events.emit('cloud_finished', backend, report)
            results.append((backend, report))

        return results
