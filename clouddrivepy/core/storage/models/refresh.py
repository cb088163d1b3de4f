"""Refresh outcome models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class RefreshStatus(Enum):
    """What happened to one directory during a refresh walk."""
    REFRESHED = "refreshed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RefreshError:
    """A failure recorded against a path."""
    path: str
    message: str
    error_code: Optional[str] = None


@dataclass
class RefreshOutcome:
    """
    Result of visiting one directory.

    Attributes:
        path: Directory path
        status: Refreshed, skipped (excluded) or failed
        child_count: Number of entries the listing returned
        errors: Failures of this path or of its direct child directories
    """
    path: str
    status: RefreshStatus
    child_count: int = 0
    errors: List[RefreshError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is not RefreshStatus.FAILED and not self.errors


@dataclass
class RefreshReport:
    """
    Aggregate of one refresh walk, outcomes in visiting order.
    """
    root: str
    outcomes: List[RefreshOutcome] = field(default_factory=list)

    def add(self, outcome: RefreshOutcome) -> RefreshOutcome:
        self.outcomes.append(outcome)
        return outcome

    def _with_status(self, status: RefreshStatus) -> List[RefreshOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def refreshed(self) -> List[RefreshOutcome]:
        return self._with_status(RefreshStatus.REFRESHED)

    @property
    def skipped(self) -> List[RefreshOutcome]:
        return self._with_status(RefreshStatus.SKIPPED)

    @property
    def failed(self) -> List[RefreshOutcome]:
        return self._with_status(RefreshStatus.FAILED)

    @property
    def visited_paths(self) -> List[str]:
        """Paths that were listed, successfully or not."""
        return [o.path for o in self.outcomes if o.status is not RefreshStatus.SKIPPED]

    @property
    def errors(self) -> List[RefreshError]:
        return [error for o in self.failed for error in o.errors]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return (
            f"{self.root}: {len(self.refreshed)} refreshed, "
            f"{len(self.skipped)} skipped, {len(self.failed)} failed"
        )
