"""Shared fixtures for the prune engine tests.

All tests pin ``now`` to a fixed instant and use an in-memory reference
oracle, so nothing here touches the real filesystem or git unless a test
asks for it explicitly.
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from delta.core.prune.config import PruneConfig
from delta.core.prune.models import Memory
from delta.core.prune.probes import BranchProbe, ProbeStatus

NOW = 1_760_000_000_000
DAY = 86_400_000
SESSION = "test-session"


class FakeOracle:
    """In-memory stand-in for the filesystem/git oracle."""

    def __init__(
        self,
        paths: Sequence[str] = (),
        branches: Sequence[str] | None = (),
        fail_on: Sequence[str] = (),
    ) -> None:
        self.paths = set(paths)
        # None means "git unavailable"
        self.branches = None if branches is None else set(branches)
        self.fail_on = set(fail_on)
        self.path_calls: list[list[str]] = []
        self.branch_calls: list[list[str]] = []

    async def check_paths_exist(self, paths: Sequence[str]) -> set[str]:
        self.path_calls.append(list(paths))
        if self.fail_on & set(paths):
            raise RuntimeError("probe exploded")
        return {p for p in paths if p in self.paths}

    async def check_branches_exist(self, branches: Sequence[str]) -> BranchProbe:
        self.branch_calls.append(list(branches))
        if self.branches is None:
            return BranchProbe.unavailable(branches)
        return BranchProbe(
            ProbeStatus.CHECKED, frozenset(b for b in branches if b in self.branches)
        )


@pytest.fixture
def make_memory():
    counter = iter(range(1, 10_000))

    def _make(
        content: str = "A reasonably detailed memory about the project",
        tags: Sequence[str] = ("general",),
        importance: str = "normal",
        session_id: str | None = None,
        age_days: float = 0,
        updated_days: float | None = None,
        accessed_days: float | None = 0,
        **overrides,
    ) -> Memory:
        """Build a memory whose timestamps are expressed in days before NOW.

        ``accessed_days=None`` produces a never-accessed record.
        """
        updated = age_days if updated_days is None else updated_days
        fields = dict(
            id=next(counter),
            content=content,
            tags=list(tags),
            importance=importance,
            session_id=session_id,
            created_at=int(NOW - age_days * DAY),
            updated_at=int(NOW - updated * DAY),
            last_accessed=0 if accessed_days is None else int(NOW - accessed_days * DAY),
        )
        fields.update(overrides)
        return Memory(**fields)

    return _make


@pytest.fixture
def offline_config() -> PruneConfig:
    """Config with every reference check and duplicate pass switched off."""
    return PruneConfig(
        check_files=False,
        check_branches=False,
        check_completed=False,
        detect_duplicates=False,
    )


@pytest.fixture
def fake_oracle():
    def _make(**kwargs) -> FakeOracle:
        return FakeOracle(**kwargs)

    return _make
