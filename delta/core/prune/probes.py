"""Existence checks for references extracted from memory content.

Both probes are best-effort and never raise. A path that cannot be
stat'ed counts as missing. When git itself cannot be queried, every
branch counts as existing (``ProbeStatus.UNAVAILABLE``), since a false
"orphaned" flag is worse than a missed one.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum, auto
from pathlib import Path
from typing import Protocol

from delta.core.prune.detection import REMOTE_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 5.0

_GIT_LIST_BRANCHES = ("git", "branch", "-a", "--format=%(refname:short)")


class ProbeStatus(StrEnum):
    CHECKED = auto()
    UNAVAILABLE = auto()


@dataclass(frozen=True)
class BranchProbe:
    """Outcome of a branch existence check."""

    status: ProbeStatus
    existing: frozenset[str]

    @classmethod
    def unavailable(cls, branches: Iterable[str]) -> BranchProbe:
        """Fallback when git cannot be queried: assume everything exists."""
        return cls(ProbeStatus.UNAVAILABLE, frozenset(branches))

    def missing(self, branches: Iterable[str]) -> list[str]:
        return [b for b in branches if b not in self.existing]


class ReferenceOracle(Protocol):
    async def check_paths_exist(self, paths: Sequence[str]) -> set[str]: ...

    async def check_branches_exist(self, branches: Sequence[str]) -> BranchProbe: ...


def existing_paths(paths: Iterable[str], cwd: Path) -> set[str]:
    """Return the subset of *paths* that are files or directories.

    Relative paths resolve against *cwd*.
    """
    found: set[str] = set()
    for path in paths:
        target = Path(path)
        if not target.is_absolute():
            target = cwd / target
        try:
            if target.is_file() or target.is_dir():
                found.add(path)
        except (OSError, ValueError):
            logger.debug("Could not stat %s", target, exc_info=True)
    return found


def parse_branch_listing(output: str) -> frozenset[str]:
    """Normalize ``git branch -a`` output into bare branch names."""
    return frozenset(
        name
        for line in output.splitlines()
        if (name := line.strip().removeprefix(REMOTE_PREFIX))
    )


def match_branches(branches: Iterable[str], known: frozenset[str]) -> frozenset[str]:
    """Case-sensitive match of *branches* against a normalized listing."""
    return frozenset(
        b for b in branches if b in known or b.removeprefix(REMOTE_PREFIX) in known
    )


async def list_git_branches(
    cwd: Path | None = None, timeout: float = DEFAULT_GIT_TIMEOUT
) -> frozenset[str] | None:
    """List local and remote branch names, or None if git is unusable."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *_GIT_LIST_BRANCHES,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError:
        logger.debug("git is not available", exc_info=True)
        return None

    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout)
    except TimeoutError:
        logger.debug("git branch listing timed out after %.1fs", timeout)
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        return None

    if proc.returncode != 0:
        logger.debug("git branch listing exited with %s", proc.returncode)
        return None
    return parse_branch_listing(stdout.decode(errors="replace"))


class SystemReferenceOracle:
    """Checks references against the working tree and the local git repo.

    The branch listing is fetched once and reused, so one instance should
    live for a single analysis run.
    """

    def __init__(
        self, cwd: Path | None = None, git_timeout: float = DEFAULT_GIT_TIMEOUT
    ) -> None:
        self._cwd = cwd or Path.cwd()
        self._git_timeout = git_timeout
        self._branches: frozenset[str] | None = None
        self._listed = False

    async def check_paths_exist(self, paths: Sequence[str]) -> set[str]:
        return await asyncio.to_thread(existing_paths, list(paths), self._cwd)

    async def check_branches_exist(self, branches: Sequence[str]) -> BranchProbe:
        if not self._listed:
            self._branches = await list_git_branches(self._cwd, self._git_timeout)
            self._listed = True
        if self._branches is None:
            return BranchProbe.unavailable(branches)
        return BranchProbe(ProbeStatus.CHECKED, match_branches(branches, self._branches))
