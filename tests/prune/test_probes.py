"""Tests for filesystem and git existence probes."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from delta.core.prune import probes
from delta.core.prune.probes import (
    BranchProbe,
    ProbeStatus,
    SystemReferenceOracle,
    existing_paths,
    list_git_branches,
    match_branches,
    parse_branch_listing,
)


class _FakeProcess:
    def __init__(self, stdout: bytes = b"", returncode: int = 0, hang: bool = False) -> None:
        self._stdout = stdout
        self.returncode = returncode
        self._hang = hang
        self.killed = False

    async def communicate(self) -> tuple[bytes, bytes]:
        if self._hang:
            await asyncio.sleep(10)
        return self._stdout, b""

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int:
        return self.returncode


def _patch_exec(monkeypatch: pytest.MonkeyPatch, result):
    calls: list[tuple] = []

    async def _fake_exec(*args, **kwargs):
        calls.append(args)
        if isinstance(result, BaseException):
            raise result
        return result

    monkeypatch.setattr(asyncio, "create_subprocess_exec", _fake_exec)
    return calls


# -- Paths --


def test_existing_paths(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("print('hi')")
    absolute = tmp_path / "notes.md"
    absolute.write_text("# notes")

    found = existing_paths(
        ["src/app.py", "src", str(absolute), "src/missing.py", "/nowhere/x.ts"],
        tmp_path,
    )
    assert found == {"src/app.py", "src", str(absolute)}


def test_unstatable_path_counts_as_missing(tmp_path: Path) -> None:
    assert existing_paths(["bad\x00name.py"], tmp_path) == set()


@pytest.mark.asyncio
async def test_oracle_checks_paths_against_cwd(tmp_path: Path) -> None:
    (tmp_path / "README.md").write_text("x")
    oracle = SystemReferenceOracle(cwd=tmp_path)
    assert await oracle.check_paths_exist(["README.md", "gone.md"]) == {"README.md"}


# -- Branch parsing --


def test_parse_branch_listing() -> None:
    output = "main\nfeat/x\n  origin/feat/y  \norigin/HEAD\n\n"
    assert parse_branch_listing(output) == {"main", "feat/x", "feat/y", "HEAD"}


def test_match_branches_case_sensitive() -> None:
    known = frozenset({"feat/x", "feat/y", "feat/z"})
    matched = match_branches(["feat/x", "origin/feat/y", "feat/Z"], known)
    assert matched == {"feat/x", "origin/feat/y"}


def test_unavailable_probe_assumes_all_exist() -> None:
    probe = BranchProbe.unavailable(["feat/a", "fix/b"])
    assert probe.status is ProbeStatus.UNAVAILABLE
    assert probe.existing == {"feat/a", "fix/b"}
    assert probe.missing(["feat/a", "fix/b"]) == []


def test_missing_branches() -> None:
    probe = BranchProbe(ProbeStatus.CHECKED, frozenset({"feat/a"}))
    assert probe.missing(["feat/a", "fix/b"]) == ["fix/b"]


# -- git invocation --


@pytest.mark.asyncio
async def test_list_git_branches_success(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _patch_exec(monkeypatch, _FakeProcess(b"main\norigin/feat/x\n"))
    assert await list_git_branches() == {"main", "feat/x"}
    assert calls[0][:3] == ("git", "branch", "-a")


@pytest.mark.asyncio
async def test_list_git_branches_git_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_exec(monkeypatch, FileNotFoundError("git"))
    assert await list_git_branches() is None


@pytest.mark.asyncio
async def test_list_git_branches_not_a_repo(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_exec(monkeypatch, _FakeProcess(returncode=128))
    assert await list_git_branches() is None


@pytest.mark.asyncio
async def test_list_git_branches_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    proc = _FakeProcess(hang=True)
    _patch_exec(monkeypatch, proc)
    assert await list_git_branches(timeout=0.01) is None
    assert proc.killed


# -- Oracle --


@pytest.mark.asyncio
async def test_oracle_lists_branches_once(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = 0

    async def _fake_list(cwd=None, timeout=5.0):
        nonlocal calls
        calls += 1
        return frozenset({"feat/alive"})

    monkeypatch.setattr(probes, "list_git_branches", _fake_list)
    oracle = SystemReferenceOracle()

    first = await oracle.check_branches_exist(["feat/alive", "feat/dead"])
    second = await oracle.check_branches_exist(["feat/dead"])

    assert calls == 1
    assert first.status is ProbeStatus.CHECKED
    assert first.existing == {"feat/alive"}
    assert second.missing(["feat/dead"]) == ["feat/dead"]


@pytest.mark.asyncio
async def test_oracle_falls_back_when_git_unusable(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _fake_list(cwd=None, timeout=5.0):
        return None

    monkeypatch.setattr(probes, "list_git_branches", _fake_list)
    probe = await SystemReferenceOracle().check_branches_exist(["feat/dead"])
    assert probe.status is ProbeStatus.UNAVAILABLE
    assert probe.existing == {"feat/dead"}
