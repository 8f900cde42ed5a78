from __future__ import annotations

import pytest

from delta.core.prune import analyze, format_report
from tests.prune.conftest import NOW, SESSION


@pytest.mark.asyncio
async def test_report_lists_candidates(make_memory, offline_config) -> None:
    memories = [
        make_memory(content="C"),
        make_memory(content="Never recalled note about lint rules", accessed_days=None),
        make_memory(content="A proper convention note", tags=("convention",)),
    ]
    analysis = await analyze(memories, SESSION, offline_config, now=NOW)
    report = format_report(analysis)

    lines = report.splitlines()
    assert lines[0].startswith("Analyzed 0 episodes, 3 notes, 0 kv in ")
    assert lines[1] == "2 prune candidates (notes: 2)"
    assert "low_content=1" in report
    assert "stale=1" in report
    assert "Minimal content (likely test/junk)" in report
    assert f"note #{memories[0].id}: C" in report


@pytest.mark.asyncio
async def test_report_truncates_long_lists(make_memory, offline_config) -> None:
    memories = [make_memory(content=f"n{i}") for i in range(5)]
    analysis = await analyze(memories, SESSION, offline_config, now=NOW)
    report = format_report(analysis, limit=2)
    assert report.endswith("... and 3 more")
    assert report.count("\n- [") == 2


@pytest.mark.asyncio
async def test_report_without_candidates(offline_config) -> None:
    analysis = await analyze([], SESSION, offline_config, now=NOW)
    assert format_report(analysis).splitlines()[1] == "0 prune candidates"
