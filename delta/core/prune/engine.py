from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from delta.core.prune.analyzer import analyze_memory
from delta.core.prune.classify import classify_memory
from delta.core.prune.config import PruneConfig
from delta.core.prune.detection import (
    detect_branch_refs,
    detect_file_paths,
    has_completed_context,
)
from delta.core.prune.duplicates import mark_duplicates
from delta.core.prune.models import (
    Memory,
    MemoryKind,
    PruneAnalysis,
    PruneCandidate,
    PruneReason,
    PruneStats,
    PruneTotals,
)
from delta.core.prune.probes import (
    ProbeStatus,
    ReferenceOracle,
    SystemReferenceOracle,
)

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class PruneEngine:
    """Ranks memories as deletion candidates. Never deletes anything itself.

    Pass 1: score every memory on its own and keep the candidates.
    Pass 2: check referenced paths and branches against the working tree.
    Pass 3: flag near-duplicates, then sort most-prunable first.
    """

    def __init__(
        self,
        config: PruneConfig | None = None,
        oracle: ReferenceOracle | None = None,
    ) -> None:
        self.config = config or PruneConfig()
        self._oracle = oracle

    async def analyze(
        self,
        memories: Sequence[Memory],
        current_session_id: str,
        now: int | None = None,
    ) -> PruneAnalysis:
        started = time.perf_counter()
        config = self.config
        now = now if now is not None else now_ms()

        candidates: list[PruneCandidate] = []
        for memory in memories:
            candidate = analyze_memory(memory, current_session_id, config, now)
            if candidate is not None:
                candidates.append(candidate)

        # One oracle per run so git is listed at most once.
        oracle = self._oracle or SystemReferenceOracle(
            git_timeout=config.git_timeout_seconds
        )
        for candidate in candidates:
            try:
                await self._enrich(candidate, oracle)
            except Exception:
                logger.warning(
                    "Reference check failed for memory %s", candidate.id, exc_info=True
                )

        if config.detect_duplicates:
            mark_duplicates(candidates, config.duplicate_similarity)

        candidates.sort(key=lambda c: c.score)

        stats = build_stats(memories, candidates)
        stats.analysis_time_ms = (time.perf_counter() - started) * 1000

        logger.info(
            "Prune analysis: records=%d candidates=%d episodes=%d notes=%d kv=%d "
            "elapsed=%.1fms",
            len(memories),
            stats.total_candidates,
            stats.by_kind[MemoryKind.EPISODE],
            stats.by_kind[MemoryKind.NOTE],
            stats.by_kind[MemoryKind.KV],
            stats.analysis_time_ms,
        )

        return PruneAnalysis(
            candidates=candidates,
            stats=stats,
            current_session_id=current_session_id,
            timestamp=now_ms(),
        )

    async def _enrich(self, candidate: PruneCandidate, oracle: ReferenceOracle) -> None:
        """Attach detected references and flag the ones that no longer exist."""
        config = self.config
        paths = detect_file_paths(candidate.content) if config.check_files else []
        branches = detect_branch_refs(candidate.content) if config.check_branches else []
        candidate.detected_paths = paths
        candidate.detected_branches = branches

        if config.check_completed and has_completed_context(candidate.content):
            candidate.add_reason(PruneReason.COMPLETED_CONTEXT)

        if paths:
            existing = await oracle.check_paths_exist(paths)
            if any(p not in existing for p in paths):
                candidate.add_reason(PruneReason.ORPHANED_PATH)

        if branches:
            probe = await oracle.check_branches_exist(branches)
            if probe.status is ProbeStatus.UNAVAILABLE:
                logger.debug("Branch check unavailable, keeping %s as-is", candidate.id)
            elif probe.missing(branches):
                candidate.add_reason(PruneReason.ORPHANED_BRANCH)


def build_stats(
    memories: Sequence[Memory], candidates: Sequence[PruneCandidate]
) -> PruneStats:
    stats = PruneStats(total_candidates=len(candidates))
    for candidate in candidates:
        stats.by_kind[candidate.kind] += 1
        for reason in candidate.reasons:
            stats.by_reason[reason] += 1

    totals = dict.fromkeys(MemoryKind, 0)
    for memory in memories:
        totals[classify_memory(memory)] += 1
    stats.total = PruneTotals(
        episodes=totals[MemoryKind.EPISODE],
        notes=totals[MemoryKind.NOTE],
        kv=totals[MemoryKind.KV],
    )
    return stats
