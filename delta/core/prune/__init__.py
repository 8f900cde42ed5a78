from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from delta.core.prune.config import PruneConfig
from delta.core.prune.engine import PruneEngine
from delta.core.prune.models import (
    REASON_LABELS,
    REASON_RISK,
    Importance,
    Memory,
    MemoryKind,
    PruneAnalysis,
    PruneCandidate,
    PruneReason,
    PruneStats,
    RiskLevel,
)
from delta.core.prune.probes import ReferenceOracle
from delta.core.prune.report import format_report
from delta.core.prune.selection import (
    DeletionPlan,
    MemoryDeleter,
    candidate_risk,
    execute_prune,
    plan_deletion,
    select_by_risk,
    set_all_selected,
)

__all__ = [
    "REASON_LABELS",
    "REASON_RISK",
    "DeletionPlan",
    "Importance",
    "Memory",
    "MemoryDeleter",
    "MemoryKind",
    "PruneAnalysis",
    "PruneCandidate",
    "PruneConfig",
    "PruneEngine",
    "PruneReason",
    "PruneStats",
    "RiskLevel",
    "analyze",
    "candidate_risk",
    "execute_prune",
    "format_report",
    "plan_deletion",
    "select_by_risk",
    "set_all_selected",
]


async def analyze(
    memories: Sequence[Memory],
    current_session_id: str,
    config: PruneConfig | Mapping[str, Any] | None = None,
    *,
    oracle: ReferenceOracle | None = None,
    now: int | None = None,
) -> PruneAnalysis:
    """Rank *memories* as pruning candidates, lowest score first.

    *config* may be partial; missing values fall back to the defaults.
    *now* (Unix ms) pins the clock for reproducible results.
    """
    engine = PruneEngine(PruneConfig.resolve(config), oracle)
    return await engine.analyze(memories, current_session_id, now=now)
