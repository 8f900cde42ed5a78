"""Hand-off between a finished analysis and the storage layer.

The analysis engine never reads ``selected``; these helpers are for the
review UI that toggles it and for the caller that performs deletion.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from pydantic import BaseModel, Field

from delta.core.prune.models import (
    REASON_RISK,
    MemoryKind,
    PruneCandidate,
    RiskLevel,
)

logger = logging.getLogger(__name__)


class MemoryDeleter(Protocol):
    def delete_memories(self, ids: Sequence[int]) -> int: ...


class DeletionPlan(BaseModel):
    memory_ids: list[int] = Field(default_factory=list)
    by_kind: dict[MemoryKind, int] = Field(
        default_factory=lambda: dict.fromkeys(MemoryKind, 0)
    )

    @property
    def empty(self) -> bool:
        return not self.memory_ids


def candidate_risk(candidate: PruneCandidate) -> RiskLevel:
    """Highest risk tier among the candidate's reasons."""
    return max(
        (REASON_RISK[r] for r in candidate.reasons),
        key=lambda risk: risk.rank,
        default=RiskLevel.LOW,
    )


def select_by_risk(
    candidates: Iterable[PruneCandidate], max_risk: RiskLevel = RiskLevel.LOW
) -> int:
    """Pre-select every candidate whose risk is at most *max_risk*."""
    count = 0
    for candidate in candidates:
        candidate.selected = candidate_risk(candidate).rank <= max_risk.rank
        count += candidate.selected
    return count


def set_all_selected(candidates: Iterable[PruneCandidate], selected: bool) -> None:
    for candidate in candidates:
        candidate.selected = selected


def plan_deletion(candidates: Iterable[PruneCandidate]) -> DeletionPlan:
    plan = DeletionPlan()
    for candidate in candidates:
        if not candidate.selected:
            continue
        plan.memory_ids.append(candidate.id)
        plan.by_kind[candidate.kind] += 1
    return plan


def execute_prune(candidates: Iterable[PruneCandidate], deleter: MemoryDeleter) -> int:
    """Delete the selected candidates. Returns how many rows went away."""
    plan = plan_deletion(candidates)
    if plan.empty:
        return 0
    deleted = deleter.delete_memories(plan.memory_ids)
    logger.info(
        "Pruned %d of %d selected memories (episodes=%d notes=%d kv=%d)",
        deleted,
        len(plan.memory_ids),
        plan.by_kind[MemoryKind.EPISODE],
        plan.by_kind[MemoryKind.NOTE],
        plan.by_kind[MemoryKind.KV],
    )
    return deleted
