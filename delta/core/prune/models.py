from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Importance(StrEnum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class MemoryKind(StrEnum):
    """Display category of a stored memory, derived from its tags."""

    KV = "kv"
    NOTE = "note"
    EPISODE = "episode"


class PruneReason(StrEnum):
    STALE = "stale"
    ORPHANED_PATH = "orphaned_path"
    ORPHANED_BRANCH = "orphaned_branch"
    OLD_SESSION = "old_session"
    LOW_IMPORTANCE = "low_importance"
    DUPLICATE = "duplicate"
    COMPLETED_CONTEXT = "completed_context"
    LOW_CONTENT = "low_content"


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK: dict[RiskLevel, int] = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
}

REASON_LABELS: dict[PruneReason, str] = {
    PruneReason.STALE: "Stale (never accessed or old)",
    PruneReason.ORPHANED_PATH: "Orphaned file reference",
    PruneReason.ORPHANED_BRANCH: "Orphaned branch reference",
    PruneReason.OLD_SESSION: "Old session episode",
    PruneReason.LOW_IMPORTANCE: "Low importance + stale",
    PruneReason.DUPLICATE: "Duplicate content",
    PruneReason.COMPLETED_CONTEXT: "Completed context reference",
    PruneReason.LOW_CONTENT: "Minimal content (likely test/junk)",
}

# Display only; scoring never looks at risk.
REASON_RISK: dict[PruneReason, RiskLevel] = {
    PruneReason.STALE: RiskLevel.LOW,
    PruneReason.ORPHANED_PATH: RiskLevel.MEDIUM,
    PruneReason.ORPHANED_BRANCH: RiskLevel.MEDIUM,
    PruneReason.OLD_SESSION: RiskLevel.LOW,
    PruneReason.LOW_IMPORTANCE: RiskLevel.LOW,
    PruneReason.DUPLICATE: RiskLevel.MEDIUM,
    PruneReason.COMPLETED_CONTEXT: RiskLevel.LOW,
    PruneReason.LOW_CONTENT: RiskLevel.LOW,
}


class Memory(BaseModel):
    """A stored memory record, as handed over by the storage layer.

    Timestamps are Unix milliseconds. ``last_accessed == 0`` means the
    record was never explicitly recalled.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    content: str
    tags: list[str] = Field(default_factory=list)
    importance: Importance = Importance.NORMAL
    session_id: str | None = None
    created_at: int = 0
    updated_at: int = 0
    last_accessed: int = 0


class PruneCandidate(BaseModel):
    """A memory flagged as a pruning opportunity.

    ``reasons`` behaves as an insertion-ordered set; add to it through
    :meth:`add_reason`. ``selected`` belongs to the presentation layer.
    """

    kind: MemoryKind
    id: int
    summary: str
    content: str
    reasons: list[PruneReason] = Field(default_factory=list)
    score: int
    created_at: int
    updated_at: int
    last_accessed: int
    importance: Importance | None = None
    tags: list[str] | None = None
    detected_paths: list[str] | None = None
    detected_branches: list[str] | None = None
    selected: bool = False

    def add_reason(self, reason: PruneReason) -> None:
        if reason not in self.reasons:
            self.reasons.append(reason)

    def has_reason(self, reason: PruneReason) -> bool:
        return reason in self.reasons


class PruneTotals(BaseModel):
    """Record counts per kind over every analyzed memory."""

    episodes: int = 0
    notes: int = 0
    kv: int = 0


def _zero_by_reason() -> dict[PruneReason, int]:
    return dict.fromkeys(PruneReason, 0)


def _zero_by_kind() -> dict[MemoryKind, int]:
    return dict.fromkeys(MemoryKind, 0)


class PruneStats(BaseModel):
    total: PruneTotals = Field(default_factory=PruneTotals)
    by_reason: dict[PruneReason, int] = Field(default_factory=_zero_by_reason)
    by_kind: dict[MemoryKind, int] = Field(default_factory=_zero_by_kind)
    total_candidates: int = 0
    analysis_time_ms: float = 0.0


class PruneAnalysis(BaseModel):
    """Result of one analysis run, sorted most-prunable first."""

    candidates: list[PruneCandidate] = Field(default_factory=list)
    stats: PruneStats = Field(default_factory=PruneStats)
    current_session_id: str
    timestamp: int
