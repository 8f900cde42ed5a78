from __future__ import annotations

from delta.core.prune._text import summarize
from delta.core.prune.classify import classify_memory
from delta.core.prune.config import PruneConfig
from delta.core.prune.models import (
    Importance,
    Memory,
    MemoryKind,
    PruneCandidate,
    PruneReason,
)
from delta.core.prune.scoring import (
    access_score,
    days_between,
    recency_score,
    relevance_score,
)

ARCHIVED_TAG = "archived"

_PROTECTED_IMPORTANCE: frozenset[Importance] = frozenset({
    Importance.HIGH, Importance.CRITICAL,
})
_PROTECTED_MAX_DAYS = 60
_OLD_SESSION_MIN_DAYS = 1
_LOW_IMPORTANCE_MIN_DAYS = 14
_ARCHIVED_MIN_DAYS = 7


def detect_reasons(
    memory: Memory,
    kind: MemoryKind,
    days_since_update: float,
    current_session_id: str,
    config: PruneConfig,
) -> list[PruneReason]:
    """Reasons derivable from the record alone (no I/O)."""
    reasons: list[PruneReason] = []

    def add(reason: PruneReason) -> None:
        if reason not in reasons:
            reasons.append(reason)

    if len(memory.content.strip()) < config.min_content_length:
        add(PruneReason.LOW_CONTENT)

    if memory.last_accessed == 0 or days_since_update > config.stale_age_days:
        add(PruneReason.STALE)

    # Same-day hand-offs between sessions are expected; don't flag them.
    if (
        memory.session_id
        and memory.session_id != current_session_id
        and days_since_update > _OLD_SESSION_MIN_DAYS
    ):
        add(PruneReason.OLD_SESSION)

    if (
        kind is MemoryKind.NOTE
        and memory.importance == Importance.LOW
        and days_since_update > _LOW_IMPORTANCE_MIN_DAYS
    ):
        add(PruneReason.LOW_IMPORTANCE)

    if ARCHIVED_TAG in memory.tags and days_since_update > _ARCHIVED_MIN_DAYS:
        add(PruneReason.STALE)

    return reasons


def is_protected(
    memory: Memory, days_since_update: float, reasons: list[PruneReason]
) -> bool:
    """High-value, reasonably fresh memories are only pruned as junk."""
    return (
        memory.importance in _PROTECTED_IMPORTANCE
        and days_since_update < _PROTECTED_MAX_DAYS
        and PruneReason.LOW_CONTENT not in reasons
    )


def analyze_memory(
    memory: Memory,
    current_session_id: str,
    config: PruneConfig,
    now_ms: int,
) -> PruneCandidate | None:
    """Score one memory and return it as a candidate, or None to keep it."""
    days_since_update = days_between(memory.updated_at, now_ms)
    kind = classify_memory(memory)
    reasons = detect_reasons(memory, kind, days_since_update, current_session_id, config)

    score = relevance_score(
        kind,
        memory.importance,
        recency_score(days_since_update),
        access_score(memory.last_accessed, memory.created_at, now_ms),
    )

    if is_protected(memory, days_since_update, reasons):
        return None

    if not reasons:
        if score >= config.min_score_threshold:
            return None
        # A low composite score is enough, but still needs a readable reason.
        reasons.append(PruneReason.STALE)

    return PruneCandidate(
        kind=kind,
        id=memory.id,
        summary=summarize(memory.content),
        content=memory.content,
        reasons=reasons,
        score=score,
        created_at=memory.created_at,
        updated_at=memory.updated_at,
        last_accessed=memory.last_accessed,
        importance=memory.importance,
        tags=list(memory.tags),
    )
