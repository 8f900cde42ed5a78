from __future__ import annotations

import math

from delta.core.prune.models import Importance, MemoryKind

MS_PER_DAY = 86_400_000

IMPORTANCE_WEIGHTS: dict[Importance, float] = {
    Importance.CRITICAL: 1.0,
    Importance.HIGH: 0.8,
    Importance.NORMAL: 0.5,
    Importance.LOW: 0.2,
}

# (max days since update, score), newest first
_RECENCY_STEPS: tuple[tuple[float, float], ...] = (
    (1, 1.0),
    (7, 0.9),
    (14, 0.7),
    (30, 0.5),
    (60, 0.3),
    (90, 0.2),
)
_RECENCY_FLOOR = 0.1

_NEVER_ACCESSED = 0.1
_ACCESS_BOOST = 0.3

# (importance, recency, access) weights per kind
_NOTE_WEIGHTS = (0.30, 0.35, 0.35)
_TRANSIENT_WEIGHTS = (0.10, 0.45, 0.45)


def days_between(earlier_ms: int, now_ms: int) -> float:
    return (now_ms - earlier_ms) / MS_PER_DAY


def recency_score(days_since_update: float) -> float:
    """Step curve in [0.1, 1.0]; newer is higher."""
    for max_days, score in _RECENCY_STEPS:
        if days_since_update <= max_days:
            return score
    return _RECENCY_FLOOR


def access_score(last_accessed: int, created_at: int, now_ms: int) -> float:
    """How recently a memory was recalled, relative to its total age.

    Recalled just now scores 1.0; recalled only around creation time
    scores low; never recalled scores 0.1.
    """
    if last_accessed == 0:
        return _NEVER_ACCESSED
    total_age = now_ms - created_at
    if total_age <= 0:
        return 1.0
    ratio = 1 - (now_ms - last_accessed) / total_age
    return max(0.1, min(1.0, ratio + _ACCESS_BOOST))


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def relevance_score(
    kind: MemoryKind, importance: Importance, recency: float, access: float
) -> int:
    """Composite 0-100 relevance. Lower means more prunable.

    Importance carries real weight only for notes; episodes and kv entries
    are transient and judged mostly on recency and access.
    """
    w_importance, w_recency, w_access = (
        _NOTE_WEIGHTS if kind is MemoryKind.NOTE else _TRANSIENT_WEIGHTS
    )
    weight = IMPORTANCE_WEIGHTS.get(importance, IMPORTANCE_WEIGHTS[Importance.NORMAL])
    composite = w_importance * weight + w_recency * recency + w_access * access
    return max(0, min(100, round_half_up(composite * 100)))
