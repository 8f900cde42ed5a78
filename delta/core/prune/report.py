from __future__ import annotations

from delta.core.prune.classify import kind_label
from delta.core.prune.models import REASON_LABELS, MemoryKind, PruneAnalysis


def format_report(analysis: PruneAnalysis, limit: int = 20) -> str:
    """Plain-text summary of an analysis, for logs and non-interactive use."""
    stats = analysis.stats
    lines = [
        f"Analyzed {stats.total.episodes} episodes, {stats.total.notes} notes, "
        f"{stats.total.kv} kv in {stats.analysis_time_ms:.0f}ms",
        f"{stats.total_candidates} prune candidates"
        + _format_kind_counts(stats.by_kind),
    ]

    reason_counts = [f"{r.value}={n}" for r, n in stats.by_reason.items() if n]
    if reason_counts:
        lines.append("Reasons: " + " ".join(reason_counts))

    shown = analysis.candidates[:limit] if limit > 0 else analysis.candidates
    for c in shown:
        labels = ", ".join(REASON_LABELS[r] for r in c.reasons)
        lines.append(f"- [{c.score:3d}] {c.kind.value} #{c.id}: {c.summary} ({labels})")

    hidden = len(analysis.candidates) - len(shown)
    if hidden > 0:
        lines.append(f"... and {hidden} more")
    return "\n".join(lines)


def _format_kind_counts(by_kind: dict[MemoryKind, int]) -> str:
    parts = [f"{kind_label(kind)}: {n}" for kind, n in by_kind.items() if n]
    if not parts:
        return ""
    return " (" + ", ".join(parts) + ")"
