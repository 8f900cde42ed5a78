from __future__ import annotations

from delta.core.prune.models import Memory, MemoryKind

KV_TAG = "kv"

NOTE_CATEGORY_TAGS: frozenset[str] = frozenset({
    "issue", "convention", "workflow", "reminder", "general",
})


def classify_memory(memory: Memory) -> MemoryKind:
    """Map a memory to its display kind by tag inspection.

    ``kv`` wins over note categories; anything else (commits,
    auto-captured session logs) is an episode.
    """
    tags = set(memory.tags)
    if KV_TAG in tags:
        return MemoryKind.KV
    if tags & NOTE_CATEGORY_TAGS:
        return MemoryKind.NOTE
    return MemoryKind.EPISODE


def kind_label(kind: MemoryKind) -> str:
    match kind:
        case MemoryKind.KV:
            return "kv"
        case MemoryKind.NOTE:
            return "notes"
        case MemoryKind.EPISODE:
            return "episodes"
