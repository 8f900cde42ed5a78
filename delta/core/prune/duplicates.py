from __future__ import annotations

from collections.abc import Sequence

from delta.core.prune._text import word_tokens
from delta.core.prune.models import PruneCandidate, PruneReason


def token_set_similarity(tokens_a: frozenset[str], tokens_b: frozenset[str]) -> float:
    if not tokens_a and not tokens_b:
        return 1.0
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


def jaccard_similarity(a: str, b: str) -> float:
    """Word-set Jaccard index. Two empty texts are identical."""
    return token_set_similarity(word_tokens(a), word_tokens(b))


def mark_duplicates(candidates: Sequence[PruneCandidate], threshold: float) -> int:
    """Flag the weaker member of each near-duplicate pair of the same kind.

    On equal scores the earlier candidate is flagged. O(n^2), so run it on
    the already-filtered candidate list. Returns the number of pairs found.
    """
    tokens = [word_tokens(c.content) for c in candidates]
    pairs = 0
    for i, a in enumerate(candidates):
        for j in range(i + 1, len(candidates)):
            b = candidates[j]
            if a.kind is not b.kind:
                continue
            if token_set_similarity(tokens[i], tokens[j]) < threshold:
                continue
            pairs += 1
            # TODO: equal scores always drop the earlier record, even when it
            # is the more complete one; revisit once product decides a tie-break.
            weaker = a if a.score <= b.score else b
            weaker.add_reason(PruneReason.DUPLICATE)
    return pairs
