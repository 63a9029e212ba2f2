from __future__ import annotations

from collections.abc import Callable, Sequence

Scorer = Callable[[str, str], "int | None"]


def fuzzy_score(query: str, candidate: str) -> int | None:
    if not query:
        return 0
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in "/_- .":
            score += 35
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score


def best_field_score(term: str, fields: Sequence[str | None], scorer: Scorer = fuzzy_score) -> int | None:
    """Highest score of ``term`` across ``fields``; ``None`` when none match."""
    best: int | None = None
    for value in fields:
        if not value:
            continue
        score = scorer(term, value)
        if score is not None and (best is None or score > best):
            best = score
    return best


def rank_items(
    query: str,
    fields_per_item: Sequence[Sequence[str | None]],
    scorer: Scorer = fuzzy_score,
) -> list[tuple[int, int]]:
    """Rank items against a whitespace-separated multi-term query.

    Every term must match at least one field of an item. Returns
    ``(score, index)`` pairs, best first; equal scores keep insertion order.
    """
    terms = query.split()
    if not terms:
        return [(0, idx) for idx in range(len(fields_per_item))]

    scored: list[tuple[int, int]] = []
    for idx, fields in enumerate(fields_per_item):
        total = 0
        for term in terms:
            score = best_field_score(term, fields, scorer)
            if score is None:
                break
            total += score
        else:
            scored.append((total, idx))
    scored.sort(key=lambda item: -item[0])
    return scored
