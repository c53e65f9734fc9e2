"""Relevance ranking, bounding and optional deduplication."""

from collections.abc import Sequence

from .models import ContextItem


def rank_items(
    items: Sequence[ContextItem],
    max_items: int,
    deduplicate: bool = False,
) -> tuple[list[ContextItem], float]:
    """Sort by relevance (highest first) and keep the top ``max_items``.

    ``sorted`` is stable, so equal scores keep their collection order.
    Deduplication, when enabled, happens before bounding so that dropped
    duplicates free their slots. Returns the bounded list and the sum of
    its scores.
    """
    ranked = sorted(items, key=lambda item: item.relevance_score, reverse=True)
    if deduplicate:
        ranked = deduplicate_items(ranked)
    bounded = ranked[:max_items]
    return bounded, sum(item.relevance_score for item in bounded)


def _get_dedup_key(item: ContextItem) -> tuple[str, str, int | None]:
    return (item.source_path, item.kind.value, item.line)


def deduplicate_items(items: Sequence[ContextItem]) -> list[ContextItem]:
    """Keep the first item for each ``(source_path, kind, line)`` key.

    Run on a ranked list so the survivor is the highest scored one.
    """
    seen: set[tuple[str, str, int | None]] = set()
    unique: list[ContextItem] = []

    for item in items:
        key = _get_dedup_key(item)
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)

    return unique
