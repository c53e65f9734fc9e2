"""Summary, suggestion and related-query generation for ranked context."""

from collections import Counter
from collections.abc import Sequence

from .models import ContextItem, ContextKind

KIND_DESCRIPTIONS = {
    ContextKind.FILE: "file content",
    ContextKind.SYMBOL: "code symbols",
    ContextKind.SELECTION: "selected code",
    ContextKind.ERROR: "errors/diagnostics",
    ContextKind.DOCUMENTATION: "documentation",
}

# Query keyword -> follow-up queries worth offering
KEYWORD_ASSOCIATIONS = {
    "function": ["class", "interface", "type"],
    "error": ["exception", "try catch", "debugging"],
}


def summarize(items: Sequence[ContextItem], query: str) -> str:
    """Describe how many items of each kind were found."""
    counts = Counter(item.kind for item in items)
    descriptions = ", ".join(
        f"{count} {KIND_DESCRIPTIONS.get(kind, kind.value)} items"
        for kind, count in counts.items()
    )
    return f'Found {len(items)} relevant context items for "{query}": {descriptions}'


def suggest_actions(
    items: Sequence[ContextItem],
    narrow_threshold: int = 10,
    broaden_threshold: int = 3,
) -> list[str]:
    suggestions = []

    if any(item.kind == ContextKind.ERROR for item in items):
        suggestions.append("Review the errors and diagnostics found")

    if any(item.kind == ContextKind.SYMBOL for item in items):
        suggestions.append("Explore the related symbols and their definitions")

    if len(items) > narrow_threshold:
        suggestions.append("Consider refining your query for more specific results")

    if len(items) < broaden_threshold:
        suggestions.append(
            "Try a broader query or check if the workspace is fully indexed"
        )

    return suggestions


def related_queries(
    items: Sequence[ContextItem],
    query: str,
    limit: int = 5,
) -> list[str]:
    """Symbol names from the results plus keyword associations, deduplicated."""
    names = [
        name
        for name in (item.symbol_name for item in items)
        if name and name != query
    ][:limit]

    candidates = list(names)
    for keyword, associated in KEYWORD_ASSOCIATIONS.items():
        if keyword in query:
            candidates.extend(associated)

    return list(dict.fromkeys(candidates))[:limit]
