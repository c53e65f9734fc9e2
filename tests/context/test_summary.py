"""Tests for summaries, suggestions and related queries."""

from ctxengine.context.models import (
    ContextItem,
    ContextKind,
    DocumentationMetadata,
    SymbolMetadata,
)
from ctxengine.context.summary import related_queries, suggest_actions, summarize


def make_item(
    kind: ContextKind, symbol_name: str | None = None, n: int = 0
) -> ContextItem:
    return ContextItem(
        id=f"{kind.value}-{n}",
        kind=kind,
        source_path="a.ts",
        text="",
        language="typescript",
        relevance_score=0.5,
        metadata=SymbolMetadata(symbol_name=symbol_name) if symbol_name else None,
    )


class TestSummarize:
    def test_counts_in_first_appearance_order(self) -> None:
        items = [
            make_item(ContextKind.SELECTION),
            make_item(ContextKind.SYMBOL, n=1),
            make_item(ContextKind.SYMBOL, n=2),
            make_item(ContextKind.ERROR),
        ]

        assert summarize(items, "parseConfig") == (
            'Found 4 relevant context items for "parseConfig": '
            "1 selected code items, 2 code symbols items, 1 errors/diagnostics items"
        )

    def test_empty(self) -> None:
        assert summarize([], "q") == 'Found 0 relevant context items for "q": '


class TestSuggestActions:
    def test_errors_and_symbols(self) -> None:
        items = [make_item(ContextKind.ERROR, n=n) for n in range(3)] + [
            make_item(ContextKind.SYMBOL)
        ]

        assert suggest_actions(items) == [
            "Review the errors and diagnostics found",
            "Explore the related symbols and their definitions",
        ]

    def test_too_many_items(self) -> None:
        items = [make_item(ContextKind.FILE, n=n) for n in range(11)]

        assert suggest_actions(items) == [
            "Consider refining your query for more specific results"
        ]

    def test_too_few_items(self) -> None:
        assert suggest_actions([]) == [
            "Try a broader query or check if the workspace is fully indexed"
        ]

    def test_thresholds_are_exclusive(self) -> None:
        ten = [make_item(ContextKind.FILE, n=n) for n in range(10)]
        three = ten[:3]

        assert suggest_actions(ten) == []
        assert suggest_actions(three) == []


class TestRelatedQueries:
    def test_symbol_names_excluding_query(self) -> None:
        items = [
            make_item(ContextKind.SYMBOL, "parseConfig"),
            make_item(ContextKind.SYMBOL, "loadConfig", n=1),
            make_item(ContextKind.FILE),
        ]

        assert related_queries(items, "parseConfig") == ["loadConfig"]

    def test_keyword_associations(self) -> None:
        assert related_queries([], "error handling") == [
            "exception",
            "try catch",
            "debugging",
        ]

    def test_deduplicated_and_capped(self) -> None:
        items = [
            make_item(ContextKind.SYMBOL, name, n=n)
            for n, name in enumerate(["a", "b", "a", "class", "c", "d", "e"])
        ]

        result = related_queries(items, "function lookup")

        assert result == ["a", "b", "class", "c", "interface"]

    def test_documentation_symbol_names_count(self) -> None:
        item = ContextItem(
            id="docs",
            kind=ContextKind.DOCUMENTATION,
            source_path="a.ts",
            text="",
            language="markdown",
            relevance_score=0.7,
            metadata=DocumentationMetadata(symbol_name="hover topic"),
        )

        assert related_queries([item], "q") == ["hover topic"]
