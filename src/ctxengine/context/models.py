"""Data models for context retrieval."""

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar

from ctxengine.errors import InvalidContextTypeError, InvalidRequestError


class ContextKind(str, Enum):
    """Kind of retrieved snippet."""

    FILE = "file"
    SYMBOL = "symbol"
    SELECTION = "selection"
    ERROR = "error"
    DOCUMENTATION = "documentation"


ALL_KINDS: frozenset[ContextKind] = frozenset(ContextKind)


@dataclass(frozen=True)
class ItemPosition:
    """One-based line span of an item inside its source file."""

    line: int
    column: int | None = None
    end_line: int | None = None
    end_column: int | None = None


@dataclass(frozen=True)
class Reference:
    file: str
    line: int
    column: int


@dataclass(frozen=True)
class SymbolMetadata:
    """Metadata for file, selection and symbol items."""

    tag: ClassVar[str] = "symbol"

    symbol_name: str | None = None
    symbol_kind: str | None = None
    references: tuple[Reference, ...] = ()


@dataclass(frozen=True)
class ErrorMetadata:
    """Metadata for diagnostic items."""

    tag: ClassVar[str] = "error"

    error_type: str = "unknown"
    message: str = ""


@dataclass(frozen=True)
class DocumentationMetadata:
    """Metadata for documentation items."""

    tag: ClassVar[str] = "documentation"

    symbol_name: str | None = None
    documentation: str = ""


ItemMetadata = SymbolMetadata | ErrorMetadata | DocumentationMetadata


@dataclass(frozen=True)
class ContextItem:
    """A single retrieved snippet."""

    id: str  # encodes origin: source, path and line
    kind: ContextKind
    source_path: str
    text: str
    language: str
    relevance_score: float
    position: ItemPosition | None = None
    metadata: ItemMetadata | None = None

    @property
    def symbol_name(self) -> str | None:
        return getattr(self.metadata, "symbol_name", None)

    @property
    def line(self) -> int | None:
        return self.position.line if self.position else None

    def mentions(self, term: str) -> bool:
        """Case-insensitive substring match on the text or symbol name."""
        needle = term.lower()
        if needle in self.text.lower():
            return True
        name = self.symbol_name
        return name is not None and needle in name.lower()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value,
            "source_path": self.source_path,
            "text": self.text,
            "language": self.language,
            "relevance_score": self.relevance_score,
            "position": asdict(self.position) if self.position else None,
            "metadata": None,
        }
        if self.metadata is not None:
            data["metadata"] = {"type": self.metadata.tag, **asdict(self.metadata)}
        return data


@dataclass(frozen=True)
class Selection:
    """Selected text with one-based line bounds."""

    text: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int


def _coerce_kinds(kinds: Iterable[ContextKind | str]) -> frozenset[ContextKind]:
    valid = [k.value for k in ContextKind]
    coerced = set()
    for kind in kinds:
        try:
            coerced.add(ContextKind(kind))
        except ValueError:
            raise InvalidContextTypeError(str(kind), valid) from None
    return frozenset(coerced)


@dataclass
class ContextRequest:
    """Caller-supplied query plus cursor state.

    ``max_items`` of None means the configured default.
    """

    query: str
    current_file: str | None = None
    current_selection: Selection | None = None
    max_items: int | None = None
    include_types: Iterable[ContextKind | str] = ALL_KINDS
    workspace_scope: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.query, str) or not self.query.strip():
            raise InvalidRequestError("query must be a non-empty string")
        if self.max_items is not None and self.max_items < 1:
            raise InvalidRequestError(
                f"max_items must be positive, got {self.max_items}"
            )
        self.include_types = _coerce_kinds(self.include_types)

    def includes(self, kind: ContextKind) -> bool:
        return kind in self.include_types  # type: ignore[operator]


@dataclass
class ContextAnalysis:
    """Ranked, bounded context plus human-facing summary."""

    items: list[ContextItem]
    total_relevance: float
    summary: str
    suggestions: list[str] = field(default_factory=list)
    related_queries: list[str] = field(default_factory=list)

    @classmethod
    def failed(cls, error: BaseException) -> "ContextAnalysis":
        """Degraded analysis returned when the pipeline itself fails."""
        return cls(
            items=[],
            total_relevance=0.0,
            summary=f"Context analysis failed: {error}",
            suggestions=[
                "Try a simpler query",
                "Check if the workspace is properly indexed",
            ],
            related_queries=[],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "total_relevance": self.total_relevance,
            "summary": self.summary,
            "suggestions": list(self.suggestions),
            "related_queries": list(self.related_queries),
        }


@dataclass(frozen=True)
class EngineStatus:
    is_analyzing: bool
    history_size: int
    last_query: str | None = None


@dataclass(frozen=True)
class ContextChange:
    """Forwarded diagnostics/symbols change notification."""

    type: str  # "diagnostics" or "symbols"
    file_path: str
    data: list[Any]
