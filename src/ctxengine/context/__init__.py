"""Context retrieval, ranking and summarization."""

from .engine import ContextEngine
from .history import SessionHistory
from .models import (
    ContextAnalysis,
    ContextChange,
    ContextItem,
    ContextKind,
    ContextRequest,
    DocumentationMetadata,
    EngineStatus,
    ErrorMetadata,
    ItemPosition,
    Selection,
    SymbolMetadata,
)

__all__ = [
    "ContextEngine",
    "SessionHistory",
    "ContextAnalysis",
    "ContextChange",
    "ContextItem",
    "ContextKind",
    "ContextRequest",
    "DocumentationMetadata",
    "EngineStatus",
    "ErrorMetadata",
    "ItemPosition",
    "Selection",
    "SymbolMetadata",
]
