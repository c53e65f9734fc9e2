"""ctxengine Configuration Module.

Provides centralized configuration for the context engine.
All settings support environment variable overrides with CTXENGINE_ prefix.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScoringSettings(BaseModel):
    """Base relevance scores per candidate source."""

    selection_score: float = Field(
        default=1.0,
        description="Score for the current selection (ceiling)",
    )
    file_score: float = Field(
        default=0.7,
        description="Score for the whole current file",
    )
    file_with_selection_score: float = Field(
        default=0.9,
        description="Score for the whole current file when a selection exists",
    )
    file_symbol_score: float = Field(
        default=0.8,
        description="Score for symbols declared in the current file",
    )
    symbol_search_base: float = Field(default=0.8)
    symbol_search_span: float = Field(
        default=0.2,
        description="Weight of (1 - match score) for symbol search hits",
    )
    workspace_search_base: float = Field(default=0.6)
    workspace_search_span: float = Field(
        default=0.3,
        description="Weight of (1 - match score) for workspace search hits",
    )
    error_score: float = Field(default=0.8)
    documentation_score: float = Field(default=0.7)
    historical_decay: float = Field(
        default=0.5,
        description="Multiplier applied to items resurfaced from history",
    )


class SourceSettings(BaseModel):
    """Limits applied by the candidate sources."""

    file_content_max_chars: int = Field(
        default=5000,
        description="Maximum characters kept from the whole current file",
    )
    file_symbol_limit: int = Field(default=10)
    symbol_search_limit: int = Field(default=10)
    diagnostic_limit: int = Field(default=5)
    diagnostic_context_lines: int = Field(
        default=2,
        description="Lines shown above and below a diagnostic",
    )
    search_context_lines: int = Field(
        default=3,
        description="Lines shown above and below a search hit",
    )
    default_snippet_lines: int = Field(
        default=10,
        description="Leading lines used when a hit carries no line number",
    )


class HistorySettings(BaseModel):
    """Settings for the session history tracker."""

    max_queries: int = Field(default=100)
    max_items: int = Field(default=500)
    items_per_request: int = Field(
        default=5,
        description="Top ranked items folded into history per request",
    )
    similarity_threshold: float = Field(
        default=0.3,
        description="Minimum normalized similarity for a past query to count",
    )
    similar_query_limit: int = Field(default=3)
    items_per_similar_query: int = Field(default=2)


class RankingSettings(BaseModel):
    """Settings for ranking and analysis output."""

    default_max_items: int = Field(default=20)
    deduplicate: bool = Field(
        default=False,
        description="Drop items sharing (source_path, kind, line) after ranking",
    )
    max_related_queries: int = Field(default=5)
    narrow_query_threshold: int = Field(
        default=10,
        description="Suggest narrowing the query above this many items",
    )
    broaden_query_threshold: int = Field(
        default=3,
        description="Suggest broadening the query below this many items",
    )


# Default config.yaml content
DEFAULT_CONFIG = """\
# ctxengine configuration

log_level: info
log_format: console

scoring:
  historical_decay: 0.5

history:
  max_queries: 100
  max_items: 500

ranking:
  default_max_items: 20
  deduplicate: false
"""


class ContextEngineSettings(BaseSettings):
    """Context engine configuration.

    All settings can be overridden via environment variables with CTXENGINE_
    prefix. For example, CTXENGINE_HISTORY__MAX_QUERIES=50 caps the query
    history at 50 entries.
    """

    model_config = SettingsConfigDict(
        env_prefix="CTXENGINE_",
        env_nested_delimiter="__",
    )

    workspace_root: Path = Field(
        default_factory=Path.cwd,
        description="Root directory used to resolve relative paths",
    )
    log_level: str = Field(
        default="info",
        description="Logging level (debug, info, warning, error)",
    )
    log_format: str = Field(
        default="console",
        description="Log output format (console or json)",
    )
    concurrent_sources: bool = Field(
        default=True,
        description="Run candidate sources concurrently instead of in order",
    )

    # Nested settings
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    sources: SourceSettings = Field(default_factory=SourceSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    ranking: RankingSettings = Field(default_factory=RankingSettings)


def load_settings(path: Path | str | None = None) -> ContextEngineSettings:
    """Load settings, overlaying a YAML file when one is given.

    Keys present in the file take precedence over environment variables.
    """
    if path is None:
        return ContextEngineSettings()

    config_path = Path(path).expanduser()
    with open(config_path, encoding="utf-8") as f:
        data: Any = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    return ContextEngineSettings(**data)


# Module-level singleton
settings = ContextEngineSettings()
