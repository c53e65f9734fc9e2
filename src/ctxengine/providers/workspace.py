"""Local workspace index and a symbol-only language server built on it.

These back the CLI when no external language server or search service is
available. Symbols are found with per-language regular expressions and
search scores follow the distance convention of ``SearchMatch`` (0.0 is an
exact match).
"""

import os
import re
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path

import structlog

from ctxengine.errors import ProviderError
from ctxengine.languages import EXTENSION_MAP, detect_language
from ctxengine.similarity import string_similarity

from .base import (
    SYMBOLS_CHANGED,
    Diagnostic,
    DocumentSymbol,
    FileReader,
    Hover,
    IndexedFile,
    LanguageServer,
    Position,
    Range,
    SearchIndex,
    SearchMatch,
    SearchResult,
    SearchType,
)
from .files import LocalFileReader

logger = structlog.get_logger()

_PYTHON_PATTERNS = [
    ("function", re.compile(r"^\s*(?:async\s+)?def\s+(\w+)")),
    ("class", re.compile(r"^\s*class\s+(\w+)")),
    ("constant", re.compile(r"^([A-Z][A-Z0-9_]+)\s*(?::[^=]+)?=")),
]

_SCRIPT_PATTERNS = [
    (
        "function",
        re.compile(
            r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s+(\w+)"
        ),
    ),
    (
        "class",
        re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(\w+)"),
    ),
    ("interface", re.compile(r"^\s*(?:export\s+)?interface\s+(\w+)")),
    ("type", re.compile(r"^\s*(?:export\s+)?type\s+(\w+)\s*(?:<[^>]*>)?\s*=")),
    ("enum", re.compile(r"^\s*(?:export\s+)?(?:const\s+)?enum\s+(\w+)")),
    # arrow functions bound to a const
    (
        "function",
        re.compile(
            r"^\s*(?:export\s+)?const\s+(\w+)\s*=\s*(?:async\s+)?\([^)]*\)\s*=>"
        ),
    ),
    ("constant", re.compile(r"^\s*(?:export\s+)?const\s+([A-Z][A-Z0-9_]+)\s*=")),
]

_GENERIC_PATTERNS = [
    ("class", re.compile(r"\b(?:class|struct|interface|trait)\s+(\w+)")),
    ("enum", re.compile(r"\benum\s+(\w+)")),
    ("function", re.compile(r"\b(?:fn|func|function|def)\s+(\w+)")),
]

SYMBOL_PATTERNS = {
    "python": _PYTHON_PATTERNS,
    "typescript": _SCRIPT_PATTERNS,
    "javascript": _SCRIPT_PATTERNS,
}

# Content matches kept per file
MAX_LINE_MATCHES = 3

# Fuzzy symbol matches below this similarity are ignored
MIN_SYMBOL_SIMILARITY = 0.5


@dataclass(frozen=True)
class IndexedSymbol:
    """A symbol found in a workspace file (zero-based positions)."""

    name: str
    kind: str
    path: str
    line: int
    column: int
    source_line: str

    @property
    def range(self) -> Range:
        return Range(
            start=Position(self.line, self.column),
            end=Position(self.line, self.column + len(self.name)),
        )


@dataclass
class IndexingStats:
    files_indexed: int = 0
    symbols_indexed: int = 0
    errors: list[str] = field(default_factory=list)


def extract_symbols(path: str, content: str) -> list[IndexedSymbol]:
    """Find declarations in ``content`` using the patterns for its language."""
    patterns = SYMBOL_PATTERNS.get(detect_language(path), _GENERIC_PATTERNS)
    symbols = []

    for line_no, line in enumerate(content.split("\n")):
        for kind, pattern in patterns:
            match = pattern.search(line)
            if match:
                symbols.append(
                    IndexedSymbol(
                        name=match.group(1),
                        kind=kind,
                        path=path,
                        line=line_no,
                        column=match.start(1),
                        source_line=line.strip(),
                    )
                )
                break

    return symbols


class WorkspaceIndex(SearchIndex):
    """In-memory keyword index over the supported files of a directory."""

    DEFAULT_EXCLUDED_DIRS: set[str] = {
        ".venv",
        "venv",
        "env",
        "node_modules",
        ".git",
        ".hg",
        ".svn",
        "__pycache__",
        ".tox",
        ".nox",
        "dist",
        "build",
        "target",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        "htmlcov",
        ".eggs",
    }

    def __init__(
        self,
        root: Path | str,
        file_reader: FileReader | None = None,
        exclude_patterns: list[str] | None = None,
    ) -> None:
        self.root = Path(root).expanduser()
        self._file_reader = file_reader or LocalFileReader(self.root)
        self._exclude_patterns = exclude_patterns or []
        self._contents: dict[str, str] = {}
        self._symbols: dict[str, list[IndexedSymbol]] = {}

    @property
    def files(self) -> list[str]:
        return sorted(self._contents)

    def relative_path(self, path: str) -> str:
        """Normalize a path to the workspace-relative form used as index key."""
        candidate = Path(path).expanduser()
        if candidate.is_absolute():
            try:
                candidate = candidate.relative_to(self.root)
            except ValueError:
                return candidate.as_posix()
        return candidate.as_posix()

    def symbols_for(self, path: str) -> list[IndexedSymbol] | None:
        return self._symbols.get(self.relative_path(path))

    def content_for(self, path: str) -> str | None:
        return self._contents.get(self.relative_path(path))

    def all_symbols(self) -> list[IndexedSymbol]:
        return [s for symbols in self._symbols.values() for s in symbols]

    async def build(self) -> IndexingStats:
        """Index every supported file under the root."""
        stats = IndexingStats()
        self._contents.clear()
        self._symbols.clear()

        for path in self._find_files():
            try:
                symbols = await self.index_file(path)
            except ProviderError as e:
                stats.errors.append(str(e))
                continue
            stats.files_indexed += 1
            stats.symbols_indexed += len(symbols)

        logger.info(
            "workspace_indexed",
            root=str(self.root),
            files=stats.files_indexed,
            symbols=stats.symbols_indexed,
            errors=len(stats.errors),
        )
        return stats

    async def index_file(self, path: str) -> list[IndexedSymbol]:
        """(Re)index one file and return its symbols."""
        key = self.relative_path(path)
        content = await self._file_reader.read_text(key)
        symbols = extract_symbols(key, content)
        self._contents[key] = content
        self._symbols[key] = symbols
        return symbols

    async def search(
        self,
        query: str,
        type: SearchType = "all",
        max_results: int = 50,
        language: str | None = None,
    ) -> list[SearchResult]:
        needle = query.lower()
        results: list[SearchResult] = []

        if type in ("symbols", "all"):
            results.extend(self._search_symbols(needle, language)[:max_results])
        if type in ("content", "all"):
            results.extend(self._search_content(needle, language)[:max_results])
        if type == "files":
            results.extend(self._search_filenames(needle, language)[:max_results])

        return results[:max_results]

    def _search_symbols(self, needle: str, language: str | None) -> list[SearchResult]:
        scored: list[tuple[float, IndexedSymbol]] = []

        for path, symbols in self._symbols.items():
            if language and detect_language(path) != language:
                continue
            for symbol in symbols:
                name = symbol.name.lower()
                similarity = string_similarity(needle, name)
                if needle not in name and similarity < MIN_SYMBOL_SIMILARITY:
                    continue
                scored.append((1 - similarity, symbol))

        scored.sort(key=lambda pair: pair[0])
        return [
            SearchResult(
                file=IndexedFile(symbol.path, detect_language(symbol.path)),
                matches=[
                    SearchMatch(
                        type="symbol",
                        snippet=symbol.name,
                        score=score,
                        line=symbol.line + 1,
                        column=symbol.column,
                    )
                ],
            )
            for score, symbol in scored
        ]

    def _search_content(self, needle: str, language: str | None) -> list[SearchResult]:
        scored: list[tuple[float, SearchResult]] = []

        for path, content in self._contents.items():
            if language and detect_language(path) != language:
                continue
            matches = []
            for line_no, line in enumerate(content.split("\n")):
                stripped = line.strip()
                if not stripped or needle not in stripped.lower():
                    continue
                matches.append(
                    SearchMatch(
                        type="content",
                        snippet=stripped,
                        # share of the line not covered by the query
                        score=1 - len(needle) / len(stripped),
                        line=line_no + 1,
                        column=line.lower().index(needle),
                    )
                )
                if len(matches) >= MAX_LINE_MATCHES:
                    break
            if matches:
                best = min(match.score for match in matches)
                scored.append(
                    (
                        best,
                        SearchResult(IndexedFile(path, detect_language(path)), matches),
                    )
                )

        scored.sort(key=lambda pair: pair[0])
        return [result for _, result in scored]

    def _search_filenames(
        self, needle: str, language: str | None
    ) -> list[SearchResult]:
        scored: list[tuple[float, SearchResult]] = []

        for path in self._contents:
            if language and detect_language(path) != language:
                continue
            name = Path(path).name.lower()
            if needle not in name:
                continue
            score = 1 - string_similarity(needle, Path(path).stem.lower())
            scored.append(
                (
                    score,
                    SearchResult(
                        IndexedFile(path, detect_language(path)),
                        [SearchMatch(type="filename", snippet=path, score=score)],
                    ),
                )
            )

        scored.sort(key=lambda pair: pair[0])
        return [result for _, result in scored]

    def _find_files(self) -> list[str]:
        """Walk the root, pruning excluded and hidden directories."""
        supported_exts = set(EXTENSION_MAP.keys())
        files: list[str] = []

        try:
            for dirpath, dirnames, filenames in os.walk(
                str(self.root), followlinks=False
            ):
                dirnames[:] = sorted(
                    d
                    for d in dirnames
                    if d not in self.DEFAULT_EXCLUDED_DIRS and not d.startswith(".")
                )

                for filename in sorted(filenames):
                    file_path = Path(dirpath) / filename
                    if file_path.is_symlink():
                        continue
                    if file_path.suffix.lower() not in supported_exts:
                        continue
                    relative = file_path.relative_to(self.root).as_posix()
                    if any(fnmatch(relative, p) for p in self._exclude_patterns):
                        continue
                    files.append(relative)
        except PermissionError as e:
            logger.warning(
                "directory_permission_error", path=str(self.root), error=str(e)
            )

        return files


class WorkspaceLanguageServer(LanguageServer):
    """Language-server stand-in that answers from a ``WorkspaceIndex``.

    It knows declarations only: there are no diagnostics, and hover shows
    the declaration line of a symbol starting on the requested line.
    """

    def __init__(self, index: WorkspaceIndex) -> None:
        super().__init__()
        self.index = index

    async def get_document_symbols(self, path: str) -> list[DocumentSymbol] | None:
        symbols = self.index.symbols_for(path)
        if symbols is None:
            return None
        return [
            DocumentSymbol(name=s.name, kind=s.kind, range=s.range) for s in symbols
        ]

    async def get_diagnostics(self, path: str) -> list[Diagnostic] | None:
        return []

    async def get_hover(self, path: str, position: Position) -> Hover | None:
        for symbol in self.index.symbols_for(path) or []:
            if symbol.line == position.line:
                language = detect_language(path)
                return Hover(
                    contents={
                        "kind": "markdown",
                        "value": f"```{language}\n{symbol.source_line}\n```",
                    }
                )
        return None

    async def get_completions(self, path: str, position: Position) -> list[str]:
        content = self.index.content_for(path)
        if content is None:
            return []

        lines = content.split("\n")
        if position.line >= len(lines):
            return []
        before = lines[position.line][: position.character]
        match = re.search(r"(\w+)$", before)
        prefix = match.group(1) if match else ""

        names = {
            symbol.name
            for symbol in self.index.all_symbols()
            if symbol.name.startswith(prefix) and symbol.name != prefix
        }
        return sorted(names)

    async def refresh(self, path: str) -> list[DocumentSymbol]:
        """Re-index ``path`` and notify ``symbols_changed`` subscribers."""
        await self.index.index_file(path)
        symbols = await self.get_document_symbols(path) or []
        self.notify(SYMBOLS_CHANGED, self.index.relative_path(path), symbols)
        return symbols
