"""Async file access and snippet extraction."""

from pathlib import Path

import aiofiles
import structlog

from ctxengine.errors import ProviderError

from .base import FileReader

logger = structlog.get_logger()

READ_FAILED_PLACEHOLDER = "Failed to read file content"


class LocalFileReader(FileReader):
    """Read files from the local filesystem.

    Relative paths are resolved against ``root``.
    """

    def __init__(self, root: Path | str | None = None) -> None:
        self.root = Path(root).expanduser() if root is not None else None

    def resolve(self, path: str) -> Path:
        candidate = Path(path).expanduser()
        if self.root is not None and not candidate.is_absolute():
            return self.root / candidate
        return candidate

    async def read_text(self, path: str) -> str:
        resolved = self.resolve(path)
        try:
            async with aiofiles.open(
                resolved, encoding="utf-8", errors="replace"
            ) as f:
                return await f.read()
        except OSError as e:
            raise ProviderError("file_reader", f"cannot read {resolved}: {e}") from e


def head_snippet(content: str, lines: int = 10) -> str:
    """Return the first ``lines`` lines of ``content``."""
    return "\n".join(content.split("\n")[:lines])


def snippet_around(
    content: str,
    line: int | None,
    context_lines: int = 2,
    default_lines: int = 10,
) -> str:
    """Return a window of lines around a one-based ``line``.

    A missing or zero line falls back to the head of the file.
    """
    if not line:
        return head_snippet(content, default_lines)

    lines = content.split("\n")
    start = max(0, line - context_lines - 1)
    end = min(len(lines), line + context_lines)
    return "\n".join(lines[start:end])


def span_snippet(content: str, start_line: int, end_line: int) -> str:
    """Return zero-based lines ``start_line`` through ``end_line`` inclusive."""
    lines = content.split("\n")
    end = min(end_line, len(lines) - 1)
    return "\n".join(lines[start_line : end + 1])


async def read_snippet(
    reader: FileReader,
    path: str,
    line: int | None,
    context_lines: int = 2,
    default_lines: int = 10,
) -> str:
    """Read a snippet, substituting a placeholder when the file is unreadable."""
    try:
        content = await reader.read_text(path)
    except ProviderError as e:
        logger.debug("snippet_read_failed", path=path, error=str(e))
        return READ_FAILED_PLACEHOLDER
    return snippet_around(content, line, context_lines, default_lines)
