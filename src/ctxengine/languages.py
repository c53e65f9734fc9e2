"""Extension to language mapping."""

from pathlib import PurePath

PLAINTEXT = "plaintext"

EXTENSION_MAP = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".rs": "rust",
    ".swift": "swift",
    ".java": "java",
    ".go": "go",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".cs": "csharp",
    ".sql": "sql",
}


def detect_language(path: str) -> str:
    """Infer a language from the file extension, or ``plaintext``."""
    return EXTENSION_MAP.get(PurePath(path).suffix.lower(), PLAINTEXT)
