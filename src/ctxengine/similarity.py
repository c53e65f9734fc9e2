"""String similarity used to match related past queries."""

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance (insert, delete, substitute all cost 1)."""
    return Levenshtein.distance(a, b)


def string_similarity(a: str, b: str) -> float:
    """Edit distance normalized by the longer string, in [0, 1].

    Two empty strings are identical (1.0).
    """
    return Levenshtein.normalized_similarity(a, b)
