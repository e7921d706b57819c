"""Levenshtein-based title similarity."""

import math
import re


def normalize_title(title: str) -> str:
    """Lowercase, keeping only word characters and single spaces."""
    text = title.lower()
    text = re.sub(r"[^\w\s]", "", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def levenshtein_distance(str1: str, str2: str) -> int:
    """Edit distance with unit costs for substitution, insertion and deletion.

    Rows run over ``str2`` and columns over ``str1``; only the previous row is kept.
    """
    previous = list(range(len(str1) + 1))
    for i in range(1, len(str2) + 1):
        current = [i] + [0] * len(str1)
        for j in range(1, len(str1) + 1):
            if str2[i - 1] == str1[j - 1]:
                current[j] = previous[j - 1]
            else:
                current[j] = min(
                    previous[j - 1] + 1,  # substitution
                    current[j - 1] + 1,   # insertion
                    previous[j] + 1,      # deletion
                )
        previous = current
    return previous[len(str1)]


def similarity(str1: str, str2: str) -> float:
    """Edit-distance similarity (0-1) of two already-normalized strings.

    Two empty strings are identical (1.0).
    """
    max_length = max(len(str1), len(str2))
    if max_length == 0:
        return 1.0
    return (max_length - levenshtein_distance(str1, str2)) / max_length


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score(title1: str, title2: str) -> int:
    """Similarity of two raw titles on a 0-100 scale."""
    ratio = similarity(normalize_title(title1), normalize_title(title2))
    return max(0, min(100, round_half_up(ratio * 100)))
