"""Vector helpers for embedding comparison."""

import math
from typing import Any, Sequence


def is_valid_embedding(value: Any) -> bool:
    """
    Check that a value is a usable embedding.

    A usable embedding is a non-empty list or tuple of finite
    int/float values. Booleans are not numbers here.
    """
    if not isinstance(value, (list, tuple)) or not value:
        return False
    for x in value:
        if isinstance(x, bool) or not isinstance(x, (int, float)):
            return False
        if not math.isfinite(x):
            return False
    return True


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Compute cosine similarity between two vectors.

    Raises:
        ValueError: if the vectors differ in length or either has
            zero magnitude
    """
    if len(a) != len(b):
        raise ValueError(f"Dimension mismatch: {len(a)} != {len(b)}")
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = sum(x * x for x in a) ** 0.5
    norm_b = sum(x * x for x in b) ** 0.5
    if norm_a == 0 or norm_b == 0:
        raise ValueError("Cannot compare a zero-magnitude vector")
    # Rounding can push |v.v| a hair past 1.0
    return max(-1.0, min(1.0, dot / (norm_a * norm_b)))
