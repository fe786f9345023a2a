"""
Cosine similarity between embeddings.

Vectors of different lengths are compared over their overlapping prefix.
This keeps ranking working while stored embeddings come from more than one
provider, but it also hides dimension mismatches - callers that care
should compare lengths themselves (see HybridSearch).
"""

from __future__ import annotations

from typing import Any

import numpy as np


def _as_vector(value: Any) -> np.ndarray | None:
    """Coerce to a 1-D float array, or None if value is not a numeric vector."""
    if isinstance(value, (str, bytes)) or value is None:
        return None
    try:
        arr = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError):
        return None
    if arr.ndim != 1 or not np.all(np.isfinite(arr)):
        return None
    return arr


def cosine_similarity(a: Any, b: Any) -> float:
    """
    Cosine similarity of a and b over min(len(a), len(b)) components.

    Returns 0.0 when either vector has zero norm or is not a valid
    numeric vector.
    """
    va = _as_vector(a)
    vb = _as_vector(b)
    if va is None or vb is None:
        return 0.0

    n = min(len(va), len(vb))
    va, vb = va[:n], vb[:n]

    denom = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.dot(va, vb) / denom)
