"""
Local embedding fallback - Single Responsibility: deterministic offline embeddings.

No model, no network: each UTF-16 code unit contributes (unit mod 10) to the
bucket at (index mod D), and the accumulator is L2-normalized. Counting UTF-16
code units (not code points) keeps vectors identical to those stored by
JavaScript clients: a character outside the BMP, such as an emoji, is a
surrogate pair and fills two buckets. Identical input always yields a
bit-identical vector, which makes it usable as the default embedding backend
for development and tests.

NOT a semantic model - two texts score as similar when their character
distributions across buckets line up, nothing more.
"""

from __future__ import annotations

import numpy as np

EMBEDDING_DIM = 64
MAX_EMBED_CHARS = 2000


def utf16_code_units(text: str) -> np.ndarray:
    """UTF-16 code units of text (lone surrogates are kept as-is)."""
    return np.frombuffer(text.encode("utf-16-le", "surrogatepass"), dtype="<u2")


def local_embed(
    text: str,
    dim: int = EMBEDDING_DIM,
    max_chars: int = MAX_EMBED_CHARS,
) -> list[float]:
    """
    Embed text into a unit-norm vector of length dim.

    max_chars caps the number of UTF-16 code units read. An empty text
    produces an all-zero accumulator; its norm is floored to 1, so the
    result is the zero vector.
    """
    acc = np.zeros(dim, dtype=np.float64)
    for i, unit in enumerate(utf16_code_units(text)[:max_chars]):
        acc[i % dim] += int(unit) % 10

    norm = float(np.sqrt(np.dot(acc, acc))) or 1.0
    return (acc / norm).tolist()


class LocalEmbeddings:
    """
    Embedding provider backed by local_embed().

    Implements the EmbeddingProvider protocol.
    """

    def __init__(self, dimensions: int = EMBEDDING_DIM, max_chars: int = MAX_EMBED_CHARS):
        self._dimensions = dimensions
        self._max_chars = max_chars

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> list[float]:
        return local_embed(text, dim=self._dimensions, max_chars=self._max_chars)

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [self.embed(text) for text in texts]
