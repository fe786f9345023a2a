"""
Unit Tests for cosine_similarity.

Covers symmetry, the prefix-truncation rule for vectors of different
lengths, and the 0.0 result for degenerate or invalid input.
"""

import math

import numpy as np
import pytest

from knowledge_hub.embeddings import cosine_similarity


class TestCosineSimilarity:
    """Test cosine similarity semantics."""

    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)

    def test_symmetric(self):
        a, b = [0.3, -0.2, 0.9], [0.1, 0.5, 0.4]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_scale_invariant(self):
        assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)

    def test_accepts_numpy_arrays(self):
        assert cosine_similarity(np.array([1.0, 0.0]), [1.0, 0.0]) == pytest.approx(1.0)

    def test_returns_plain_float(self):
        assert type(cosine_similarity([1.0], [1.0])) is float


class TestPrefixTruncation:
    """Vectors of different lengths are compared over their shared prefix."""

    def test_longer_vector_is_truncated(self):
        # Only the first two components are compared: [1, 0] vs [1, 0]
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 5.0]) == pytest.approx(1.0)

    def test_truncation_uses_prefix_norms(self):
        a = [3.0, 4.0]
        b = [3.0, 0.0, 100.0]
        expected = 9.0 / (5.0 * 3.0)
        assert cosine_similarity(a, b) == pytest.approx(expected)

    def test_zero_prefix_yields_zero(self):
        assert cosine_similarity([0.0, 0.0], [0.0, 0.0, 1.0]) == 0.0


class TestDegenerateInput:
    """Degenerate or malformed vectors score 0.0 rather than raising."""

    @pytest.mark.parametrize(
        "a,b",
        [
            ([0.0, 0.0], [1.0, 1.0]),
            ([], [1.0]),
            (None, [1.0]),
            ("abc", "abc"),
            ([1.0, "x"], [1.0, 1.0]),
            ([[1.0, 2.0]], [[1.0, 2.0]]),
            ([math.nan, 1.0], [1.0, 1.0]),
            ([math.inf, 1.0], [1.0, 1.0]),
        ],
    )
    def test_returns_zero(self, a, b):
        assert cosine_similarity(a, b) == 0.0
