"""
Services module - the orchestration layer.

- AugmentationPipeline: best-effort background enrichment
- HybridSearch: text + semantic retrieval
- QAService: question answering over the corpus
- DocumentService: CRUD with enrichment hooks
"""

from knowledge_hub.services.augmentation import AugmentationPipeline, merge_tags
from knowledge_hub.services.documents import DocumentService
from knowledge_hub.services.qa import UNABLE_TO_ANSWER, QAService
from knowledge_hub.services.search import (
    DEFAULT_TOP_K,
    TEXT_RESULT_LIMIT,
    HybridSearch,
    normalize_top_k,
    rank_by_similarity,
)

__all__ = [
    "AugmentationPipeline",
    "merge_tags",
    "DocumentService",
    "QAService",
    "UNABLE_TO_ANSWER",
    "HybridSearch",
    "DEFAULT_TOP_K",
    "TEXT_RESULT_LIMIT",
    "normalize_top_k",
    "rank_by_similarity",
]
