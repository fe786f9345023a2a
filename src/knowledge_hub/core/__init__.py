"""
Core module - shared protocols, result types and errors.

USAGE:
------
from knowledge_hub.core import DocumentStore, AIClient

class MyDocumentStore:
    '''Implements DocumentStore protocol.'''
    ...
"""

from knowledge_hub.core.errors import (
    KnowledgeHubError,
    DocumentValidationError,
    SearchValidationError,
    DocumentNotFoundError,
    AIClientError,
)
from knowledge_hub.core.protocols import (
    # Protocols
    DocumentStore,
    AIClient,
    EmbeddingProvider,
    # Data classes
    DocumentFilter,
    SearchResult,
    SearchResponse,
    AugmentationResult,
    TEXT_FIELDS,
)

__all__ = [
    # Errors
    "KnowledgeHubError",
    "DocumentValidationError",
    "SearchValidationError",
    "DocumentNotFoundError",
    "AIClientError",
    # Protocols
    "DocumentStore",
    "AIClient",
    "EmbeddingProvider",
    # Data classes
    "DocumentFilter",
    "SearchResult",
    "SearchResponse",
    "AugmentationResult",
    "TEXT_FIELDS",
]
