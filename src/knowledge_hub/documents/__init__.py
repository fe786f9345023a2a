"""
Documents module - the document model and its stores.

This module provides:
- Document: The document model
- DocumentStoreConfig: Configuration for stores
- PgDocumentStore: PostgreSQL production store
- InMemoryDocumentStore: Testing/development store
- get_document_store(): Factory function
"""

from knowledge_hub.documents.document import Document, normalize_tags

from knowledge_hub.documents.store import (
    DocumentStoreConfig,
    PgDocumentStore,
    InMemoryDocumentStore,
    get_document_store,
)

__all__ = [
    # Document
    "Document",
    "normalize_tags",
    # Config
    "DocumentStoreConfig",
    # Implementations
    "PgDocumentStore",
    "InMemoryDocumentStore",
    # Factory
    "get_document_store",
]
