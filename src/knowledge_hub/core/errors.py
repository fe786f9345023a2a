"""
Exception hierarchy.

Validation and not-found errors are surfaced to callers. AIClientError is
raised by AI clients and caught by the orchestrators - it never reaches an
HTTP response.
"""

from __future__ import annotations


class KnowledgeHubError(Exception):
    """Base class for all knowledge-hub errors."""


class DocumentValidationError(KnowledgeHubError):
    """A required field is missing or blank."""


class SearchValidationError(KnowledgeHubError):
    """A search request cannot be interpreted (e.g. unknown mode)."""


class DocumentNotFoundError(KnowledgeHubError):
    """No document exists with the requested id."""

    def __init__(self, doc_id: str):
        super().__init__(f"Document not found: {doc_id}")
        self.doc_id = doc_id


class AIClientError(KnowledgeHubError):
    """
    An AI provider call failed.

    Covers transport errors, timeouts and responses that do not match the
    expected shape.
    """

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message
