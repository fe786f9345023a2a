"""
Core protocols defining contracts for the entire system.

All infrastructure components implement these protocols, so the
orchestrators in `knowledge_hub.services` never depend on a concrete
database or AI provider.

PATTERN:
- Protocol defines the contract
- Multiple implementations possible (production + in-memory/test double)
- Factory functions for instantiation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from knowledge_hub.documents.document import Document


# ---------------------------------------------------------------------------
# DOCUMENT STORE PROTOCOL
# ---------------------------------------------------------------------------

TEXT_FIELDS = ("title", "content", "summary", "tags")


@dataclass
class DocumentFilter:
    """
    Query filter understood by every DocumentStore.

    text: case-insensitive literal substring matched against text_fields
        (a document matches if ANY field matches; for "tags", any tag).
    tag: exact tag equality.
    has_embedding: only documents with a non-empty embedding.
    """
    text: str | None = None
    text_fields: tuple[str, ...] = TEXT_FIELDS
    tag: str | None = None
    has_embedding: bool = False


@runtime_checkable
class DocumentStore(Protocol):
    """
    Contract for document persistence.

    Implementations:
    - PgDocumentStore (production with PostgreSQL + pgvector)
    - InMemoryDocumentStore (testing/development)
    """

    async def connect(self) -> None:
        """Establish connection to the store."""
        ...

    async def close(self) -> None:
        """Close connection to the store."""
        ...

    async def insert(self, doc: Document) -> Document:
        """Persist a new document."""
        ...

    async def get(self, doc_id: str) -> Document | None:
        """Find a document by id. Returns None if missing."""
        ...

    async def find(
        self,
        doc_filter: DocumentFilter | None = None,
        skip: int = 0,
        limit: int | None = None,
        sort_by_updated: bool = True,
    ) -> list[Document]:
        """Find documents matching a filter, newest update first."""
        ...

    async def count(self, doc_filter: DocumentFilter | None = None) -> int:
        """Count documents matching a filter."""
        ...

    async def update_fields(self, doc_id: str, fields: dict[str, Any]) -> Document | None:
        """Update only the given fields. Returns the updated document or None."""
        ...

    async def delete(self, doc_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        ...


# ---------------------------------------------------------------------------
# AI CLIENT PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class AIClient(Protocol):
    """
    Contract for the text-generation provider.

    Every method raises AIClientError on failure - including a response
    that does not match the expected shape.

    Implementations:
    - OpenAIClient (any OpenAI-compatible endpoint)
    """

    async def summarize(self, text: str) -> str:
        ...

    async def extract_tags(self, text: str) -> list[str]:
        ...

    async def embed(self, text: str) -> list[float]:
        ...

    async def answer(self, prompt: str) -> str:
        ...


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for synchronous, local embedding generation.

    Implementations:
    - LocalEmbeddings (deterministic, offline)
    """

    @property
    def dimensions(self) -> int:
        ...

    def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        ...

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts."""
        ...


# ---------------------------------------------------------------------------
# RESULT TYPES
# ---------------------------------------------------------------------------


@dataclass
class SearchResult:
    """A document snapshot, scored in semantic mode only."""
    document: Document
    score: float | None = None

    def to_dict(self) -> dict:
        data = self.document.to_dict()
        if self.score is not None:
            data["relevance"] = self.score
        return data


@dataclass
class SearchResponse:
    """
    Outcome of a hybrid search.

    mode is the strategy actually served: a semantic request that had to
    fall back reports mode="text" with degraded=True.
    """
    results: list[SearchResult]
    mode: str
    fallback_text_matches: list[SearchResult] | None = None
    degraded: bool = False
    degraded_reason: str | None = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "results": [r.to_dict() for r in self.results],
            "mode": self.mode,
        }
        if self.fallback_text_matches is not None:
            data["fallbackTextMatches"] = [r.to_dict() for r in self.fallback_text_matches]
        if self.degraded:
            data["degraded"] = True
            data["degradedReason"] = self.degraded_reason
        return data


@dataclass
class AugmentationResult:
    """
    Enrichment produced for one document.

    A field is None when its step failed or returned nothing usable;
    errors maps the failed step name to the provider error message.
    """
    summary: str | None = None
    tags: list[str] | None = None
    embedding: Sequence[float] | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.summary is None and not self.tags and not self.embedding
