"""
Hybrid search orchestrator - keyword matching plus vector ranking.

MODES:
------
text:     case-insensitive substring match over title, content, summary and
          tags; store-native order (newest update first); unscored.
semantic: embed the query, score every document that has an embedding by
          cosine similarity, return the top_k. The first top_k text matches
          ride along as fallback_text_matches.

DEGRADATION:
------------
A semantic request is served from text search instead when no stored
document has an embedding, or when the query embedding call fails. Neither
case is an error; the response carries degraded=True and the reason.
"""

from __future__ import annotations

import logging
from typing import Any

from knowledge_hub.ai.client import guarded_call
from knowledge_hub.core import (
    AIClient,
    AIClientError,
    DocumentFilter,
    DocumentStore,
    SearchResponse,
    SearchResult,
    SearchValidationError,
)
from knowledge_hub.documents.document import Document
from knowledge_hub.embeddings.similarity import cosine_similarity
from knowledge_hub.observability import get_tracer
from knowledge_hub.observability.attributes import (
    SEARCH_DEGRADED_REASON,
    SEARCH_MODE_SERVED,
    SEARCH_RESULT_COUNT,
    search_attributes,
)

logger = logging.getLogger(__name__)

SEARCH_MODES = ("text", "semantic")
DEFAULT_TOP_K = 5
TEXT_RESULT_LIMIT = 50

NO_EMBEDDINGS = "no_embeddings"
QUERY_EMBEDDING_FAILED = "query_embedding_failed"


def normalize_top_k(top_k: Any, default: int = DEFAULT_TOP_K) -> int:
    """
    Return top_k as a positive int, or default.

    Accepts ints and integral strings ("3"); anything else - None, zero,
    negatives, floats, garbage - resolves to default.
    """
    if isinstance(top_k, bool):
        return default
    if isinstance(top_k, str):
        try:
            top_k = int(top_k.strip())
        except ValueError:
            return default
    if isinstance(top_k, int) and top_k > 0:
        return top_k
    return default


def rank_by_similarity(
    query_embedding: list[float],
    candidates: list[Document],
    top_k: int,
) -> list[SearchResult]:
    """
    Score candidates against the query embedding and keep the best top_k.

    Ties are broken by document id so equal input gives equal output.
    """
    scored = [
        SearchResult(document=doc, score=cosine_similarity(query_embedding, doc.embedding))
        for doc in candidates
    ]
    scored.sort(key=lambda r: (-r.score, r.document.id))
    return scored[:top_k]


class HybridSearch:
    """Selects and combines text and semantic retrieval."""

    def __init__(
        self,
        store: DocumentStore,
        ai_client: AIClient,
        timeout_s: float = 20.0,
        text_limit: int = TEXT_RESULT_LIMIT,
    ):
        self.store = store
        self.ai_client = ai_client
        self.timeout_s = timeout_s
        self.text_limit = text_limit

    async def text_search(self, query: str) -> list[SearchResult]:
        docs = await self.store.find(DocumentFilter(text=query), limit=self.text_limit)
        return [SearchResult(document=doc) for doc in docs]

    async def search(
        self,
        query: str | None,
        mode: str = "text",
        top_k: Any = None,
    ) -> SearchResponse:
        """
        Search documents.

        Raises:
            SearchValidationError: mode is not "text" or "semantic"
        """
        mode = (mode or "text").lower()
        if mode not in SEARCH_MODES:
            raise SearchValidationError(f"mode must be one of {', '.join(SEARCH_MODES)}")
        top_k = normalize_top_k(top_k)

        if not query or not query.strip():
            return SearchResponse(results=[], mode=mode)

        with get_tracer().start_span("search", attributes=search_attributes(mode, top_k)) as span:
            text_results = await self.text_search(query)

            if mode == "text":
                response = SearchResponse(results=text_results, mode="text")
            else:
                response = await self._semantic(query, top_k, text_results)

            span.set_attribute(SEARCH_MODE_SERVED, response.mode)
            span.set_attribute(SEARCH_RESULT_COUNT, len(response.results))
            if response.degraded:
                span.set_attribute(SEARCH_DEGRADED_REASON, response.degraded_reason)
            return response

    async def _semantic(
        self,
        query: str,
        top_k: int,
        text_results: list[SearchResult],
    ) -> SearchResponse:
        try:
            query_embedding = await guarded_call(
                self.ai_client.embed(query), "embed", self.timeout_s
            )
        except AIClientError as e:
            logger.warning(f"Query embedding failed, falling back to text search: {e}")
            return self._degraded(text_results, QUERY_EMBEDDING_FAILED)
        if query_embedding is None or len(query_embedding) == 0:
            logger.warning("Query embedding was empty, falling back to text search")
            return self._degraded(text_results, QUERY_EMBEDDING_FAILED)

        candidates = await self.store.find(DocumentFilter(has_embedding=True))
        if not candidates:
            logger.debug("No embedded documents, falling back to text search")
            return self._degraded(text_results, NO_EMBEDDINGS)

        mismatched = sum(1 for d in candidates if len(d.embedding) != len(query_embedding))
        if mismatched:
            logger.debug(
                f"{mismatched}/{len(candidates)} stored embeddings differ from query "
                f"dimension {len(query_embedding)}; comparing over the shared prefix"
            )

        return SearchResponse(
            results=rank_by_similarity(query_embedding, candidates, top_k),
            mode="semantic",
            fallback_text_matches=text_results[:top_k],
        )

    @staticmethod
    def _degraded(text_results: list[SearchResult], reason: str) -> SearchResponse:
        return SearchResponse(
            results=text_results,
            mode="text",
            degraded=True,
            degraded_reason=reason,
        )
