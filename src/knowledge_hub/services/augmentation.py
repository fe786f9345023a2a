"""
Augmentation pipeline - best-effort enrichment of stored documents.

Three independent steps (summarize, extract tags, embed) run concurrently.
Each step may fail on its own; a failure is logged and recorded, and never
cancels the other steps or propagates to the caller.

WRITE PATH:
-----------
1. The raw document is already persisted by the caller.
2. schedule(doc_id) starts enrich() as a detached asyncio task.
3. enrich() runs augment(), then re-reads the LATEST stored document and
   merges into it (tags are unioned, summary/embedding replaced on success)
   so tags added concurrently are not lost.
4. Only the changed fields are written back.

wait_for_pending() is the completion signal for tests and shutdown.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

from pydantic import ValidationError

from knowledge_hub.ai.client import guarded_call
from knowledge_hub.ai.schemas import CompletionText, EmbeddingVector, ExtractedTags
from knowledge_hub.core import AIClient, AIClientError, AugmentationResult, DocumentStore
from knowledge_hub.documents.document import Document, normalize_tags, utcnow
from knowledge_hub.observability import get_tracer
from knowledge_hub.observability.attributes import (
    DOCUMENT_ID,
    ENRICH_FAILED_STEPS,
    ENRICH_UPDATED_FIELDS,
)

logger = logging.getLogger(__name__)

DEFAULT_AI_TIMEOUT_S = 20.0

# Raised while validating a step value from an arbitrary AIClient
_SHAPE_ERRORS = (TypeError, ValueError, ValidationError)


def merge_tags(existing: Iterable[str] | None, extracted: Iterable[str] | None) -> list[str]:
    """Union of existing and extracted tags, existing first, no duplicates."""
    return normalize_tags([*(existing or []), *(extracted or [])])


class AugmentationPipeline:
    """
    Orchestrates enrichment of documents with AI-derived fields.

    Dependencies are INJECTED: any AIClient and DocumentStore will do.
    """

    def __init__(
        self,
        ai_client: AIClient,
        store: DocumentStore,
        include_embedding: bool = True,
        timeout_s: float = DEFAULT_AI_TIMEOUT_S,
    ):
        self.ai_client = ai_client
        self.store = store
        self.include_embedding = include_embedding
        self.timeout_s = timeout_s
        self._pending: set[asyncio.Task] = set()

    # -----------------------------------------------------------------------
    # AUGMENT (no persistence)
    # -----------------------------------------------------------------------

    async def augment(self, doc: Document) -> AugmentationResult:
        """
        Run all enrichment steps concurrently against doc.content.

        Never raises on provider failures; failed steps leave their field
        as None and are listed in result.errors.
        """
        steps: dict[str, Any] = {
            "summarize": self.ai_client.summarize(doc.content),
            "extract_tags": self.ai_client.extract_tags(doc.content),
        }
        if self.include_embedding:
            steps["embed"] = self.ai_client.embed(doc.content)

        outcomes = await asyncio.gather(
            *(guarded_call(call, name, self.timeout_s) for name, call in steps.items()),
            return_exceptions=True,
        )

        result = AugmentationResult()
        for name, outcome in zip(steps, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, AIClientError):
                    # CancelledError and friends are not provider faults
                    raise outcome
                logger.warning(f"Augmentation step {name} failed for document {doc.id}: {outcome}")
                result.errors[name] = outcome.message
                continue

            try:
                self._apply(result, name, outcome)
            except _SHAPE_ERRORS as e:
                logger.warning(f"Augmentation step {name} returned a malformed value for document {doc.id}: {e}")
                result.errors[name] = f"unexpected response shape: {e}"

        return result

    @staticmethod
    def _apply(result: AugmentationResult, name: str, outcome: Any) -> None:
        """Validate one step's value and store it on result. Blank values count as nothing."""
        if name == "summarize":
            if isinstance(outcome, str) and not outcome.strip():
                return
            result.summary = CompletionText(text=outcome).text
        elif name == "extract_tags":
            result.tags = normalize_tags(ExtractedTags(tags=outcome).tags) or None
        elif name == "embed":
            if outcome is None or len(outcome) == 0:
                return
            result.embedding = EmbeddingVector(values=list(outcome)).values

    # -----------------------------------------------------------------------
    # MERGE
    # -----------------------------------------------------------------------

    @staticmethod
    def merge(latest: Document, result: AugmentationResult) -> dict[str, Any]:
        """
        Compute the fields to write, relative to the latest stored document.

        Returns an empty dict when there is nothing to change.
        """
        fields: dict[str, Any] = {}
        if result.summary is not None and result.summary != latest.summary:
            fields["summary"] = result.summary
        if result.tags:
            merged = merge_tags(latest.tags, result.tags)
            if merged != latest.tags:
                fields["tags"] = merged
        if result.embedding:
            fields["embedding"] = list(result.embedding)
        if fields:
            fields["updated_at"] = utcnow()
        return fields

    # -----------------------------------------------------------------------
    # ENRICH (augment + persist)
    # -----------------------------------------------------------------------

    async def enrich(self, doc_id: str) -> AugmentationResult | None:
        """
        Augment a stored document and persist the enriched fields.

        Returns None if the document does not exist (or an unexpected store
        error occurs). Never raises.
        """
        with get_tracer().start_span("enrich", attributes={DOCUMENT_ID: doc_id}) as span:
            try:
                doc = await self.store.get(doc_id)
                if doc is None:
                    logger.info(f"Skipping enrichment: document {doc_id} no longer exists")
                    return None

                result = await self.augment(doc)
                span.set_attribute(ENRICH_FAILED_STEPS, sorted(result.errors))
                if result.is_empty:
                    logger.info(f"No enrichment produced for document {doc_id}")
                    return result

                # Merge against the latest persisted state, not our snapshot
                latest = await self.store.get(doc_id)
                if latest is None:
                    logger.info(f"Document {doc_id} was deleted during enrichment")
                    return result

                fields = self.merge(latest, result)
                if fields:
                    await self.store.update_fields(doc_id, fields)
                    span.set_attribute(ENRICH_UPDATED_FIELDS, sorted(fields))
                    logger.debug(f"Enriched document {doc_id}: {sorted(fields)}")
                return result

            except asyncio.CancelledError:
                raise
            except Exception as e:
                span.record_exception(e)
                span.set_status("error", str(e))
                logger.error(f"Enrichment of document {doc_id} failed: {e}", exc_info=True)
                return None

    # -----------------------------------------------------------------------
    # DETACHED EXECUTION
    # -----------------------------------------------------------------------

    def schedule(self, doc_id: str) -> asyncio.Task:
        """Start enrich(doc_id) in the background and return its task."""
        task = asyncio.create_task(self.enrich(doc_id), name=f"enrich-{doc_id}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def wait_for_pending(self, timeout: float | None = None) -> None:
        """
        Wait until every scheduled enrichment has finished.

        Tasks scheduled while waiting are waited for as well. Raises
        asyncio.TimeoutError if timeout elapses first; the tasks keep
        running either way (see cancel_pending).
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while self._pending:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                raise asyncio.TimeoutError(f"{len(self._pending)} enrichment task(s) still running")
            # asyncio.wait never cancels the tasks it waits on
            await asyncio.wait(set(self._pending), timeout=remaining)

    async def cancel_pending(self) -> int:
        """Cancel every scheduled enrichment and wait for the cancellations. Returns the count."""
        tasks = list(self._pending)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        return len(tasks)
