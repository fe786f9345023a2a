"""
Document service - CRUD over the store with enrichment hooks.

Creates and content-changing updates persist the raw document first and
then schedule background enrichment; the caller gets the raw document back
immediately.
"""

from __future__ import annotations

import logging
from typing import Iterable

from knowledge_hub.ai.client import guarded_call
from knowledge_hub.core import AIClientError, DocumentFilter, DocumentNotFoundError, DocumentStore
from knowledge_hub.documents.document import Document, normalize_tags, require_text, utcnow
from knowledge_hub.services.augmentation import AugmentationPipeline, merge_tags

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class DocumentService:
    """Create, read, update and delete documents."""

    def __init__(self, store: DocumentStore, pipeline: AugmentationPipeline):
        self.store = store
        self.pipeline = pipeline

    async def create(
        self,
        title: str,
        content: str,
        tags: Iterable[str] | None = None,
        owner_id: str | None = None,
    ) -> Document:
        """
        Persist a new document and schedule its enrichment.

        Raises:
            DocumentValidationError: title or content is blank
        """
        doc = Document.create(title=title, content=content, tags=tags, owner_id=owner_id)
        stored = await self.store.insert(doc)
        logger.info(f"Created document {stored.id}")
        self.pipeline.schedule(stored.id)
        return stored

    async def get(self, doc_id: str) -> Document:
        doc = await self.store.get(doc_id)
        if doc is None:
            raise DocumentNotFoundError(doc_id)
        return doc

    async def list_documents(
        self,
        text: str | None = None,
        tag: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[Document]:
        """List documents, newest update first, with optional text/tag filters."""
        page = max(1, page)
        limit = min(max(1, limit), MAX_PAGE_SIZE)
        return await self.store.find(
            self._list_filter(text, tag), skip=(page - 1) * limit, limit=limit
        )

    async def count_documents(self, text: str | None = None, tag: str | None = None) -> int:
        """Total number of documents list_documents() pages over."""
        return await self.store.count(self._list_filter(text, tag))

    @staticmethod
    def _list_filter(text: str | None, tag: str | None) -> DocumentFilter:
        return DocumentFilter(
            text=text or None,
            text_fields=("title", "content", "summary"),
            tag=tag or None,
        )

    async def update(
        self,
        doc_id: str,
        title: str | None = None,
        content: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> Document:
        """
        Update the provided fields. Re-enriches only if content changed.

        Raises:
            DocumentNotFoundError: no such document
            DocumentValidationError: a provided title/content is blank
        """
        current = await self.get(doc_id)

        fields: dict = {}
        if title is not None:
            fields["title"] = require_text("title", title)
        if content is not None:
            fields["content"] = require_text("content", content)
        if tags is not None:
            fields["tags"] = normalize_tags(tags)
        if not fields:
            return current

        fields["updated_at"] = utcnow()
        updated = await self.store.update_fields(doc_id, fields)
        if updated is None:
            raise DocumentNotFoundError(doc_id)

        if content is not None and content != current.content:
            self.pipeline.schedule(doc_id)
        return updated

    async def delete(self, doc_id: str) -> None:
        if not await self.store.delete(doc_id):
            raise DocumentNotFoundError(doc_id)
        logger.info(f"Deleted document {doc_id}")

    # -----------------------------------------------------------------------
    # EXPLICIT SINGLE-STEP ENRICHMENT
    # -----------------------------------------------------------------------

    async def summarize(self, doc_id: str) -> Document:
        """Regenerate the summary now. On provider failure the document is returned unchanged."""
        doc = await self.get(doc_id)
        try:
            summary = await guarded_call(
                self.pipeline.ai_client.summarize(doc.content), "summarize", self.pipeline.timeout_s
            )
        except AIClientError as e:
            logger.warning(f"Summarize failed for document {doc_id}: {e}")
            return doc

        summary = summary.strip() if isinstance(summary, str) else ""
        if not summary:
            return doc
        updated = await self.store.update_fields(doc_id, {"summary": summary, "updated_at": utcnow()})
        return updated or doc

    async def generate_tags(self, doc_id: str) -> Document:
        """Extract tags now and merge them in. On provider failure the document is returned unchanged."""
        doc = await self.get(doc_id)
        try:
            extracted = await guarded_call(
                self.pipeline.ai_client.extract_tags(doc.content), "extract_tags", self.pipeline.timeout_s
            )
        except AIClientError as e:
            logger.warning(f"Tag extraction failed for document {doc_id}: {e}")
            return doc

        if not extracted:
            return doc
        # Re-read so tags added meanwhile survive the merge
        latest = await self.store.get(doc_id) or doc
        merged = merge_tags(latest.tags, extracted)
        if merged == latest.tags:
            return latest
        updated = await self.store.update_fields(doc_id, {"tags": merged, "updated_at": utcnow()})
        return updated or latest
