"""
Document model.

Single responsibility: define the structure of stored documents and the
rules every document satisfies (required title/content, deduplicated tags).
A document is valid and servable whether or not enrichment has run.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Iterable

from knowledge_hub.core.errors import DocumentValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Strip tags, drop empty ones and remove duplicates, keeping first-seen order."""
    if not tags:
        return []
    seen: dict[str, None] = {}
    for tag in tags:
        if not isinstance(tag, str):
            continue
        cleaned = tag.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def require_text(name: str, value: str | None) -> str:
    """Return value if it is a non-blank string, else raise DocumentValidationError."""
    if not isinstance(value, str) or not value.strip():
        raise DocumentValidationError(f"{name} is required")
    return value


@dataclass
class Document:
    """
    A stored document.

    summary, tags and embedding are filled in by enrichment after the raw
    document has been persisted.
    """
    id: str
    title: str
    content: str
    tags: list[str] = field(default_factory=list)
    summary: str | None = None
    embedding: list[float] | None = None
    owner_id: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def create(
        cls,
        title: str,
        content: str,
        tags: Iterable[str] | None = None,
        owner_id: str | None = None,
    ) -> "Document":
        """Validate raw fields and build a new document with a fresh id."""
        now = utcnow()
        return cls(
            id=uuid.uuid4().hex,
            title=require_text("title", title),
            content=require_text("content", content),
            tags=normalize_tags(tags),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def copy(self) -> "Document":
        """Snapshot with its own tag list and embedding."""
        return replace(
            self,
            tags=list(self.tags),
            embedding=list(self.embedding) if self.embedding is not None else None,
        )

    def to_dict(self, include_embedding: bool = False) -> dict:
        """Convert to dictionary for serialization."""
        data = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "summary": self.summary,
            "ownerId": self.owner_id,
            "hasEmbedding": self.has_embedding,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
        if include_embedding:
            data["embedding"] = list(self.embedding) if self.embedding is not None else None
        return data
