"""
Shared test doubles and fixtures.

FakeAIClient implements the AIClient protocol without any network calls.
Each operation can be told to fail, to hang, or to return a fixed value.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from knowledge_hub.core import AIClientError
from knowledge_hub.documents import Document, InMemoryDocumentStore
from knowledge_hub.embeddings import local_embed


class FakeAIClient:
    """Configurable AIClient test double that records every call."""

    def __init__(
        self,
        summary: str | None = "A short summary.",
        tags: list[str] | None = None,
        embedding: list[float] | None = None,
        answer: str = "The answer.",
        fail: tuple[str, ...] = (),
        hang: tuple[str, ...] = (),
    ):
        self.summary = summary
        self.tags = tags if tags is not None else ["ai", "search"]
        self.embedding = embedding
        self.answer_text = answer
        self.fail = set(fail)
        self.hang = set(hang)
        self.calls: list[tuple[str, str]] = []

    async def _enter(self, operation: str, text: str) -> None:
        self.calls.append((operation, text))
        if operation in self.hang:
            await asyncio.sleep(3600)
        if operation in self.fail:
            raise AIClientError(operation, "provider unavailable")

    def called(self, operation: str) -> list[str]:
        return [text for op, text in self.calls if op == operation]

    async def summarize(self, text: str) -> str:
        await self._enter("summarize", text)
        return self.summary

    async def extract_tags(self, text: str) -> list[str]:
        await self._enter("extract_tags", text)
        return list(self.tags)

    async def embed(self, text: str) -> list[float]:
        await self._enter("embed", text)
        return list(self.embedding) if self.embedding is not None else local_embed(text)

    async def answer(self, prompt: str) -> str:
        await self._enter("answer", prompt)
        return self.answer_text


def make_document(
    doc_id: str,
    title: str = "Title",
    content: str = "Some content",
    tags: list[str] | None = None,
    summary: str | None = None,
    embedding: list[float] | None = None,
    age_minutes: int = 0,
) -> Document:
    """Build a document whose updated_at is age_minutes in the past."""
    ts = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc) - timedelta(minutes=age_minutes)
    return Document(
        id=doc_id,
        title=title,
        content=content,
        tags=list(tags or []),
        summary=summary,
        embedding=embedding,
        created_at=ts,
        updated_at=ts,
    )


@pytest.fixture
def fake_ai():
    return FakeAIClient()


@pytest.fixture
def store():
    return InMemoryDocumentStore()
