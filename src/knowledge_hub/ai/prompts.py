"""
Prompt builders.

PURE FUNCTIONS - same inputs always produce the same prompt, so they can be
tested without any provider calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from knowledge_hub.documents.document import Document


def build_summary_prompt(content: str) -> str:
    return f"Summarize the following in 3-4 sentences:\n\n{content}"


def build_tags_prompt(content: str) -> str:
    return (
        "Extract 5-7 keywords as tags from this document. "
        'Respond with JSON only, in the form {"tags": ["tag1", "tag2"]}.'
        f"\n\n{content}"
    )


def build_context(docs: Iterable[Document]) -> str:
    """
    Concatenate every document as "title: content".

    The whole corpus goes into the prompt - there is no retrieval step, so
    the prompt grows linearly with the number of stored documents.
    """
    return "\n\n".join(f"{doc.title}: {doc.content}" for doc in docs)


def build_qa_prompt(question: str, context: str) -> str:
    return (
        f"Use the following documents as context:\n{context}"
        f"\n\nQuestion: {question}"
    )
