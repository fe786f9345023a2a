"""
Question answering over the whole corpus.

KNOWN LIMITATION: every stored document goes into the prompt as context.
There is no retrieval-based subset selection, so prompt size (and cost)
grows with the corpus and will eventually exceed the model's context window.
"""

from __future__ import annotations

import logging
from typing import Iterable

from knowledge_hub.ai.client import guarded_call
from knowledge_hub.ai.prompts import build_context, build_qa_prompt
from knowledge_hub.core import AIClient, AIClientError, DocumentStore
from knowledge_hub.documents.document import Document, require_text
from knowledge_hub.observability import get_tracer
from knowledge_hub.observability.attributes import QA_CONTEXT_CHARS, QA_CORPUS_SIZE

logger = logging.getLogger(__name__)

UNABLE_TO_ANSWER = "Unable to answer."


class QAService:
    """Builds corpus context and delegates the answer to the AI client."""

    def __init__(self, store: DocumentStore, ai_client: AIClient, timeout_s: float = 20.0):
        self.store = store
        self.ai_client = ai_client
        self.timeout_s = timeout_s

    async def answer(self, question: str) -> str:
        """
        Answer a question using every stored document as context.

        Raises:
            DocumentValidationError: question is blank
        """
        require_text("question", question)
        corpus = await self.store.find(sort_by_updated=False)
        return await self.answer_with_corpus(question, corpus)

    async def answer_with_corpus(self, question: str, corpus: Iterable[Document]) -> str:
        """Answer from an explicit corpus. Returns UNABLE_TO_ANSWER on any AI failure."""
        docs = list(corpus)
        context = build_context(docs)
        prompt = build_qa_prompt(question, context)

        attrs = {QA_CORPUS_SIZE: len(docs), QA_CONTEXT_CHARS: len(context)}
        with get_tracer().start_span("qa", attributes=attrs):
            try:
                answer = await guarded_call(self.ai_client.answer(prompt), "answer", self.timeout_s)
            except AIClientError as e:
                logger.warning(f"Q&A failed over {len(docs)} documents: {e}")
                return UNABLE_TO_ANSWER

        if not isinstance(answer, str) or not answer.strip():
            logger.warning("Q&A returned an empty answer")
            return UNABLE_TO_ANSWER
        return answer
