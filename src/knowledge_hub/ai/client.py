"""
AI Client - Single Responsibility: talk to the text-generation provider.

OpenAIClient works against any OpenAI-compatible endpoint (OpenAI itself,
Gemini's OpenAI-compatible API, local gateways) selected via base_url.

Every method either returns a value of the expected shape or raises
AIClientError. Transport errors, timeouts and malformed responses are all
classified the same way, so callers only ever handle one exception type.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Awaitable, TypeVar

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from knowledge_hub.ai.config import AIClientConfig
from knowledge_hub.ai.prompts import build_summary_prompt, build_tags_prompt
from knowledge_hub.ai.schemas import CompletionText, EmbeddingVector, ExtractedTags
from knowledge_hub.core.errors import AIClientError
from knowledge_hub.documents.document import normalize_tags
from knowledge_hub.core.protocols import EmbeddingProvider
from knowledge_hub.embeddings.local import LocalEmbeddings
from knowledge_hub.observability import get_config as get_observability_config
from knowledge_hub.observability import get_tracer
from knowledge_hub.observability.attributes import (
    AI_FAILED,
    GEN_AI_COMPLETION,
    GEN_AI_PROMPT,
    GEN_AI_USAGE_INPUT_TOKENS,
    GEN_AI_USAGE_OUTPUT_TOKENS,
    ai_call_attributes,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors raised while digging through a response that has the wrong shape
_SHAPE_ERRORS = (AttributeError, IndexError, KeyError, TypeError, ValueError, ValidationError)


async def guarded_call(call: Awaitable[T], operation: str, timeout_s: float) -> T:
    """
    Await an AI call with a timeout.

    Any failure - timeout, AIClientError, or an unexpected exception from a
    misbehaving client - is re-raised as AIClientError.
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout_s)
    except AIClientError:
        raise
    except asyncio.TimeoutError:
        raise AIClientError(operation, f"timed out after {timeout_s}s") from None
    except Exception as e:
        raise AIClientError(operation, f"{type(e).__name__}: {e}") from e


def parse_tags(text: str) -> list[str]:
    """
    Parse a tag-extraction response.

    JSON objects must match {"tags": [...]}; anything else is read as a
    comma-separated list.
    """
    cleaned = text.strip()
    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", cleaned)
    if fenced:
        cleaned = fenced.group(1).strip()

    if cleaned.startswith("{"):
        return normalize_tags(ExtractedTags.model_validate_json(cleaned).tags)
    return normalize_tags(cleaned.split(","))


class OpenAIClient:
    """
    OpenAI-compatible AI client.

    Implements the AIClient protocol. The SDK client is created lazily so a
    missing API key only fails the calls that need it, not startup.
    """

    def __init__(
        self,
        config: AIClientConfig,
        client: AsyncOpenAI | None = None,
        local_embeddings: EmbeddingProvider | None = None,
    ):
        self.config = config
        self._client = client
        self.local_embeddings = local_embeddings or LocalEmbeddings()

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout_s,
                max_retries=self.config.max_retries,
            )
        return self._client

    async def _chat(self, task: str, prompt: str, json_mode: bool = False) -> str:
        capture = get_observability_config().capture_content
        attrs = ai_call_attributes(task, self.config.model)

        with get_tracer().start_span(f"ai.{task}", attributes=attrs) as span:
            if capture:
                span.set_attribute(GEN_AI_PROMPT, prompt)
            try:
                kwargs: dict[str, Any] = {}
                if json_mode:
                    kwargs["response_format"] = {"type": "json_object"}
                response = await self._get_client().chat.completions.create(
                    model=self.config.model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=self.config.temperature,
                    **kwargs,
                )
                text = CompletionText(text=response.choices[0].message.content).text
            except openai.OpenAIError as e:
                span.set_attribute(AI_FAILED, True)
                span.record_exception(e)
                raise AIClientError(task, f"{type(e).__name__}: {e}") from e
            except _SHAPE_ERRORS as e:
                span.set_attribute(AI_FAILED, True)
                raise AIClientError(task, f"unexpected response shape: {e}") from e

            usage = getattr(response, "usage", None)
            if usage is not None:
                span.set_attribute(GEN_AI_USAGE_INPUT_TOKENS, usage.prompt_tokens)
                span.set_attribute(GEN_AI_USAGE_OUTPUT_TOKENS, usage.completion_tokens)
            if capture:
                span.set_attribute(GEN_AI_COMPLETION, text)
            return text

    async def summarize(self, text: str) -> str:
        return await self._chat("summarize", build_summary_prompt(text))

    async def extract_tags(self, text: str) -> list[str]:
        raw = await self._chat("extract_tags", build_tags_prompt(text), json_mode=True)
        try:
            return parse_tags(raw)
        except (ValidationError, ValueError, json.JSONDecodeError) as e:
            raise AIClientError("extract_tags", f"unexpected response shape: {e}") from e

    async def embed(self, text: str) -> list[float]:
        if self.config.embedding_backend == "local":
            return self.local_embeddings.embed(text)

        attrs = ai_call_attributes("embed", self.config.embedding_model, operation="embeddings")
        with get_tracer().start_span("ai.embed", attributes=attrs) as span:
            try:
                response = await self._get_client().embeddings.create(
                    input=text,
                    model=self.config.embedding_model,
                )
                return EmbeddingVector(values=response.data[0].embedding).values
            except openai.OpenAIError as e:
                span.set_attribute(AI_FAILED, True)
                span.record_exception(e)
                raise AIClientError("embed", f"{type(e).__name__}: {e}") from e
            except _SHAPE_ERRORS as e:
                span.set_attribute(AI_FAILED, True)
                raise AIClientError("embed", f"unexpected response shape: {e}") from e

    async def answer(self, prompt: str) -> str:
        return await self._chat("answer", prompt)


def get_ai_client(config: AIClientConfig | None = None) -> OpenAIClient:
    """Factory function for the AI client (config from the environment if not given)."""
    config = config or AIClientConfig.from_env()
    logger.info(
        f"AI client: model={config.model} embeddings={config.embedding_backend}"
        + (f" base_url={config.base_url}" if config.base_url else "")
    )
    return OpenAIClient(config)
