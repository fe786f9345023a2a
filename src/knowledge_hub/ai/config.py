"""
AI client configuration.

Passed explicitly to the client at construction; nothing in the client
reads the environment on its own.
"""

import os
from dataclasses import dataclass

EMBEDDING_BACKENDS = ("local", "remote")


@dataclass
class AIClientConfig:
    """Configuration for the OpenAI-compatible AI client.

    Environment Variables:
        AI_API_KEY / OPENAI_API_KEY: Provider API key
        AI_API_URL: Base URL of an OpenAI-compatible endpoint (provider default if empty)
        AI_MODEL: Chat model for summaries, tags and answers (default: gpt-4o-mini)
        AI_EMBEDDING_MODEL: Embedding model for the remote backend
        AI_EMBEDDING_BACKEND: "local" (deterministic, offline) or "remote" (default: local)
        AI_TIMEOUT_S: Per-call timeout in seconds (default: 20)
        AI_MAX_RETRIES: Transport retries inside the SDK (default: 1)
    """

    api_key: str | None = None
    base_url: str | None = None
    model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    embedding_backend: str = "local"
    temperature: float = 0.3
    timeout_s: float = 20.0
    max_retries: int = 1

    def __post_init__(self):
        if self.embedding_backend not in EMBEDDING_BACKENDS:
            raise ValueError(
                f"embedding_backend must be one of {EMBEDDING_BACKENDS}, got {self.embedding_backend!r}"
            )
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be positive")

    @classmethod
    def from_env(cls) -> "AIClientConfig":
        """Load config from environment variables."""
        return cls(
            api_key=os.environ.get("AI_API_KEY") or os.environ.get("OPENAI_API_KEY"),
            base_url=os.environ.get("AI_API_URL") or None,
            model=os.environ.get("AI_MODEL", "gpt-4o-mini"),
            embedding_model=os.environ.get("AI_EMBEDDING_MODEL", "text-embedding-3-small"),
            embedding_backend=os.environ.get("AI_EMBEDDING_BACKEND", "local").lower(),
            timeout_s=float(os.environ.get("AI_TIMEOUT_S", "20")),
            max_retries=int(os.environ.get("AI_MAX_RETRIES", "1")),
        )
