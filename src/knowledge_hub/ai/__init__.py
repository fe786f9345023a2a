"""
AI module - provider client, prompts and response schemas.

1. AIClientConfig: explicit configuration object
2. OpenAIClient: OpenAI-compatible implementation of the AIClient protocol
3. guarded_call: timeout + error classification for any AIClient call
4. get_ai_client: factory
"""

from knowledge_hub.ai.config import AIClientConfig
from knowledge_hub.ai.client import (
    OpenAIClient,
    get_ai_client,
    guarded_call,
    parse_tags,
)

__all__ = [
    "AIClientConfig",
    "OpenAIClient",
    "get_ai_client",
    "guarded_call",
    "parse_tags",
]
