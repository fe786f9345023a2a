"""
Embeddings module - local embedding generation and vector similarity.

1. local_embed / LocalEmbeddings: deterministic offline embeddings
2. cosine_similarity: prefix-truncating cosine similarity
"""

from knowledge_hub.embeddings.local import (
    EMBEDDING_DIM,
    MAX_EMBED_CHARS,
    LocalEmbeddings,
    local_embed,
)
from knowledge_hub.embeddings.similarity import cosine_similarity

__all__ = [
    "EMBEDDING_DIM",
    "MAX_EMBED_CHARS",
    "LocalEmbeddings",
    "local_embed",
    "cosine_similarity",
]
