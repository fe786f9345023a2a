"""
knowledge-hub: document augmentation and hybrid search.

Documents are stored raw, enriched in the background with AI-derived
summaries, tags and embeddings, and served through keyword or
vector-similarity search.
"""

__version__ = "0.1.0"
