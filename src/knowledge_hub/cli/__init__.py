"""
CLI module - unified command-line interface.

Provides entry points for:
- Serving the HTTP API
- Running searches and questions from the shell
- Inspecting local embeddings
"""

from knowledge_hub.cli.commands import (
    main,
    run_serve_cli,
    run_search_cli,
    run_ask_cli,
    run_embed_cli,
)

__all__ = [
    "main",
    "run_serve_cli",
    "run_search_cli",
    "run_ask_cli",
    "run_embed_cli",
]
