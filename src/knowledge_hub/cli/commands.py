"""
CLI commands - entry points for the knowledge hub.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment
3. Build services from configuration
4. Print results
5. Return exit code

The commands are thin wrappers: all behaviour lives in the services, so
the CLI only wires dependencies and formats output.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from knowledge_hub.observability import configure_logging, init_tracing


def _load_env() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def _build_services():
    from knowledge_hub.ai import AIClientConfig, get_ai_client
    from knowledge_hub.documents import get_document_store

    config = AIClientConfig.from_env()
    return get_document_store(), get_ai_client(config), config


def run_serve_cli() -> int:
    """CLI entry point for the HTTP server."""
    import uvicorn

    from knowledge_hub.api import create_app

    parser = argparse.ArgumentParser(description="Run the knowledge hub HTTP API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=4000)
    args = parser.parse_args()

    init_tracing()
    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


def run_search_cli() -> int:
    """CLI entry point for a one-off search."""
    from knowledge_hub.services import HybridSearch

    parser = argparse.ArgumentParser(description="Search stored documents")
    parser.add_argument("query")
    parser.add_argument("--mode", choices=["text", "semantic"], default="text")
    parser.add_argument("--top-k", type=int, default=None)
    parser.add_argument("--json", action="store_true", help="Print the raw JSON response")
    args = parser.parse_args()

    store, ai_client, config = _build_services()

    async def run():
        await store.connect()
        try:
            search = HybridSearch(store, ai_client, timeout_s=config.timeout_s)
            return await search.search(args.query, mode=args.mode, top_k=args.top_k)
        finally:
            await store.close()

    response = asyncio.run(run())

    if args.json:
        print(json.dumps(response.to_dict(), indent=2))
        return 0

    if response.degraded:
        print(f"(semantic search unavailable: {response.degraded_reason}; showing text matches)")
    if not response.results:
        print("No results")
    for result in response.results:
        score = f"[{result.score:.3f}] " if result.score is not None else ""
        print(f"  {score}{result.document.title} ({result.document.id})")
    return 0


def run_ask_cli() -> int:
    """CLI entry point for question answering."""
    from knowledge_hub.services import QAService

    parser = argparse.ArgumentParser(description="Ask a question about stored documents")
    parser.add_argument("question")
    args = parser.parse_args()

    store, ai_client, config = _build_services()

    async def run():
        await store.connect()
        try:
            return await QAService(store, ai_client, timeout_s=config.timeout_s).answer(args.question)
        finally:
            await store.close()

    print(asyncio.run(run()))
    return 0


def run_embed_cli() -> int:
    """CLI entry point printing the local embedding of each text, one JSON array per line."""
    from knowledge_hub.embeddings import LocalEmbeddings

    parser = argparse.ArgumentParser(description="Print the deterministic local embedding")
    parser.add_argument("texts", nargs="+", metavar="text")
    parser.add_argument("--dimensions", type=int, default=None, help="Vector length (default: 64)")
    args = parser.parse_args()

    provider = LocalEmbeddings(dimensions=args.dimensions) if args.dimensions else LocalEmbeddings()
    for vector in provider.embed_batch(args.texts):
        print(json.dumps(vector))
    return 0


def main() -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        knowledge-hub serve                 # Run the HTTP API
        knowledge-hub search "query"        # Text or semantic search
        knowledge-hub ask "question"        # Q&A over all documents
        knowledge-hub embed "text"          # Local embedding as JSON
    """
    _load_env()
    configure_logging()

    parser = argparse.ArgumentParser(
        description="Knowledge hub: document enrichment and hybrid search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  serve       Run the HTTP API (uvicorn)
  search      Search documents (--mode text|semantic, --top-k N)
  ask         Answer a question using all documents as context
  embed       Print the deterministic local embedding of one or more texts

Examples:
  knowledge-hub serve --port 4000
  knowledge-hub search "vector databases" --mode semantic --top-k 3
        """,
    )

    parser.add_argument(
        "command",
        choices=["serve", "search", "ask", "embed"],
        help="Command to run",
    )

    # Parse just the command first
    args, remaining = parser.parse_known_args()

    commands = {
        "serve": run_serve_cli,
        "search": run_search_cli,
        "ask": run_ask_cli,
        "embed": run_embed_cli,
    }

    # Re-inject remaining args for the subcommand
    sys.argv = [sys.argv[0]] + remaining

    try:
        return commands[args.command]()
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
