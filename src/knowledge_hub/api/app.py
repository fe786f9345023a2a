"""
HTTP API - thin FastAPI layer over the services.

Routes:
    GET  /                                 health text
    POST /api/docs                         create (enrichment runs in background)
    GET  /api/docs                         list (?text=&tag=&page=&limit=)
    GET  /api/docs/{id}                    read
    PUT  /api/docs/{id}                    update (re-enriches if content changed)
    DELETE /api/docs/{id}                  delete
    POST /api/docs/{id}/summarize          regenerate summary now
    POST /api/docs/{id}/generate-tags      extract and merge tags now
    GET|POST /api/search                   hybrid search
    POST /api/qa                           question answering

Dependencies are injected through create_app(), so tests can pass an
InMemoryDocumentStore and a fake AI client.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Header, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from knowledge_hub import __version__
from knowledge_hub.ai import AIClientConfig, get_ai_client
from knowledge_hub.api.schemas import (
    DocumentCreateRequest,
    DocumentUpdateRequest,
    QuestionRequest,
    SearchRequest,
)
from knowledge_hub.core import (
    AIClient,
    DocumentNotFoundError,
    DocumentStore,
    DocumentValidationError,
    SearchValidationError,
)
from knowledge_hub.documents import get_document_store
from knowledge_hub.observability import shutdown_tracing
from knowledge_hub.services import AugmentationPipeline, DocumentService, HybridSearch, QAService

logger = logging.getLogger(__name__)

SHUTDOWN_DRAIN_TIMEOUT_S = 30.0


def create_app(
    store: DocumentStore | None = None,
    ai_client: AIClient | None = None,
    ai_config: AIClientConfig | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Document store (factory default if not provided)
        ai_client: AI client (OpenAIClient from ai_config / env if not provided)
        ai_config: AI configuration, also used for call timeouts
    """
    ai_config = ai_config or AIClientConfig.from_env()
    store = store if store is not None else get_document_store()
    ai_client = ai_client if ai_client is not None else get_ai_client(ai_config)

    pipeline = AugmentationPipeline(ai_client, store, timeout_s=ai_config.timeout_s)
    documents = DocumentService(store, pipeline)
    search = HybridSearch(store, ai_client, timeout_s=ai_config.timeout_s)
    qa = QAService(store, ai_client, timeout_s=ai_config.timeout_s)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await store.connect()
        try:
            yield
        finally:
            if pipeline.pending_count:
                logger.info(f"Waiting for {pipeline.pending_count} pending enrichment task(s)")
                try:
                    await pipeline.wait_for_pending(timeout=SHUTDOWN_DRAIN_TIMEOUT_S)
                except asyncio.TimeoutError:
                    cancelled = await pipeline.cancel_pending()
                    logger.warning(f"Cancelled {cancelled} enrichment task(s) still in flight at shutdown")
            await store.close()
            shutdown_tracing()

    app = FastAPI(title="Knowledge Hub API", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.store = store
    app.state.pipeline = pipeline
    app.state.documents = documents
    app.state.search = search
    app.state.qa = qa

    # -----------------------------------------------------------------------
    # ERROR HANDLERS
    # -----------------------------------------------------------------------

    @app.exception_handler(DocumentValidationError)
    @app.exception_handler(SearchValidationError)
    async def bad_request(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())})

    @app.exception_handler(DocumentNotFoundError)
    async def not_found(request: Request, exc: DocumentNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": "Not found"})

    # -----------------------------------------------------------------------
    # ROUTES
    # -----------------------------------------------------------------------

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Backend is running!"

    @app.post("/api/docs", status_code=201)
    async def create_document(
        body: DocumentCreateRequest,
        x_user_id: str | None = Header(default=None),
    ) -> dict:
        doc = await documents.create(body.title, body.content, body.tags, owner_id=x_user_id)
        return doc.to_dict()

    @app.get("/api/docs")
    async def list_documents(
        response: Response,
        text: str | None = None,
        tag: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> list[dict]:
        docs = await documents.list_documents(text=text, tag=tag, page=page, limit=limit)
        response.headers["X-Total-Count"] = str(await documents.count_documents(text=text, tag=tag))
        return [doc.to_dict() for doc in docs]

    @app.get("/api/docs/{doc_id}")
    async def get_document(doc_id: str) -> dict:
        return (await documents.get(doc_id)).to_dict()

    @app.put("/api/docs/{doc_id}")
    async def update_document(doc_id: str, body: DocumentUpdateRequest) -> dict:
        doc = await documents.update(doc_id, title=body.title, content=body.content, tags=body.tags)
        return doc.to_dict()

    @app.delete("/api/docs/{doc_id}")
    async def delete_document(doc_id: str) -> dict:
        await documents.delete(doc_id)
        return {"success": True}

    @app.post("/api/docs/{doc_id}/summarize")
    async def summarize_document(doc_id: str) -> dict:
        return (await documents.summarize(doc_id)).to_dict()

    @app.post("/api/docs/{doc_id}/generate-tags")
    async def generate_document_tags(doc_id: str) -> dict:
        return (await documents.generate_tags(doc_id)).to_dict()

    @app.get("/api/search")
    async def search_get(query: str | None = None, mode: str = "text", topK: str | None = None) -> dict:
        response = await search.search(query, mode=mode, top_k=topK)
        return response.to_dict()

    @app.post("/api/search")
    async def search_post(body: SearchRequest) -> dict:
        # An empty or null mode means the POST default
        response = await search.search(body.query, mode=body.mode or "semantic", top_k=body.top_k)
        return response.to_dict()

    @app.post("/api/qa")
    async def ask(body: QuestionRequest) -> dict:
        answer = await qa.answer(body.question)
        return {"answer": answer}

    return app
