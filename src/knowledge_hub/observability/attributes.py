"""
Semantic Conventions for Span Attributes

Attribute keys following OpenTelemetry GenAI conventions plus a
knowledge-hub namespace for enrichment and search.

Reference: https://opentelemetry.io/docs/specs/semconv/gen-ai/
"""

# ---------------------------------------------------------------------------
# GENAI NAMESPACE (OTel standard)
# ---------------------------------------------------------------------------

GEN_AI_SYSTEM = "gen_ai.system"  # "openai"
GEN_AI_OPERATION_NAME = "gen_ai.operation.name"  # "chat", "embeddings"
GEN_AI_REQUEST_MODEL = "gen_ai.request.model"

GEN_AI_USAGE_INPUT_TOKENS = "gen_ai.usage.input_tokens"
GEN_AI_USAGE_OUTPUT_TOKENS = "gen_ai.usage.output_tokens"

# Request/Response (optional, controlled by TRACING_CAPTURE_CONTENT)
GEN_AI_PROMPT = "gen_ai.prompt"
GEN_AI_COMPLETION = "gen_ai.completion"


# ---------------------------------------------------------------------------
# KNOWLEDGE HUB NAMESPACE (custom)
# ---------------------------------------------------------------------------

AI_TASK = "kh.ai.task"  # "summarize", "extract_tags", "embed", "answer"
AI_FAILED = "kh.ai.failed"

DOCUMENT_ID = "kh.document.id"

ENRICH_FAILED_STEPS = "kh.enrich.failed_steps"
ENRICH_UPDATED_FIELDS = "kh.enrich.updated_fields"

SEARCH_MODE_REQUESTED = "kh.search.mode_requested"
SEARCH_MODE_SERVED = "kh.search.mode_served"
SEARCH_TOP_K = "kh.search.top_k"
SEARCH_RESULT_COUNT = "kh.search.result_count"
SEARCH_DEGRADED_REASON = "kh.search.degraded_reason"

QA_CORPUS_SIZE = "kh.qa.corpus_size"
QA_CONTEXT_CHARS = "kh.qa.context_chars"


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------


def ai_call_attributes(task: str, model: str, operation: str = "chat") -> dict:
    """Create attributes dict for an AI provider call span."""
    return {
        GEN_AI_SYSTEM: "openai",
        GEN_AI_OPERATION_NAME: operation,
        GEN_AI_REQUEST_MODEL: model,
        AI_TASK: task,
    }


def search_attributes(mode: str, top_k: int) -> dict:
    """Create attributes dict for a search span."""
    return {
        SEARCH_MODE_REQUESTED: mode,
        SEARCH_TOP_K: top_k,
    }
