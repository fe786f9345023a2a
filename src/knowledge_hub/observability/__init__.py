"""
Observability Module - logging setup and OpenTelemetry tracing.

USAGE:
------
# At application startup:
from knowledge_hub.observability import configure_logging, init_tracing

configure_logging()
init_tracing()  # Installs an OTel TracerProvider if TRACING_ENABLED=true

# In code that needs tracing:
from knowledge_hub.observability import get_tracer

with get_tracer().start_span("search", attributes={"kh.search.top_k": 5}) as span:
    span.set_attribute("kh.search.result_count", 3)
"""

from __future__ import annotations

import logging
import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from knowledge_hub.observability.config import (
    ObservabilityConfig,
    get_config,
    reset_config,
)
from knowledge_hub.observability.tracer import (
    TracerProtocol,
    SpanProtocol,
    NoOpTracer,
    NoOpSpan,
    get_tracer,
    reset_tracer,
)
from knowledge_hub.observability import attributes

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_tracing_initialized = False


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once (LOG_LEVEL env var, default INFO)."""
    level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


def init_tracing(config: ObservabilityConfig | None = None) -> bool:
    """
    Initialize OpenTelemetry tracing.

    This should be called once at application startup.

    Returns:
        True if tracing was initialized, False if disabled or failed
    """
    global _tracing_initialized
    if _tracing_initialized:
        return True

    config = config or get_config()

    if not config.enabled:
        logger.debug("Tracing disabled")
        return False

    try:
        if config.collector_endpoint:
            exporter = OTLPSpanExporter(endpoint=config.collector_endpoint)
            logger.info(f"Exporting spans to {config.collector_endpoint}")
        else:
            exporter = ConsoleSpanExporter()
            logger.info("Exporting spans to console")

        provider = TracerProvider(resource=Resource.create({"service.name": config.service_name}))
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)

        reset_tracer()
        _tracing_initialized = True
        return True

    except Exception as e:
        logger.error(f"Failed to initialize tracing: {e}")
        return False


def shutdown_tracing() -> None:
    """Flush and shut down the tracer provider."""
    global _tracing_initialized

    if not _tracing_initialized:
        return

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        try:
            provider.shutdown()
        except Exception as e:
            logger.warning(f"Error shutting down tracing: {e}")

    reset_tracer()
    reset_config()
    _tracing_initialized = False


__all__ = [
    # Setup
    "configure_logging",
    "init_tracing",
    "shutdown_tracing",
    # Config
    "ObservabilityConfig",
    "get_config",
    "reset_config",
    # Tracer
    "TracerProtocol",
    "SpanProtocol",
    "NoOpTracer",
    "NoOpSpan",
    "get_tracer",
    "reset_tracer",
    # Attribute keys
    "attributes",
]
