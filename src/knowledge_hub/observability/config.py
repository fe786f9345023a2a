"""
Tracing Configuration

Loads observability settings from environment variables.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


@dataclass
class ObservabilityConfig:
    """Configuration for OpenTelemetry tracing.

    Environment Variables:
        TRACING_ENABLED: Enable tracing (default: false)
        TRACING_SERVICE_NAME: Service name on exported spans (default: knowledge-hub)
        OTEL_EXPORTER_OTLP_ENDPOINT: OTLP/HTTP collector endpoint (console export if empty)
        TRACING_CAPTURE_CONTENT: Attach prompts/responses to spans (default: false)

    PRIVACY WARNING:
        Setting TRACING_CAPTURE_CONTENT=true exports raw document text and
        questions to the collector.
    """

    enabled: bool = False
    service_name: str = "knowledge-hub"
    collector_endpoint: str | None = None
    capture_content: bool = False

    @classmethod
    def from_env(cls) -> "ObservabilityConfig":
        """Load config from environment variables."""
        return cls(
            enabled=_env_flag("TRACING_ENABLED"),
            service_name=os.environ.get("TRACING_SERVICE_NAME", "knowledge-hub"),
            collector_endpoint=os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT") or None,
            capture_content=_env_flag("TRACING_CAPTURE_CONTENT"),
        )


# Global config singleton
_config: ObservabilityConfig | None = None


def get_config() -> ObservabilityConfig:
    """Get the global observability config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = ObservabilityConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
