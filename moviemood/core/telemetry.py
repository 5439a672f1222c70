"""
Telemetry configuration (Metrics & Tracing).
Sets up Prometheus instrumentation, recommendation counters and OpenTelemetry.
"""
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

from moviemood.config import get_settings

# ── Recommendation metrics ──
RECOMMENDATION_OUTCOMES = Counter(
    "recommendation_outcomes_total",
    "Recommendation requests by outcome",
    ["outcome"],
)
DROPPED_MOVIE_RECORDS = Counter(
    "recommendation_dropped_records_total",
    "Model-emitted movie entries dropped during normalization",
)
HISTORY_WRITE_FAILURES = Counter(
    "search_history_write_failures_total",
    "Search history writes that failed and were skipped",
)


def record_outcome(outcome: str) -> None:
    """Count one recommendation request outcome (success or an error code)."""
    RECOMMENDATION_OUTCOMES.labels(outcome=outcome).inc()


def setup_telemetry(app: FastAPI) -> None:
    """
    Setup Observability (Metrics & Tracing).

    1. Prometheus Metrics via /metrics
    2. OpenTelemetry Tracing via OTLP
    """
    settings = get_settings()

    # -------------------------------------------------------------------------
    # 1. Prometheus Metrics
    # -------------------------------------------------------------------------
    if settings.ENABLE_PROMETHEUS:
        instrumentator = Instrumentator(
            should_group_status_codes=False,
            should_ignore_untemplated=True,
            should_respect_env_var=True,
            should_instrument_requests_inprogress=True,
            excluded_handlers=["/metrics", "/health", "/health/ready"],
            env_var_name="ENABLE_METRICS",
            inprogress_name="inprogress",
            inprogress_labels=True,
        )
        instrumentator.instrument(app).expose(app, include_in_schema=False)

    # -------------------------------------------------------------------------
    # 2. OpenTelemetry Tracing
    # -------------------------------------------------------------------------
    if settings.ENABLE_OTEL:
        resource = Resource.create(attributes={
            "service.name": settings.APP_NAME,
            "service.version": settings.APP_VERSION,
            "deployment.environment": "production" if not settings.DEBUG else "development",
            "llm.model": settings.GEMINI_MODEL,
        })

        provider = TracerProvider(resource=resource)

        # OTLP Exporter, default endpoint localhost:4317
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))

        trace.set_tracer_provider(provider)

        FastAPIInstrumentor.instrument_app(
            app,
            tracer_provider=provider,
            excluded_urls="health,metrics",
        )
