import logging
import os

from flask import Flask

try:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.flask import FlaskInstrumentor
    from opentelemetry.instrumentation.requests import RequestsInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
except ImportError:  # pragma: no cover - tracing extra not installed
    FlaskInstrumentor = None  # type: ignore

logger = logging.getLogger(__name__)


def init_tracing(app: Flask) -> bool:
    """Export spans for inbound requests and outbound Artsy calls over OTLP.

    Returns False when the tracing extra is missing or no endpoint is set.
    """
    if FlaskInstrumentor is None:  # pragma: no cover - optional dependency
        return False

    endpoint = app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT") or os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    if not endpoint:
        return False

    resource = Resource.create({"service.name": app.config.get("OTEL_SERVICE_NAME", "artsyhub")})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=endpoint,
                headers=app.config.get("OTEL_EXPORTER_OTLP_HEADERS"),
                insecure=app.config.get("OTEL_EXPORTER_OTLP_INSECURE", True),
            )
        )
    )
    trace.set_tracer_provider(provider)

    FlaskInstrumentor().instrument_app(app)
    RequestsInstrumentor().instrument()
    logger.info("OpenTelemetry tracing enabled (endpoint=%s)", endpoint)
    return True
