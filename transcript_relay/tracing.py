"""OpenTelemetry tracing for the transcript relay."""

from __future__ import annotations

from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

_provider: Optional[TracerProvider] = None


def setup_tracing(
    service_name: str,
    environment: Optional[str] = None,
    endpoint: Optional[str] = None,
) -> TracerProvider:
    """Install the global TracerProvider once and return it.

    Spans from the download and transcription steps are exported over
    OTLP/HTTP to ``endpoint``. Without an endpoint they are still created,
    so their ids reach the logs, but nothing leaves the process.
    """
    global _provider
    if _provider is not None:
        return _provider

    resource_attrs = {"service.name": service_name}
    if environment:
        resource_attrs["deployment.environment"] = environment

    provider = TracerProvider(resource=Resource.create(resource_attrs))
    if endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))

    trace.set_tracer_provider(provider)
    _provider = provider
    return provider
