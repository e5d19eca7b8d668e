"""Tests for OpenTelemetry tracing setup."""

from unittest.mock import patch

from opentelemetry.sdk.trace import TracerProvider

import transcript_relay.tracing as tracing
from transcript_relay.tracing import setup_tracing


def test_setup_tracing_is_idempotent() -> None:
    """A second call returns the installed provider and does not replace it."""
    provider = setup_tracing(service_name="test-service", environment="test")
    assert isinstance(provider, TracerProvider)
    with patch("transcript_relay.tracing.trace.set_tracer_provider") as mock_set:
        again = setup_tracing(service_name="other-service", endpoint="http://collector:4318/v1/traces")
    mock_set.assert_not_called()
    assert again is provider


def test_setup_tracing_exports_only_with_endpoint() -> None:
    """An OTLP exporter is attached when an endpoint is given, never otherwise."""
    with (
        patch.object(tracing, "_provider", None),
        patch("transcript_relay.tracing.trace.set_tracer_provider"),
        patch("transcript_relay.tracing.OTLPSpanExporter") as mock_exporter_cls,
        patch("transcript_relay.tracing.BatchSpanProcessor") as mock_processor_cls,
    ):
        setup_tracing(service_name="test-service")
        mock_exporter_cls.assert_not_called()

        tracing._provider = None
        with patch.object(TracerProvider, "add_span_processor") as mock_add:
            setup_tracing(service_name="test-service", endpoint="http://collector:4318/v1/traces")
        mock_exporter_cls.assert_called_once_with(endpoint="http://collector:4318/v1/traces")
        mock_add.assert_called_once_with(mock_processor_cls.return_value)
