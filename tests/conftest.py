"""
Shared test fixtures.
"""

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from tracelink.observability import tracing
from tracelink.observability.logging import StructuredLogger


@pytest.fixture
def span_exporter(monkeypatch):
    """Route spans from get_tracer() to an in-memory exporter."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    monkeypatch.setattr(tracing, "_tracer", provider.get_tracer("tests"))
    yield exporter
    exporter.clear()


@pytest.fixture
def log_entries():
    """Entries captured by `collecting_logger`."""
    return []


@pytest.fixture
def collecting_logger(log_entries):
    """Structured logger whose sink appends to `log_entries`."""
    return StructuredLogger("tests", sink=log_entries.append)
