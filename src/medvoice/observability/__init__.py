"""
Observability module for tracing.

Provides custom OpenTelemetry spans for AI gateway calls and pipeline stages.
Exporters are configured by the hosting process; without one the API's
no-op tracer is used.
"""

from .tracing import (
    trace_operation,
    set_span_status,
    add_span_attribute,
)

__all__ = [
    "trace_operation",
    "set_span_status",
    "add_span_attribute",
]
