"""Optional tracing for netscope queries.

Nothing is exported unless OTEL_ENABLED is set; until then every span goes
to the no-op tracer provider of the opentelemetry API.

Usage:
    from netscope_core.telemetry import init_telemetry, shutdown_telemetry

    init_telemetry(service_suffix="-worker")
    ...
    shutdown_telemetry()
"""

from netscope_core.telemetry.setup import (
    get_tracer,
    init_telemetry,
    shutdown_telemetry,
)
from netscope_core.telemetry.spans import (
    trace_db_operation,
    trace_graph_query,
)

__all__ = [
    "init_telemetry",
    "shutdown_telemetry",
    "get_tracer",
    "trace_graph_query",
    "trace_db_operation",
]
