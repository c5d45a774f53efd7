"""Custom span helpers for schematic query instrumentation.

These helpers follow OpenTelemetry semantic conventions where they exist
(``db.*`` attributes for store queries).
See: https://opentelemetry.io/docs/specs/semconv/database/
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from netscope_core.telemetry.setup import get_tracer


@contextmanager
def trace_graph_query(
    operation: str,
    design: str | None = None,
) -> Iterator[trace.Span]:
    """Context manager for tracing a façade query.

    Usage:
        with trace_graph_query("find_paths", "BOARD1") as span:
            graph = reduce_paths(...)
            span.set_attribute("schematic.nodes", len(graph.nodes))

    Args:
        operation: The query name (e.g., "search", "find_paths")
        design: The design the query is scoped to (optional)

    Yields:
        The active span for adding additional attributes
    """
    tracer = get_tracer()
    attrs: dict[str, Any] = {"schematic.operation": operation}
    if design:
        attrs["schematic.design"] = design

    with tracer.start_as_current_span(f"schematic.{operation}", attributes=attrs) as span:
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


@contextmanager
def trace_db_operation(
    operation: str,
    graph_name: str | None = None,
) -> Iterator[trace.Span]:
    """Context manager for tracing graph store round trips.

    Usage:
        with trace_db_operation("get_neighbors", "schematic") as span:
            rows = conn.exec_driver_sql(sql).all()
            span.set_attribute("db.rows_returned", len(rows))

    Args:
        operation: The store operation (e.g., "get_node", "scan_pins")
        graph_name: The AGE graph name (optional)

    Yields:
        The active span for adding additional attributes
    """
    tracer = get_tracer()
    attrs: dict[str, Any] = {"db.system": "postgresql", "db.operation": operation}
    if graph_name:
        attrs["db.age.graph"] = graph_name

    with tracer.start_as_current_span(f"db.{operation}", attributes=attrs) as span:
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
