"""Tracer provider lifecycle for netscope.

Tracing is off unless ``OTEL_ENABLED`` is set. The SDK and the OTLP
exporter are imported only when a provider is actually built, so a
disabled process pays nothing beyond the opentelemetry API.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry import trace as trace_api

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.sampling import Sampler
    from opentelemetry.trace import Tracer

    from netscope_core.settings import Settings

logger = logging.getLogger(__name__)

TRACER_NAME = "netscope"

_provider: TracerProvider | None = None


def _sampler(settings: Settings) -> Sampler:
    """Map the configured sampler name to an SDK sampler (always_on if unknown)."""
    from opentelemetry.sdk.trace import sampling

    ratio = settings.otel_traces_sampler_arg
    name = settings.otel_traces_sampler.strip().lower()
    if name == "always_off":
        return sampling.ALWAYS_OFF
    if name == "traceidratio":
        return sampling.TraceIdRatioBased(ratio)
    if name == "parentbased_traceidratio":
        return sampling.ParentBasedTraceIdRatio(ratio)
    if name != "always_on":
        logger.warning("Unknown OTEL sampler %r, sampling every trace", name)
    return sampling.ALWAYS_ON


def _build_provider(settings: Settings, service_name: str) -> TracerProvider:
    """Tracer provider exporting batched spans to the OTLP gRPC endpoint."""
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import SERVICE_NAME, Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    resource = Resource.create(
        {
            SERVICE_NAME: service_name,
            "deployment.environment": "development" if settings.debug else "production",
        }
    )
    provider = TracerProvider(resource=resource, sampler=_sampler(settings))
    exporter = OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    return provider


def init_telemetry(service_suffix: str = "", settings: Settings | None = None) -> bool:
    """Install the netscope tracer provider when tracing is enabled.

    Repeated calls keep the provider from the first successful call.

    Args:
        service_suffix: Appended to ``otel_service_name`` (e.g. "-worker")
        settings: Settings to read (process settings if None)

    Returns:
        Whether a provider is installed
    """
    global _provider

    if _provider is not None:
        return True

    if settings is None:
        from netscope_core.settings import get_settings

        settings = get_settings()

    if not settings.otel_enabled:
        logger.debug("Tracing disabled, spans go to the no-op provider")
        return False

    service_name = f"{settings.otel_service_name}{service_suffix}"
    _provider = _build_provider(settings, service_name)
    trace_api.set_tracer_provider(_provider)
    logger.info(
        "Tracing enabled for %s, exporting to %s",
        service_name,
        settings.otel_exporter_otlp_endpoint,
    )
    return True


def shutdown_telemetry() -> None:
    """Flush pending spans and drop the installed provider, if any."""
    global _provider

    if _provider is None:
        return

    provider, _provider = _provider, None
    provider.shutdown()
    logger.info("Tracing shut down")


def get_tracer(name: str = TRACER_NAME) -> Tracer:
    """Tracer from the installed provider, or the global (no-op) one."""
    if _provider is not None:
        return _provider.get_tracer(name)

    return trace_api.get_tracer(name)
