"""OpenTelemetry wiring for the metrics service.

Tracing and OTLP log export are off unless ``telemetry_enabled`` is set.
When on, every request span is tagged with the calling tenant and the
seeding runs show up as child spans of the request that triggered them.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from sqlalchemy.ext.asyncio import AsyncEngine

from erp_metrics.config import AppSettings

logger = logging.getLogger(__name__)

TENANT_HEADER = b"x-tenant-id"
UNTRACED_URLS = "health"

_installed = False


def tag_tenant(span: trace.Span, scope: dict[str, Any]) -> None:
    """Copy the ``X-Tenant-Id`` request header onto the server span."""

    if span is None or not span.is_recording():
        return
    for name, value in scope.get("headers") or ():
        if name.lower() == TENANT_HEADER:
            span.set_attribute("erp.tenant_id", value.decode("latin-1"))
            return


def setup_telemetry(app: FastAPI, settings: AppSettings, engine: AsyncEngine | None = None) -> bool:
    """Install exporters and instrumentation once per process.

    Returns ``True`` only for the call that actually installed them.
    """

    global _installed  # noqa: PLW0603

    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False
    if _installed:
        return False

    resource = Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
            ResourceAttributes.SERVICE_NAMESPACE: "erp",
        }
    )
    exporter_kwargs: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        exporter_kwargs["endpoint"] = settings.telemetry_otlp_endpoint

    provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
    )
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**exporter_kwargs)))
    trace.set_tracer_provider(provider)

    log_provider = LoggerProvider(resource=resource)
    log_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(**exporter_kwargs)))
    set_logger_provider(log_provider)
    LoggingInstrumentor().instrument(set_logging_format=False)

    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=provider,
        excluded_urls=UNTRACED_URLS,
        server_request_hook=tag_tenant,
    )
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=provider)

    _installed = True
    logger.info("Telemetry exporting to %s", settings.telemetry_otlp_endpoint or "the default OTLP endpoint")
    return True


__all__ = ["setup_telemetry", "tag_tenant"]
