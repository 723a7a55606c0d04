import logging
from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from azure.monitor.opentelemetry.exporter import AzureMonitorTraceExporter
from scheduling.configuration.config import Config

logger = logging.getLogger("scheduling")
if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    logger.addHandler(_handler)
logger.setLevel(logging.INFO)

def _build_tracer():
    """
    Tracer for the scheduling service.
    Spans go to Application Insights when a connection string is configured
    and stay in-process otherwise.
    """
    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: Config.SERVICE_NAME}))
    trace.set_tracer_provider(provider)
    try:
        if Config.APPLICATIONINSIGHTS_CONNECTION_STRING:
            exporter = AzureMonitorTraceExporter(connection_string=Config.APPLICATIONINSIGHTS_CONNECTION_STRING)
            provider.add_span_processor(BatchSpanProcessor(exporter))
            logger.info("Exporting traces to Azure Monitor")
        # Notification webhooks are sent with httpx
        HTTPXClientInstrumentor().instrument()
    except Exception as e:
        logger.error("Tracing export setup failed: %s", e)
    return trace.get_tracer("scheduling")

tracer = _build_tracer()

def _set_attributes(span, properties):
    for key, value in (properties or {}).items():
        span.set_attribute(key, str(value))

def instrument_fastapi(app):
    try:
        FastAPIInstrumentor.instrument_app(app)
    except Exception as e:
        logger.error("FastAPI instrumentation failed: %s", e)

def start_span(name, context=None, kind=None, attributes=None):
    """Open a span as the current one; use as a context manager"""
    return tracer.start_as_current_span(name, context=context, kind=kind, attributes=attributes)

def log_event(event_name, properties=None):
    """Record a named event on its own span and in the service log"""
    try:
        with tracer.start_as_current_span(event_name) as span:
            _set_attributes(span, properties)
        logger.info("%s %s", event_name, properties or "")
    except Exception as e:
        logger.error("Could not record event %s: %s", event_name, e)

def log_exception(exception, properties=None):
    try:
        with tracer.start_as_current_span("exception") as span:
            span.record_exception(exception)
            _set_attributes(span, properties)
            span.set_status(trace.StatusCode.ERROR, str(exception))
        logger.exception("%s: %s %s", type(exception).__name__, exception, properties or "", exc_info=exception)
    except Exception as e:
        logger.error("Could not record exception: %s", e)

def log_metric(metric_name, value, properties=None):
    """Single numeric measurement, e.g. cascade_cancellations per confirmation"""
    try:
        with tracer.start_as_current_span(f"metric:{metric_name}") as span:
            span.set_attribute("metric.value", value)
            _set_attributes(span, properties)
        logger.info("%s=%s %s", metric_name, value, properties or "")
    except Exception as e:
        logger.error("Could not record metric %s: %s", metric_name, e)
