"""
Centralized logging configuration for valheimbot.

This module provides consistent logging setup whether the service runs
under gunicorn/uvicorn or as a one-shot CLI command.
"""

import logging
import os
import sys
from typing import Optional

try:
    from opentelemetry._logs import set_logger_provider
    from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
    from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.trace import set_tracer_provider

    OTEL_AVAILABLE = True
except ImportError:
    OTEL_AVAILABLE = False

from valheimbot.config import SERVICE_NAME

logger = logging.getLogger(__name__)

# third party loggers that are far too chatty at INFO
NOISY_LOGGERS = (
    "uvicorn.access",
    "urllib3",
    "google",
    "google.auth",
    "google.api_core",
)


def setup_logging(
    level: int = logging.INFO,
    microservice_name: Optional[str] = None,
    app_env: Optional[str] = None,
    force_setup: bool = False,
    enable_otel: bool = False,
    enable_console: bool = True,
    otel_endpoint: Optional[str] = None,
) -> None:
    """
    Setup logging configuration for valheimbot with optional OTEL support.

    Args:
        level: Logging level (default: INFO)
        microservice_name: Name of the component (e.g., 'interactions-api', 'cli')
        app_env: Application environment (e.g., 'dev', 'prod')
        force_setup: Whether to force reconfiguration even if already setup
        enable_otel: Whether to enable OTEL logging and tracing
        enable_console: Whether to enable console logging (default: True)
        otel_endpoint: OTEL collector endpoint (defaults to env var)
    """
    root_logger = logging.getLogger()
    if root_logger.handlers and not force_setup:
        # already configured, just make sure the level is right
        root_logger.setLevel(level)
        return

    if force_setup:
        root_logger.handlers.clear()

    if enable_otel and OTEL_AVAILABLE:
        _setup_otel_logging(SERVICE_NAME, microservice_name, app_env, otel_endpoint)
        _setup_otel_tracing(SERVICE_NAME, microservice_name, app_env, otel_endpoint)

    if enable_console:
        _setup_console_logging(microservice_name)

    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(SERVICE_NAME).setLevel(level)

    if enable_otel and not OTEL_AVAILABLE:
        logger.warning(
            "OTLP logging requested but opentelemetry is not installed; "
            "install the 'otel' extra"
        )


def create_formatter(microservice_name: Optional[str] = None) -> logging.Formatter:
    """
    Create the standard formatter.

    Args:
        microservice_name: Name of the component for log identification

    Returns:
        Configured logging formatter
    """
    if microservice_name:
        service_prefix = f"[{microservice_name}] "
    else:
        service_prefix = ""

    return logging.Formatter(
        f"%(asctime)s - {service_prefix}%(name)s - %(levelname)s - %(message)s"
    )


def setup_server_logging(microservice_name: Optional[str] = None) -> None:
    """
    Route uvicorn/gunicorn loggers through the standard formatter.

    Server loggers get their own handler and stop propagating, so the root
    logger configuration (and any OTEL handler on it) is left alone.

    Args:
        microservice_name: Name of the component for log identification
    """
    formatter = create_formatter(microservice_name)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    server_loggers = [
        "uvicorn",
        "uvicorn.error",
        "uvicorn.access",
        "gunicorn",
        "gunicorn.access",
        "gunicorn.error",
    ]

    for logger_name in server_loggers:
        server_logger = logging.getLogger(logger_name)
        server_logger.handlers.clear()
        server_logger.addHandler(console_handler)
        server_logger.setLevel(logging.INFO)
        server_logger.propagate = False


def _resource_attributes(
    service_name: str,
    microservice_name: Optional[str] = None,
    app_env: Optional[str] = None,
) -> dict:
    resource_attrs = {
        "service.name": service_name,
        "service.instance.id": os.uname().nodename,
    }
    if microservice_name:
        resource_attrs["service.component"] = microservice_name
    if app_env:
        resource_attrs["deployment.environment"] = app_env
    return resource_attrs


def _setup_otel_logging(
    service_name: str,
    microservice_name: Optional[str] = None,
    app_env: Optional[str] = None,
    otel_endpoint: Optional[str] = None,
) -> None:
    logger_provider = LoggerProvider(
        resource=Resource.create(
            _resource_attributes(service_name, microservice_name, app_env)
        )
    )
    set_logger_provider(logger_provider)

    endpoint = otel_endpoint or os.getenv("OTEL_EXPORTER_OTLP_LOGS_ENDPOINT")
    otlp_exporter = OTLPLogExporter(endpoint=endpoint, insecure=True)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(otlp_exporter))

    handler = LoggingHandler(level=logging.NOTSET, logger_provider=logger_provider)
    logging.getLogger().addHandler(handler)


def _setup_otel_tracing(
    service_name: str,
    microservice_name: Optional[str] = None,
    app_env: Optional[str] = None,
    otel_endpoint: Optional[str] = None,
) -> None:
    tracer_provider = TracerProvider(
        resource=Resource.create(
            _resource_attributes(service_name, microservice_name, app_env)
        )
    )
    set_tracer_provider(tracer_provider)

    traces_endpoint = (
        otel_endpoint
        or os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
        or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    )
    otlp_span_exporter = OTLPSpanExporter(endpoint=traces_endpoint, insecure=True)
    tracer_provider.add_span_processor(BatchSpanProcessor(otlp_span_exporter))


def _setup_console_logging(microservice_name: Optional[str] = None) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(create_formatter(microservice_name))
    logging.getLogger().addHandler(handler)


def get_gunicorn_config(
    microservice_name: str,
    port: int = 8000,
    workers: int = 1,
    worker_class: str = "uvicorn.workers.UvicornWorker",
    preload_app: bool = True,
) -> dict:
    """
    Get Gunicorn configuration for the interactions API.

    Logging is configured in the app factory, not here, so the handlers are
    set up in the worker process after forking.

    Args:
        microservice_name: Name of the component for identification
        port: Port to bind to
        workers: Number of worker processes
        worker_class: Gunicorn worker class to use
        preload_app: Whether to preload the application before forking workers

    Returns:
        Configuration dict for Gunicorn
    """
    return {
        "bind": f"0.0.0.0:{port}",
        "workers": workers,
        "worker_class": worker_class,
        "preload_app": preload_app,
        "keepalive": 2,
        # Discord gives up on an interaction after 3 seconds, anything past 30 is a hang
        "timeout": 30,
        "graceful_timeout": 30,
        "access_log_format": f'[{microservice_name}] %(h)s "%(r)s" %(s)s %(b)s "%(a)s" %(D)s',
        "accesslog": "-",
        "errorlog": "-",
        "loglevel": "info",
        "capture_output": True,
        "enable_stdio_inheritance": True,
    }
