from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator

from fetcher.relay import HeaderProfile, RelayHandler
from fetcher.routes import router
from fetcher.utils.logging_setup import configure_logging
from fetcher.vars import (
    FETCH_HEADER_PROFILE,
    LOG_LEVEL,
    OTLP_ENDPOINT,
    OTLP_HEADERS,
    SERVICE_NAME,
)


def _parse_otlp_headers(raw: str) -> dict:
    headers: dict = {}
    for entry in raw.split(","):
        if "=" not in entry:
            continue
        key, val = entry.split("=", 1)
        if key.strip() and val.strip():
            headers[key.strip()] = val.strip()
    return headers


def configure_tracing(app: FastAPI) -> None:
    trace.set_tracer_provider(
        TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
    )
    tracer_provider = trace.get_tracer_provider()
    if OTLP_ENDPOINT:
        otlp_exporter = OTLPSpanExporter(
            endpoint=OTLP_ENDPOINT,
            headers=_parse_otlp_headers(OTLP_HEADERS) or None,
        )
        tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    FastAPIInstrumentor.instrument_app(app)


logger = configure_logging(SERVICE_NAME, LOG_LEVEL)

# The relay ships its own description and documentation page at "/".
app = FastAPI(
    title="Fetcher API",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)
app.state.relay_handler = RelayHandler(
    logger=logger,
    header_profile=HeaderProfile.from_config(FETCH_HEADER_PROFILE),
)
logger.info(
    f"[Startup] {SERVICE_NAME} relaying with header profile "
    f"'{app.state.relay_handler.header_profile.value}'"
)

instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app)

configure_tracing(app)

# Add app_name to the metrics
app_info = Info("fastapi_app_info", "Application Info")
app_info.info({"app_name": SERVICE_NAME})

app.include_router(router)
