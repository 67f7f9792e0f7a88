from fastapi import APIRouter, Request
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse
from opentelemetry import trace

from fetcher.docs.description import build_api_description, request_origin

router = APIRouter()
tracer = trace.get_tracer(__name__)

DESCRIPTION_PATH = "/api/description.json"


@router.get(DESCRIPTION_PATH, include_in_schema=False)
async def get_api_description(request: Request) -> JSONResponse:
    with tracer.start_as_current_span("get_api_description") as span:
        origin = request_origin(request)
        span.set_attribute("docs.origin", origin or "")
        return JSONResponse(content=build_api_description(origin))


@router.get("/", include_in_schema=False, response_class=HTMLResponse)
async def documentation_page() -> HTMLResponse:
    return get_swagger_ui_html(openapi_url=DESCRIPTION_PATH, title="Fetcher API")
