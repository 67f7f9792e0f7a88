"""OpenAPI description of the relay endpoint, rendered by the documentation page."""

from typing import Optional

from fastapi import Request

from fetcher.vars import DOCS_FALLBACK_ORIGIN

_ERROR_BODY = {
    "application/json": {
        "schema": {
            "type": "object",
            "properties": {"error": {"type": "string"}},
        }
    }
}


def request_origin(request: Optional[Request]) -> Optional[str]:
    """Origin the caller used to reach us, honouring reverse-proxy headers."""
    if request is None:
        return None
    host = request.headers.get("x-forwarded-host") or request.headers.get("host")
    if not host:
        return None
    scheme = request.headers.get("x-forwarded-proto", request.url.scheme)
    return f"{scheme}://{host}"


def build_api_description(origin: Optional[str] = None) -> dict:
    server_url = (origin or DOCS_FALLBACK_ORIGIN).rstrip("/")
    return {
        "openapi": "3.0.0",
        "info": {
            "title": "Fetcher API",
            "description": "The Fetcher API description",
            "version": "1.0.0",
        },
        "servers": [
            {
                "url": server_url,
                "description": "Development server",
            }
        ],
        "paths": {
            "/api/fetch": {
                "get": {
                    "summary": "Fetch URL content",
                    "description": (
                        "Fetches content from the specified URL and returns it. "
                        "Successful responses carry the upstream headers plus "
                        "X-Fetched-From and X-Fetch-Timestamp; other upstream "
                        "statuses are passed through with a JSON error body."
                    ),
                    "parameters": [
                        {
                            "name": "url",
                            "in": "query",
                            "required": True,
                            "description": "URL to fetch",
                            "schema": {"type": "string", "format": "uri"},
                        }
                    ],
                    "responses": {
                        "200": {
                            "description": "Successful response",
                            "content": {
                                "*/*": {
                                    "schema": {
                                        "type": "string",
                                        "description": "The fetched content",
                                    }
                                }
                            },
                        },
                        "400": {
                            "description": "Bad Request - Invalid URL",
                            "content": _ERROR_BODY,
                        },
                        "404": {
                            "description": "Not Found - host could not be resolved",
                            "content": _ERROR_BODY,
                        },
                        "408": {
                            "description": "Request Timeout",
                            "content": _ERROR_BODY,
                        },
                        "500": {
                            "description": "Internal Server Error",
                            "content": _ERROR_BODY,
                        },
                        "502": {
                            "description": "Bad Gateway - connection refused",
                            "content": _ERROR_BODY,
                        },
                    },
                }
            }
        },
    }
