import json
from dataclasses import dataclass, field
from typing import Optional

import httpx
from fastapi.responses import Response
from pydantic import (
    AnyHttpUrl,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic_core import PydanticCustomError

URL_REQUIRED_MESSAGE = "URL parameter is required"
INVALID_URL_MESSAGE = "Invalid URL format"

_http_url = TypeAdapter(AnyHttpUrl)

# The relayed body is re-encoded, so framing headers computed upstream no
# longer describe it. Hop-by-hop headers never pass a proxy.
NON_FORWARDED_RESPONSE_HEADERS = {
    "content-encoding",
    "content-length",
    "transfer-encoding",
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "upgrade",
}

# Statuses that must not carry a message body on the wire.
BODYLESS_STATUS_CODES = {204, 304}


class RelayRequest(BaseModel):
    """Validated input of a relay call. ``url`` is kept exactly as supplied."""

    url: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("url", mode="before")
    @classmethod
    def _validate_url(cls, value):
        if value is None or (isinstance(value, str) and value == ""):
            raise PydanticCustomError("url_required", URL_REQUIRED_MESSAGE)
        if not isinstance(value, str):
            raise PydanticCustomError("url_format", INVALID_URL_MESSAGE)
        try:
            parsed = _http_url.validate_python(value)
        except ValidationError:
            raise PydanticCustomError("url_format", INVALID_URL_MESSAGE) from None
        if not parsed.host:
            raise PydanticCustomError("url_format", INVALID_URL_MESSAGE)
        return value


def validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if errors and errors[0].get("msg"):
        return errors[0]["msg"]
    return "Validation error"


@dataclass
class RelayResponse:
    status_code: int
    status_text: str = ""
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: str = ""
    charset: str = "utf-8"

    @classmethod
    def error(cls, status_code: int, message: str, status_text: str = "") -> "RelayResponse":
        return cls(
            status_code=status_code,
            status_text=status_text,
            headers=httpx.Headers({"content-type": "application/json"}),
            body=json.dumps({"error": message}),
        )

    @property
    def is_error(self) -> bool:
        return not 200 <= self.status_code < 300

    @property
    def allows_body(self) -> bool:
        return self.status_code >= 200 and self.status_code not in BODYLESS_STATUS_CODES

    def to_response(self) -> Response:
        """
        Render as a Starlette response. ASGI carries no reason phrase, so
        ``status_text`` stays on this object and in the logs.

        Header bytes are copied as received; upstream values are not always
        latin-1 and Starlette would re-encode decoded strings as latin-1.
        """
        response = Response(
            content=(
                self.body.encode(self.charset, errors="replace")
                if self.allows_body
                else None
            ),
            status_code=self.status_code,
        )
        for name, value in self.headers.raw:
            lowered = name.lower()
            if lowered.decode("latin-1") in NON_FORWARDED_RESPONSE_HEADERS:
                continue
            if lowered == b"content-type" and not self.allows_body:
                continue
            response.raw_headers.append((lowered, value))
        return response
