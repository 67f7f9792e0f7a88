import asyncio
import logging
from typing import Dict, Optional

import httpx
from fastapi.responses import Response
from opentelemetry import trace
from pydantic import ValidationError

from fetcher.relay.errors import (
    GENERIC_FETCH_ERROR,
    RelayErrorKind,
    classify_transport_error,
    transport_error_message,
)
from fetcher.relay.header_profiles import HeaderProfile, headers_for
from fetcher.relay.metrics import record_outcome
from fetcher.relay.models import RelayRequest, RelayResponse, validation_message
from fetcher.utils import iso_timestamp, preview_text
from fetcher.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
    safe_log,
)
from fetcher.vars import FETCH_PREVIEW_CHARS, FETCH_TIMEOUT_SECONDS

tracer = trace.get_tracer(__name__)

LOG_PREFIX = "[Relay]"
FETCHED_FROM_HEADER = "X-Fetched-From"
FETCH_TIMESTAMP_HEADER = "X-Fetch-Timestamp"


class RelayHandler:
    """
    Performs one outbound GET per call and maps the outcome to a RelayResponse.

    Each call walks Received -> Validating -> (Rejected | Fetching) ->
    (Succeeded | UpstreamError | TransportError) -> Responded, without retries.
    The handler holds configuration only, so one instance serves all requests.
    """

    def __init__(
        self,
        logger: logging.Logger,
        header_profile: HeaderProfile = HeaderProfile.BROWSER,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        preview_chars: int = FETCH_PREVIEW_CHARS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.logger = logger
        self.header_profile = header_profile
        self.timeout = timeout
        self.preview_chars = preview_chars
        self.transport = transport

    @property
    def outbound_headers(self) -> Dict[str, str]:
        return headers_for(self.header_profile)

    async def handle(self, url: Optional[str]) -> RelayResponse:
        with tracer.start_as_current_span("relay_fetch") as span:
            span.set_attribute("relay.target_url", url or "")
            span.set_attribute("relay.header_profile", self.header_profile.value)
            self._log(logging.INFO, "Fetch endpoint called", stage="received", url=url)

            try:
                request = RelayRequest(url=url)
            except ValidationError as e:
                message = validation_message(e)
                self._log(
                    logging.ERROR,
                    f"Validation error: {message}",
                    stage="rejected",
                    url=url,
                    error_kind=RelayErrorKind.VALIDATION.value,
                )
                return self._finish(
                    span,
                    url,
                    RelayResponse.error(RelayErrorKind.VALIDATION.status_code, message),
                    outcome="rejected",
                )

            try:
                upstream = await self._fetch(request.url)
            except Exception as e:
                kind = classify_transport_error(e)
                message = transport_error_message(kind, e)
                log_exception_with_details(
                    self.logger,
                    f"{LOG_PREFIX} Failed to fetch from {request.url}: {message}",
                    e,
                    stage="transport_error",
                    url=request.url,
                    error_kind=kind.value,
                )
                span.set_attribute("relay.error", kind.value)
                return self._finish(
                    span,
                    request.url,
                    RelayResponse.error(kind.status_code, message),
                    outcome=kind.value,
                )

            if not upstream.is_success:
                self._log(
                    logging.ERROR,
                    f"HTTP error: {upstream.status_code} {upstream.reason_phrase}",
                    stage="upstream_error",
                    url=request.url,
                    error_kind=RelayErrorKind.UPSTREAM_STATUS.value,
                    status=upstream.status_code,
                )
                span.set_attribute("relay.error", RelayErrorKind.UPSTREAM_STATUS.value)
                return self._finish(
                    span,
                    request.url,
                    RelayResponse.error(
                        upstream.status_code,
                        f"HTTP {upstream.status_code}: {upstream.reason_phrase}",
                        status_text=upstream.reason_phrase,
                    ),
                    outcome="upstream_error",
                )

            return self._finish(
                span, request.url, self._relay_success(request.url, upstream), "succeeded"
            )

    async def respond(self, url: Optional[str]) -> Response:
        """Relay ``url`` and render the result; rendering failures become a JSON 500."""
        relayed = await self.handle(url)
        try:
            return relayed.to_response()
        except Exception as e:
            log_exception_with_details(
                self.logger,
                f"{LOG_PREFIX} Failed to render response for {url}",
                e,
                stage="render_error",
                url=url,
            )
            record_outcome("render_error")
            message = format_exception_message(e) or GENERIC_FETCH_ERROR
            return RelayResponse.error(500, message).to_response()

    async def _fetch(self, url: str) -> httpx.Response:
        # httpx timeouts apply per phase; wait_for bounds the whole call.
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            return await asyncio.wait_for(
                client.get(url, headers=self.outbound_headers),
                timeout=self.timeout,
            )

    def _relay_success(self, url: str, upstream: httpx.Response) -> RelayResponse:
        content = upstream.text
        content_type = upstream.headers.get("content-type", "unknown")
        self._log(
            logging.INFO,
            f"Successfully fetched from {url}",
            stage="fetched",
            url=url,
            content_type=content_type,
            length=len(content),
        )
        self._log(
            logging.INFO,
            "Content preview",
            stage="fetched",
            url=url,
            preview=repr(preview_text(content, self.preview_chars)),
        )

        headers = httpx.Headers(upstream.headers)
        # Percent-encoded path, IDNA host: header values must be ASCII-safe.
        headers[FETCHED_FROM_HEADER] = str(httpx.URL(url))
        headers[FETCH_TIMESTAMP_HEADER] = iso_timestamp()

        return RelayResponse(
            status_code=upstream.status_code,
            status_text=upstream.reason_phrase,
            headers=headers,
            body=content,
            charset=upstream.encoding or "utf-8",
        )

    def _finish(
        self, span, url: Optional[str], response: RelayResponse, outcome: str
    ) -> RelayResponse:
        span.set_attribute("relay.status_code", response.status_code)
        span.set_attribute("relay.outcome", outcome)
        record_outcome(outcome)
        self._log(
            logging.WARNING if response.is_error else logging.INFO,
            f"Returning response with status {response.status_code}",
            stage="responded",
            url=url,
            outcome=outcome,
            length=len(response.body),
        )
        return response

    def _log(self, level: int, message: str, **fields) -> None:
        safe_log(self.logger, level, f"{LOG_PREFIX} {message}", **fields)
