from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from fetcher.relay.handler import RelayHandler

router = APIRouter(prefix="/api")


def get_relay_handler(request: Request) -> RelayHandler:
    """The handler is built once at startup and stored on the application state."""
    return request.app.state.relay_handler


@router.get("/fetch")
async def fetch_url(
    url: Optional[str] = Query(None, description="URL to fetch"),
    handler: RelayHandler = Depends(get_relay_handler),
) -> Response:
    """Fetch the given URL server-side and relay its status, headers and body."""
    return await handler.respond(url)
