import logging

import httpx
import pytest

from fetcher.relay import HeaderProfile, RelayHandler

TARGET_URL = "https://upstream.example.com/page"


@pytest.fixture
def relay_logger():
    """Logger that propagates to the root so caplog sees relay records."""
    logger = logging.getLogger("url-fetcher-tests")
    logger.setLevel(logging.DEBUG)
    logger.propagate = True
    return logger


@pytest.fixture
def upstream_response():
    """Build real httpx responses as the upstream would return them."""

    def _create_response(
        status_code=200, text="hello", headers=None, url=TARGET_URL
    ):
        return httpx.Response(
            status_code,
            text=text,
            headers=headers or {"content-type": "text/plain"},
            request=httpx.Request("GET", url),
        )

    return _create_response


@pytest.fixture
def relay_handler(relay_logger):
    return RelayHandler(logger=relay_logger, header_profile=HeaderProfile.BROWSER)
