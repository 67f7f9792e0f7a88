import json

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fetcher.relay import RelayHandler
from fetcher.relay.route import router

TARGET_URL = "https://upstream.example.com/page"


def _upstream(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/page":
        return httpx.Response(
            200, text="hello", headers={"content-type": "text/plain"}
        )
    if request.url.path == "/日本":
        return httpx.Response(200, text="nihon", headers={"content-type": "text/plain"})
    if request.url.path == "/latin":
        return httpx.Response(
            200,
            content="café".encode("iso-8859-1"),
            headers={"content-type": "text/plain; charset=iso-8859-1"},
        )
    if request.url.path == "/not-modified":
        return httpx.Response(304)
    if request.url.path == "/redirect":
        return httpx.Response(302, headers={"location": "https://upstream.example.com/page"})
    return httpx.Response(404, text="nope")


@pytest.fixture
def client(relay_logger):
    app = FastAPI()
    app.state.relay_handler = RelayHandler(
        logger=relay_logger, transport=httpx.MockTransport(_upstream)
    )
    app.include_router(router)
    with TestClient(app) as test_client:
        yield test_client


def test_missing_url_parameter(client):
    r = client.get("/api/fetch")
    assert r.status_code == 400, f"Unexpected status code: {r.status_code}, {r.text}"
    assert r.json() == {"error": "URL parameter is required"}


def test_invalid_url_parameter(client):
    r = client.get("/api/fetch", params={"url": "not-a-url"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid URL format"}


def test_successful_relay(client):
    r = client.get("/api/fetch", params={"url": TARGET_URL})
    assert r.status_code == 200, f"Unexpected status code: {r.status_code}, {r.text}"
    assert r.text == "hello"
    assert r.headers["content-type"] == "text/plain"
    assert r.headers["x-fetched-from"] == TARGET_URL
    assert r.headers["x-fetch-timestamp"]


def test_redirects_are_followed(client):
    r = client.get(
        "/api/fetch", params={"url": "https://upstream.example.com/redirect"}
    )
    assert r.status_code == 200
    assert r.text == "hello"
    assert r.headers["x-fetched-from"] == "https://upstream.example.com/redirect"


def test_upstream_not_found(client):
    r = client.get(
        "/api/fetch", params={"url": "https://upstream.example.com/missing"}
    )
    assert r.status_code == 404
    assert json.loads(r.text) == {"error": "HTTP 404: Not Found"}


def test_repeated_requests_match(client):
    first = client.get("/api/fetch", params={"url": TARGET_URL})
    second = client.get("/api/fetch", params={"url": TARGET_URL})
    assert (first.status_code, first.text) == (second.status_code, second.text)


def test_non_ascii_url_is_relayed_with_encoded_provenance(client):
    r = client.get("/api/fetch", params={"url": "https://upstream.example.com/日本"})
    assert r.status_code == 200, f"Unexpected status code: {r.status_code}, {r.text}"
    assert r.text == "nihon"
    assert (
        r.headers["x-fetched-from"]
        == "https://upstream.example.com/%E6%97%A5%E6%9C%AC"
    )


def test_latin1_body_keeps_upstream_bytes(client):
    r = client.get("/api/fetch", params={"url": "https://upstream.example.com/latin"})
    assert r.status_code == 200
    assert r.content == b"caf\xe9"
    assert r.headers["content-type"] == "text/plain; charset=iso-8859-1"


def test_not_modified_has_no_body(client):
    r = client.get(
        "/api/fetch", params={"url": "https://upstream.example.com/not-modified"}
    )
    assert r.status_code == 304
    assert r.content == b""
