import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "url-fetcher")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# browser | minimal
FETCH_HEADER_PROFILE = os.getenv("FETCH_HEADER_PROFILE", "browser").strip().lower()
FETCH_TIMEOUT_SECONDS = 30.0
FETCH_PREVIEW_CHARS = 200

DOCS_FALLBACK_ORIGIN = os.getenv(
    "DOCS_FALLBACK_ORIGIN", "http://localhost:3000"
).rstrip("/")

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
