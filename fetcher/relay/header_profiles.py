from enum import Enum
from typing import Dict

from fetcher.vars import SERVICE_NAME


class HeaderProfile(str, Enum):
    """Outbound header set used for every relayed request of a deployment."""

    BROWSER = "browser"
    MINIMAL = "minimal"

    @classmethod
    def from_config(cls, value: str) -> "HeaderProfile":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(
                f"Unknown header profile {value!r}; expected one of: {allowed}"
            ) from None


# Looks like a desktop Chrome navigation so origins that block obvious bots
# still answer. httpx only decodes brotli when the optional package is
# installed, so "br" is not advertised.
BROWSER_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
        "image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
}

MINIMAL_HEADERS: Dict[str, str] = {
    **BROWSER_HEADERS,
    "User-Agent": f"{SERVICE_NAME}/1.0 (server-side URL relay)",
    "Accept": "*/*",
}


def headers_for(profile: HeaderProfile) -> Dict[str, str]:
    """Return a fresh copy of the header set for ``profile``."""
    if profile is HeaderProfile.MINIMAL:
        return dict(MINIMAL_HEADERS)
    return dict(BROWSER_HEADERS)
