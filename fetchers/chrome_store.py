# fetchers/chrome_store.py
import datetime
import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import requests

from core.logger import get_logger

logger = get_logger(__name__)

ROOT_URL = os.getenv("WEBSTORE_URL", "https://chrome.google.com/webstore")
LISTING_URL = os.getenv(
    "WEBSTORE_LISTING_URL", "https://chrome.google.com/webstore/ajax/item"
)
USER_AGENT = os.getenv(
    "WEBSTORE_USER_AGENT",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
)
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "75"))
DEBUG_DIR = Path(os.getenv("DEBUG_DIR", "debug_dumps"))

# Paths into the parsed listing document.
ITEMS_PATH = (0, 1, 1)
NEXT_TOKEN_PATH = (0, 1, 4)

# Category links look like ext/<slug>" in the root document; the "free"
# listings are a filter view, not a category.
CATEGORY_RE = re.compile(r'(ext/(?!free).+?)"')

BASE_PARAMS = {
    "hl": "en-US",
    "gl": "JP",
    "pv": "20170206",
    "mce": "atf,eed,pii,rtr,rlb,gtc,hcn,svp,wtd,c3d,ncr,ctm,ac,hot,mac,fcf,rma",
    "marquee": "true",
    "sortBy": "0",
    "container": "CHROME",
    "rt": "j",
}


class WebstoreError(Exception):
    """Generic web store fetch error."""


class FetchError(WebstoreError):
    """The store could not be reached or answered unexpectedly."""


class ListingFormatError(WebstoreError):
    """A listing response did not have the expected layout."""


@dataclass
class ListingPage:
    items: List[list] = field(default_factory=list)
    next_token: Optional[str] = None


@dataclass
class EndOfCategory:
    """The store answered with an error status: no more items in the category."""
    category: str
    status_code: int
    reason: str = ""


@dataclass
class TransportError:
    category: str
    error: Exception


ListingResult = Union[ListingPage, EndOfCategory, TransportError]


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept-Language": "en-US,en;q=0.9",
        }
    )
    return session


def _sanitize(name: str) -> str:
    return "".join(ch if ch.isalnum() or ch in "._-" else "_" for ch in name)


def _dump_body(category: str, body: str) -> None:
    """Write a response body to DEBUG_DIR when DEBUG logging is enabled."""
    if not logger.isEnabledFor(logging.DEBUG):
        return

    timestamp = datetime.datetime.now(datetime.timezone.utc).strftime("%Y%m%d_%H%M%S")
    path = DEBUG_DIR / f"listing_{_sanitize(category)}_{timestamp}.txt"
    try:
        DEBUG_DIR.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
        logger.debug("Dumped listing body to %s", path)
    except OSError as exc:
        logger.debug("Failed to dump listing body to %s: %s", path, exc)


def parse_categories(body: Union[str, bytes]) -> List[str]:
    """Extract unique category slugs from the root document, in document order."""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")

    seen: dict[str, None] = {}
    for slug in CATEGORY_RE.findall(body):
        seen.setdefault(slug, None)
    return list(seen)


def discover_categories(session: Optional[requests.Session] = None) -> List[str]:
    """
    Fetch the root catalog page and return its category slugs.
    Failure here is fatal for the run.
    """
    session = session or build_session()
    logger.info("Discovering categories from %s", ROOT_URL)
    try:
        resp = session.get(ROOT_URL, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"Could not fetch root catalog {ROOT_URL}: {exc}") from exc

    categories = parse_categories(resp.text)
    logger.info("Found %d categories.", len(categories))
    logger.debug("Categories: %s", categories)
    return categories


def build_listing_params(
    category: str, page_size: Optional[int] = None, token: Optional[str] = None
) -> dict[str, str]:
    params = dict(BASE_PARAMS)
    params["category"] = category
    params["count"] = str(page_size or PAGE_SIZE)
    if token is not None:
        params["token"] = token
    return params


def _dig(data: Any, path: Sequence[int]) -> Any:
    node = data
    for idx in path:
        if not isinstance(node, list) or idx >= len(node):
            return None
        node = node[idx]
    return node


def parse_listing_body(body: str) -> ListingPage:
    """
    Parse a listing response. The JSON document follows a non-JSON preamble
    and starts after the last blank line.
    """
    payload = body.rsplit("\n\n", 1)[-1]
    try:
        data = json.loads(payload)
    except ValueError as exc:
        raise ListingFormatError(f"Listing body is not JSON: {exc}") from exc

    items = _dig(data, ITEMS_PATH)
    if not isinstance(items, list):
        raise ListingFormatError(
            f"No item list at {list(ITEMS_PATH)} in listing response"
        )

    next_token = _dig(data, NEXT_TOKEN_PATH)
    return ListingPage(
        items=items,
        next_token=str(next_token) if next_token not in (None, "") else None,
    )


def fetch_listing(
    category: str,
    page_size: Optional[int] = None,
    token: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> ListingResult:
    """Request one page of a category's listing."""
    session = session or build_session()
    params = build_listing_params(category, page_size, token)
    logger.debug("Requesting %s", json.dumps(params))

    try:
        resp = session.post(LISTING_URL, data=params, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        return TransportError(category=category, error=exc)

    if not resp.ok:
        return EndOfCategory(
            category=category,
            status_code=resp.status_code,
            reason=resp.reason or "",
        )

    body = resp.text
    try:
        return parse_listing_body(body)
    except ListingFormatError:
        _dump_body(category, body)
        raise
