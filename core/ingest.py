# core/ingest.py
import logging
from typing import Callable, Iterable, Optional

import requests

from fetchers import chrome_store
from fetchers.chrome_store import (
    EndOfCategory,
    FetchError,
    ListingPage,
    ListingResult,
    TransportError,
)

from .logger import get_logger
from .models import Item
from .normalize import parse_record
from .storage import ItemStore

logger = get_logger(__name__)

FetchFn = Callable[..., ListingResult]


def normalize_and_store(store: ItemStore, raw: list) -> Item:
    item = parse_record(raw)
    if logger.isEnabledFor(logging.DEBUG):
        existing = store.find_by_external_id(item.external_id)
        logger.debug(
            "%s item %s (%s)",
            "Updating" if existing else "Creating",
            item.external_id,
            item.title,
        )
    return store.upsert(item)


def download_category(
    store: ItemStore,
    category: str,
    session: Optional[requests.Session] = None,
    fetch: Optional[FetchFn] = None,
) -> int:
    """
    Page through one category until the store reports it exhausted.
    Returns the number of records stored for this category.
    """
    fetch = fetch or chrome_store.fetch_listing
    token: Optional[str] = None
    page_size: Optional[int] = None
    stored = 0

    logger.info("Downloading category %s", category)

    while True:
        result = fetch(category, page_size=page_size, token=token, session=session)

        if isinstance(result, EndOfCategory):
            logger.info(
                "%s returned %s %s; probably no more items, going to next category.",
                category,
                result.status_code,
                result.reason,
            )
            break

        if isinstance(result, TransportError):
            raise FetchError(
                f"Listing request for {category} failed: {result.error}"
            ) from result.error

        if not isinstance(result, ListingPage):
            raise TypeError(f"Unexpected listing result: {result!r}")

        token = result.next_token
        page_size = page_size or chrome_store.PAGE_SIZE

        logger.info("Found %d items in %s", len(result.items), category)
        for raw in result.items:
            normalize_and_store(store, raw)
            stored += 1

        logger.info("Total items in db: %d", store.count())

        if token is None:
            logger.info("No pagination token for %s; last page reached.", category)
            break

    return stored


def download_all(
    store: ItemStore,
    categories: Optional[Iterable[str]] = None,
    session: Optional[requests.Session] = None,
    fetch: Optional[FetchFn] = None,
) -> int:
    """Download every category in turn. Returns the final store count."""
    session = session or chrome_store.build_session()
    store.ensure_db()

    if categories is None:
        categories = chrome_store.discover_categories(session)

    for category in categories:
        download_category(store, category, session=session, fetch=fetch)

    total = store.count()
    logger.info("Finished downloading; %d items in db.", total)
    return total
