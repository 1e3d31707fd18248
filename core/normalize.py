# core/normalize.py
import re
from typing import Any, Optional

from .models import Item

# Offsets into a raw listing record. The listing endpoint is undocumented, so
# if its layout drifts this table is the only place to change.
ITEM_INDEXES = {
    "external_id": 0,
    "title": 1,
    "downloads": 23,
    "description": 6,
    "category": 9,
    "category_name": 10,
    "rating": 12,
    "user_ratings": 22,
    "pricing": 30,
}

_LEADING_DIGITS = re.compile(r"\d+")


class RecordError(ValueError):
    """A raw listing record could not be turned into an Item."""


def normalize_downloads(value: Any) -> Optional[int]:
    """
    Coerce a download count to an int.
    "1,304,123" -> 1304123, "10,000+" -> 10000, 42 -> 42, None -> None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise RecordError(f"Unexpected boolean count: {value!r}")
    if isinstance(value, str):
        cleaned = value.replace(",", "").strip()
        if cleaned.startswith("-"):
            raise RecordError(f"Negative count: {value!r}")
        m = _LEADING_DIGITS.match(cleaned)
        return int(m.group(0)) if m else 0
    if isinstance(value, (int, float)):
        try:
            count = int(value)
        except (ValueError, OverflowError):
            raise RecordError(f"Non-finite count: {value!r}")
        if count < 0:
            raise RecordError(f"Negative count: {value!r}")
        return count
    raise RecordError(f"Unsupported count value: {value!r}")


def _field(raw: list, name: str) -> Any:
    idx = ITEM_INDEXES[name]
    return raw[idx] if idx < len(raw) else None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _rating(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise RecordError(f"Unparseable rating: {value!r}")


def parse_record(raw: Any) -> Item:
    """Map one positional listing record onto an Item."""
    if not isinstance(raw, list):
        raise RecordError(f"Listing record is not a list: {type(raw).__name__}")

    external_id = _text(_field(raw, "external_id")).strip()
    if not external_id:
        raise RecordError("Listing record has no external id")

    return Item(
        external_id=external_id,
        title=_text(_field(raw, "title")),
        downloads=normalize_downloads(_field(raw, "downloads")),
        description=_text(_field(raw, "description")),
        category=_text(_field(raw, "category")),
        category_name=_text(_field(raw, "category_name")),
        rating=_rating(_field(raw, "rating")),
        user_ratings=normalize_downloads(_field(raw, "user_ratings")),
        pricing=_text(_field(raw, "pricing")),
    )
