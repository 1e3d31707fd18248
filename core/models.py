# core/models.py
from dataclasses import astuple, dataclass, fields
from typing import Optional


@dataclass
class Item:
    """
    One Chrome Web Store listing (app, extension, theme, game...).
    Field order is the storage and CSV column order.
    """
    external_id: str
    title: str = ""
    downloads: Optional[int] = None
    description: str = ""
    category: str = ""
    category_name: str = ""
    rating: Optional[float] = None
    user_ratings: Optional[int] = None
    pricing: str = ""

    def as_row(self) -> tuple:
        return astuple(self)


COLUMNS = tuple(f.name for f in fields(Item))
