# core/exporter.py
import csv
import os

from .logger import get_logger
from .models import COLUMNS
from .storage import ItemStore

logger = get_logger(__name__)

CSV_PATH = os.getenv("CSV_PATH", "chrome_store_data.csv")


def write_csv(store: ItemStore, path: str = CSV_PATH) -> int:
    """
    Dump every stored item to a CSV file, header first.
    Returns the number of data rows written.
    """
    logger.info("Writing file to %s", path)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    rows = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(COLUMNS)
        for item in store.all():
            writer.writerow(item.as_row())
            rows += 1

    logger.info("Wrote %d items to %s", rows, path)
    return rows
