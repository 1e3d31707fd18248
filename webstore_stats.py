import argparse
import logging
from typing import List, Optional

from core.logger import get_logger, set_level
from core.exporter import CSV_PATH, write_csv
from core.ingest import download_all
from core.storage import ItemStore

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webstore_stats",
        description="Collect Chrome Web Store listing stats into SQLite and export them to CSV.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-d", "--download",
        action="store_true",
        help="download all data to sqlite",
    )
    mode.add_argument(
        "-c", "--csv",
        action="store_true",
        help="generate csv from data in sqlite",
    )
    parser.add_argument(
        "--category",
        action="append",
        metavar="SLUG",
        help="only download this category (repeatable; use with -d)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="log request parameters and dump unparseable listing bodies",
    )
    return parser


def run_download(store: ItemStore, categories: Optional[List[str]] = None) -> int:
    logger.info("Download starting")
    download_all(store, categories=categories)
    return 0


def run_export(store: ItemStore, path: str = CSV_PATH) -> int:
    logger.info("Generating csv")
    store.ensure_db()
    write_csv(store, path)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.category and not args.download:
        parser.error("--category requires -d/--download")

    if args.verbose:
        set_level(logging.DEBUG)

    store = ItemStore()
    if args.download:
        return run_download(store, args.category)
    if args.csv:
        return run_export(store)

    parser.print_usage()
    return 0


def cli(argv: Optional[List[str]] = None) -> None:
    try:
        code = main(argv)
    except Exception as e:
        logger.exception("Fatal webstore_stats error: %s", e)
        raise SystemExit(2)
    raise SystemExit(code)


if __name__ == "__main__":
    cli()
