#!/usr/bin/env python3
"""
Wallabag Export Tool
Fetches one page of saved items (or a single item) from a wallabag API and saves them.
"""

import os
import sys
import logging
import argparse
from typing import List, Optional

import requests
from dotenv import load_dotenv

from data_fetcher import create_data_fetcher
from models import DateOrder, ItemQuery, SortOrder, WallabagItem
from storage import save_raw_json, save_items_jsonl, get_file_summary

# Load environment variables
load_dotenv()

DEFAULT_TIMEOUT = 30.0

logger = logging.getLogger(__name__)


class WallabagAuthenticator:
    """Reads API settings from the environment and prepares a session for them."""

    def __init__(self):
        self.base_url = None
        self.access_token = None
        self.timeout = DEFAULT_TIMEOUT
        self.session = None

    def load_credentials(self) -> bool:
        self.base_url = os.getenv("WALLABAG_URL")
        self.access_token = os.getenv("WALLABAG_ACCESS_TOKEN")
        self.session = None

        if not self.base_url or self.base_url.strip() == "":
            logger.error("WALLABAG_URL is not set")
            return False
        self.base_url = self.base_url.strip()

        timeout = os.getenv("WALLABAG_TIMEOUT")
        if timeout:
            try:
                self.timeout = float(timeout)
            except ValueError:
                logger.error(f"Invalid WALLABAG_TIMEOUT value: {timeout!r}")
                return False

        self.session = requests.Session()
        if self.access_token and self.access_token.strip():
            self.session.headers["Authorization"] = f"Bearer {self.access_token.strip()}"
        else:
            logger.warning("WALLABAG_ACCESS_TOKEN is not set; requests are unauthenticated")
        return True

    def get_session(self) -> Optional[requests.Session]:
        return self.session


def setup_authentication() -> Optional[WallabagAuthenticator]:
    authenticator = WallabagAuthenticator()
    if authenticator.load_credentials():
        return authenticator
    return None


def export_items(
    query: ItemQuery,
    item_id: Optional[int] = None,
    output_dir: str = ".",
):
    """
    Fetch one page of items matching ``query`` (or the item ``item_id``) and save it.
    """
    authenticator = setup_authentication()
    if not authenticator:
        logger.error("Authentication failed. Exiting.")
        sys.exit(1)
    fetcher = create_data_fetcher(authenticator)
    if not fetcher:
        logger.error("Failed to create data fetcher. Exiting.")
        sys.exit(1)

    raw_path = os.path.join(output_dir, "raw_data", "wallabag_page_raw.json")
    parsed_path = os.path.join(output_dir, "parsed_data", "items.jsonl")

    collection = None
    try:
        if item_id is not None:
            logger.info(f"Fetching item {item_id}...")
            item = fetcher.get_item(item_id)
            items: List[WallabagItem] = [item] if item is not None else []
        else:
            logger.info(f"Fetching items with filters {query.to_params()}...")
            collection = fetcher.get_items_with_metadata(query=query)
            items = []
            if collection is not None:
                # null entries in the page are skipped
                items = [item for item in collection.items if item is not None]
    except KeyboardInterrupt:
        logger.info("Export interrupted by user")
        sys.exit(0)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Error during export: {e}")
        sys.exit(1)

    if not items:
        logger.warning("No items returned")

    if not save_raw_json([item.original for item in items], raw_path):
        logger.error("Failed to save raw data")
        sys.exit(1)
    if not save_items_jsonl(items, parsed_path):
        logger.error("Failed to save parsed data")
        sys.exit(1)
    logger.info(f"Saved {len(items):,} items")

    raw_summary = get_file_summary(raw_path)
    parsed_summary = get_file_summary(parsed_path)
    print("\n" + "=" * 60)
    print("EXPORT SUMMARY")
    print("=" * 60)
    if collection is not None:
        print(f"Page: {collection.page} of {collection.pages} "
              f"({collection.limit} per page, {collection.total} items in total)")
    print(f"Raw Data: {raw_summary['file']} ({raw_summary.get('size_bytes', 0):,} bytes)")
    print(f"Parsed Data: {parsed_summary['file']} "
          f"({parsed_summary.get('size_bytes', 0):,} bytes)")
    print(f"Items: {len(items):,}")
    print("=" * 60)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wallabag Export Tool")

    read_group = parser.add_mutually_exclusive_group()
    read_group.add_argument("--archived", dest="is_read", action="store_true",
                            help="Only archived (read) items")
    read_group.add_argument("--unread", dest="is_read", action="store_false",
                            help="Only unread items")

    starred_group = parser.add_mutually_exclusive_group()
    starred_group.add_argument("--starred", dest="is_starred", action="store_true",
                               help="Only starred items")
    starred_group.add_argument("--unstarred", dest="is_starred", action="store_false",
                               help="Only items that are not starred")

    parser.set_defaults(is_read=None, is_starred=None)
    parser.add_argument("--sort", choices=[o.value for o in DateOrder],
                        help="Date field to sort by")
    parser.add_argument("--order", choices=[o.value for o in SortOrder],
                        help="Sort direction")
    parser.add_argument("--page", type=int, help="Page number")
    parser.add_argument("--per-page", type=int, help="Items per page")
    parser.add_argument("--tags", help="Comma-separated tag names")
    parser.add_argument("--item-id", type=int, help="Fetch a single item by id")
    parser.add_argument("--output-dir", default=".", help="Directory for exported files")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser


def query_from_args(args: argparse.Namespace) -> ItemQuery:
    tags = None
    if args.tags is not None:
        tags = [tag.strip() for tag in args.tags.split(",") if tag.strip()]
    return ItemQuery(
        is_read=args.is_read,
        is_starred=args.is_starred,
        date_order=DateOrder(args.sort) if args.sort else None,
        sort_order=SortOrder(args.order) if args.order else None,
        page_number=args.page,
        items_per_page=args.per_page,
        tags=tags,
    )


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    export_items(query_from_args(args), item_id=args.item_id, output_dir=args.output_dir)


if __name__ == "__main__":
    main()
