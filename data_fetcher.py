#!/usr/bin/env python3
"""
Data Fetcher Module for Wallabag Export Tool
Handles fetching saved items from the wallabag API and normalizing their preview images.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urljoin, urlparse
import requests
from requests import Session

from data_parser import parse_item_collection, parse_json_response, parse_wallabag_item
from models import DateOrder, ItemCollection, ItemQuery, SortOrder, WallabagItem

logger = logging.getLogger(__name__)


def build_item_parameters(
    is_read: Optional[bool] = None,
    is_starred: Optional[bool] = None,
    date_order: Optional[DateOrder] = None,
    sort_order: Optional[SortOrder] = None,
    page_number: Optional[int] = None,
    items_per_page: Optional[int] = None,
    tags: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """Build the /entries query parameters from the supplied filters."""
    return ItemQuery(
        is_read=is_read,
        is_starred=is_starred,
        date_order=date_order,
        sort_order=sort_order,
        page_number=page_number,
        items_per_page=items_per_page,
        tags=tags,
    ).to_params()


def check_uri_of_item(item: Optional[WallabagItem]) -> None:
    """
    Make a relative preview image URI absolute using the host of the item's URL.

    Absolute or missing preview URIs are left alone.
    """
    if item is None or not item.preview_picture:
        return

    preview = urlparse(item.preview_picture)
    if preview.scheme and preview.netloc:
        return

    source = urlparse(item.url or "")
    if not source.scheme or not source.netloc:
        logger.warning(
            f"Cannot resolve preview image for item {item.id}: no usable source URL"
        )
        return

    item_host = f"{source.scheme}://{source.netloc}/"
    item.preview_picture = urljoin(item_host, item.preview_picture)


class WallabagDataFetcher:
    """Fetches saved items from a wallabag API over a requests session."""

    def __init__(self, session: Session, base_url: str, timeout: float = 30):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def execute_request(
        self, method: str, path: str, params: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Send one request to the API and return the raw response body.

        Args:
            method: HTTP method, e.g. "GET"
            path: Path below the API base URL, e.g. "/entries"
            params: Query parameters

        Returns:
            Response body text

        Raises:
            requests.RequestException: on network errors or a non-success status
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url} params={params}")

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"API request {method} {path} failed: {e}")
            raise

        return response.text

    def get_items_with_metadata(
        self, query: Optional[ItemQuery] = None, **filters
    ) -> Optional[ItemCollection]:
        """
        Fetch one page of items along with its pagination metadata.

        Args:
            query: Prepared filters; cannot be combined with keyword filters
            **filters: is_read, is_starred, date_order, sort_order,
                page_number, items_per_page, tags

        Returns:
            ItemCollection, or None if the server sent an empty response
        """
        if query is not None and filters:
            raise ValueError("Pass either an ItemQuery or keyword filters, not both")

        params = query.to_params() if query is not None else build_item_parameters(**filters)

        body = self.execute_request("GET", "/entries", params)
        collection = self._decode(body, parse_item_collection)

        if collection is not None:
            for item in collection.items:
                check_uri_of_item(item)
            logger.info(
                f"Fetched {len(collection.items)} items "
                f"(page {collection.page}/{collection.pages}, total {collection.total})"
            )

        return collection

    def get_items(
        self, query: Optional[ItemQuery] = None, **filters
    ) -> Optional[List[Optional[WallabagItem]]]:
        """Fetch one page of items without the pagination metadata."""
        collection = self.get_items_with_metadata(query, **filters)
        return collection.items if collection is not None else None

    def get_item(self, item_id: int) -> Optional[WallabagItem]:
        """
        Fetch a single item by its id.

        Returns:
            WallabagItem, or None if the server sent an empty response
        """
        body = self.execute_request("GET", f"/entries/{item_id}")
        item = self._decode(body, parse_wallabag_item)
        check_uri_of_item(item)
        return item

    def _decode(self, body, parser):
        try:
            return parse_json_response(body, parser)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON response: {e}")
            raise


def create_data_fetcher(authenticator) -> Optional[WallabagDataFetcher]:
    """
    Create a data fetcher instance from an authenticator.

    Args:
        authenticator: WallabagAuthenticator instance

    Returns:
        WallabagDataFetcher instance or None if no session is available
    """
    session = authenticator.get_session()
    if not session:
        logger.error("No authenticated session available")
        return None

    return WallabagDataFetcher(
        session=session,
        base_url=authenticator.base_url,
        timeout=authenticator.timeout,
    )
