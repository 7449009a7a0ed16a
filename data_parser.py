import json
from typing import Dict, Any, Callable, Optional, TypeVar
from datetime import datetime, timezone
from models import WallabagItem, ItemCollection

T = TypeVar("T")


def parse_wallabag_item(raw: Dict[str, Any]) -> WallabagItem:
    """
    Parse a raw wallabag entry dict into a WallabagItem dataclass.
    Handles missing/null fields, 0/1 flags, tag objects and timestamp normalization.
    """

    def get_str(field):
        val = raw.get(field)
        return str(val) if val is not None else None

    def get_int(field):
        val = raw.get(field)
        try:
            return int(val) if val is not None else None
        except (ValueError, TypeError):
            return None

    def get_flag(field):
        val = raw.get(field)
        if isinstance(val, str):
            return val.strip().lower() in ("1", "true")
        return bool(val)

    def normalize_time(ts):
        if not ts:
            return None
        try:
            # wallabag sends e.g. 2016-03-12T17:39:09+0100
            dt = datetime.strptime(str(ts), "%Y-%m-%dT%H:%M:%S%z")
        except ValueError:
            return None
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        return dt.isoformat() + "Z"

    def get_tags():
        tags = raw.get("tags")
        if not isinstance(tags, list):
            return []
        labels = []
        for tag in tags:
            if isinstance(tag, dict):
                label = tag.get("label")
            else:
                label = tag
            if label:
                labels.append(str(label))
        return labels

    return WallabagItem(
        id=get_int("id"),
        url=get_str("url"),
        title=get_str("title"),
        domain_name=get_str("domain_name"),
        preview_picture=get_str("preview_picture"),
        is_archived=get_flag("is_archived"),
        is_starred=get_flag("is_starred"),
        created_at=normalize_time(raw.get("created_at")),
        updated_at=normalize_time(raw.get("updated_at")),
        reading_time=get_int("reading_time"),
        language=get_str("language"),
        mimetype=get_str("mimetype"),
        content=get_str("content"),
        tags=get_tags(),
        original=raw.copy(),
    )


def parse_item_collection(raw: Dict[str, Any]) -> ItemCollection:
    """Parse a paged entries response (items live under _embedded.items)."""

    def get_int(field):
        val = raw.get(field)
        try:
            return int(val) if val is not None else None
        except (ValueError, TypeError):
            return None

    embedded = raw.get("_embedded") or {}
    raw_items = embedded.get("items") or []

    return ItemCollection(
        items=[
            parse_wallabag_item(item) if item is not None else None for item in raw_items
        ],
        page=get_int("page"),
        pages=get_int("pages"),
        total=get_int("total"),
        limit=get_int("limit"),
    )


def parse_json_response(
    body: Optional[str], parser: Callable[[Dict[str, Any]], T]
) -> Optional[T]:
    """
    Decode a response body and hand the resulting object to ``parser``.

    An empty body or a JSON ``null`` gives None. Malformed JSON raises
    json.JSONDecodeError to the caller.
    """
    if body is None or not body.strip():
        return None

    data = json.loads(body)
    if data is None:
        return None

    return parser(data)
