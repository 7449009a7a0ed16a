import html
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List, Tuple


def html_encode(value: str) -> str:
    """
    HTML-encode a string the way the wallabag clients do.

    Besides the usual &, <, >, " escapes, the apostrophe becomes &#39; and
    Latin-1 characters (U+00A0 to U+00FF) plus anything outside the BMP
    become decimal character references.
    """
    escaped = html.escape(value).replace("&#x27;", "&#39;")
    return "".join(
        f"&#{ord(c)};" if 0xA0 <= ord(c) <= 0xFF or ord(c) > 0xFFFF else c
        for c in escaped
    )


class DateOrder(Enum):
    """Date field the server sorts entries by."""

    BY_CREATION_DATE = "created"
    BY_LAST_MODIFICATION_DATE = "updated"


class SortOrder(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


@dataclass
class WallabagItem:
    id: Optional[int] = None
    url: Optional[str] = None
    title: Optional[str] = None
    domain_name: Optional[str] = None
    preview_picture: Optional[str] = None  # May be relative to the article host
    is_archived: bool = False
    is_starred: bool = False
    created_at: Optional[str] = None  # ISO 8601 string
    updated_at: Optional[str] = None  # ISO 8601 string
    reading_time: Optional[int] = None
    language: Optional[str] = None
    mimetype: Optional[str] = None
    content: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    original: Dict[str, Any] = field(
        default_factory=dict
    )  # Preserve all original fields for auditing


@dataclass(frozen=True)
class ItemCollection:
    """One page of entries plus the pagination metadata sent with it."""

    items: List[Optional[WallabagItem]] = field(default_factory=list)
    page: Optional[int] = None
    pages: Optional[int] = None
    total: Optional[int] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class ItemQuery:
    """
    Optional filters for the entries endpoint.

    Every filter defaults to None, which means "not sent" rather than
    "send the server default".
    """

    is_read: Optional[bool] = None
    is_starred: Optional[bool] = None
    date_order: Optional[DateOrder] = None
    sort_order: Optional[SortOrder] = None
    page_number: Optional[int] = None
    items_per_page: Optional[int] = None
    tags: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if self.tags is not None:
            object.__setattr__(self, "tags", tuple(self.tags))

    def to_params(self) -> Dict[str, Any]:
        """Return the query parameters for the supplied filters only."""
        params: Dict[str, Any] = {}

        if self.is_read is not None:
            params["archive"] = int(self.is_read)
        if self.is_starred is not None:
            params["starred"] = int(self.is_starred)
        if self.date_order is not None:
            params["sort"] = DateOrder(self.date_order).value
        if self.sort_order is not None:
            params["order"] = SortOrder(self.sort_order).value
        if self.page_number is not None:
            params["page"] = self.page_number
        if self.items_per_page is not None:
            params["perPage"] = self.items_per_page
        if self.tags is not None:
            # URL encoding happens in the HTTP layer, so "a,b" goes out as a%2Cb
            params["tags"] = html_encode(",".join(self.tags))

        return params
