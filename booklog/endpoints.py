"""Request descriptors for the book API.

Every operation the front end performs is described here as plain data
(method, path, query, body) so both HTTP clients, and the tests, share one
definition of the wire contract.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote

from booklog.parse import ALL_TAGS

# Characters encodeURIComponent leaves unescaped besides alphanumerics
_COMPONENT_SAFE = "-_.!~*'()"


class ApiError(Exception):
    """Raised when a request to the book API fails for any reason."""


def encode_component(value: str) -> str:
    return quote(value, safe=_COMPONENT_SAFE)


@dataclass(frozen=True)
class RequestDescriptor:
    """A single API call, independent of the HTTP library that sends it."""
    method: str
    path: str
    query: Dict[str, str] = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None
    
    @property
    def target(self) -> str:
        """Path plus encoded query string."""
        if not self.query:
            return self.path
        params = "&".join(
            f"{name}={encode_component(value)}"
            for name, value in self.query.items()
        )
        return f"{self.path}?{params}"
    
    def url(self, base_url: str) -> str:
        return base_url.rstrip("/") + self.target


def _book_path(book_id: str) -> str:
    return f"/books/{encode_component(book_id)}"


def list_books_request(title: str = "", tag: str = ALL_TAGS) -> RequestDescriptor:
    """
    Describe the list-books call for the current filters.
    
    Args:
        title: Title search string; omitted when empty
        tag: Selected tag filter; omitted when "All", otherwise lowercased
        
    Returns:
        GET /books descriptor
    """
    query = {}
    if title:
        query["title"] = title
    if tag and tag != ALL_TAGS:
        query["tags"] = tag.lower()
    return RequestDescriptor("GET", "/books", query)


def get_book_request(book_id: str) -> RequestDescriptor:
    return RequestDescriptor("GET", _book_path(book_id))


def create_book_request(payload: Dict[str, Any]) -> RequestDescriptor:
    return RequestDescriptor("POST", "/books", body=payload)


def update_book_request(book_id: str, payload: Dict[str, Any]) -> RequestDescriptor:
    return RequestDescriptor("PUT", _book_path(book_id), body=payload)


def delete_book_request(book_id: str) -> RequestDescriptor:
    return RequestDescriptor("DELETE", _book_path(book_id))


def create_chapter_request(book_id: str, payload: Dict[str, Any]) -> RequestDescriptor:
    return RequestDescriptor("POST", f"{_book_path(book_id)}/chapters", body=payload)


def update_chapter_request(
    book_id: str,
    chapter_id: str,
    payload: Dict[str, Any]
) -> RequestDescriptor:
    return RequestDescriptor(
        "PUT",
        f"{_book_path(book_id)}/chapters/{encode_component(chapter_id)}",
        body=payload,
    )
