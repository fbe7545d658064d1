"""Named routes of the front end."""
from typing import Dict

from werkzeug.routing import Map, Rule

BOOK_LIST = "book_list"
BOOK_NEW = "book_new"
BOOK_DETAIL = "book_detail"
BOOK_EDIT = "book_edit"
CHAPTER_NEW = "chapter_new"
CHAPTER_EDIT = "chapter_edit"

# Registered as-is by the web app, under the same endpoint names.
ROUTES: Dict[str, str] = {
    BOOK_LIST: "/",
    BOOK_NEW: "/books/new",
    BOOK_DETAIL: "/books/<book_id>",
    BOOK_EDIT: "/books/<book_id>/edit",
    CHAPTER_NEW: "/books/<book_id>/chapters/new",
    CHAPTER_EDIT: "/books/<book_id>/chapters/<chapter_id>/edit",
}

_url_map = Map([Rule(pattern, endpoint=name) for name, pattern in ROUTES.items()])
_urls = _url_map.bind("")


def path_for(name: str, **params: str) -> str:
    """
    Build the path of a named route without needing a Flask app.
    
    Args:
        name: One of the ROUTES keys
        **params: Values for the pattern's placeholders
        
    Returns:
        Path as the web app's own URL map would build it
        
    Raises:
        werkzeug.routing.BuildError: Unknown route name or missing placeholder value
    """
    return _urls.build(name, params)
