"""Tests for the blocking API client."""
from unittest.mock import MagicMock

import pytest
import requests

from booklog.client import BookLogClient
from booklog.endpoints import ApiError


def make_client(status_code=200, body=None, error=None):
    """Client whose session answers every request the same way."""
    session = MagicMock(spec=requests.Session)
    if error is not None:
        session.request.side_effect = error
    else:
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = body
        session.request.return_value = response
    return BookLogClient("http://api.test", session=session), session


def test_list_books_sends_filters():
    """Test the list request URL and parsed result."""
    client, session = make_client(body=[{"_id": "1", "title": "Dune", "author": "Herbert", "tags": ["sci-fi"]}])
    
    books = client.list_books("du ne", "Sci-fi")
    
    session.request.assert_called_once_with(
        "GET",
        "http://api.test/books?title=du%20ne&tags=sci-fi",
        json=None,
        timeout=None
    )
    assert books[0].title == "Dune"


def test_get_book_null_is_none():
    client, _ = make_client(body=None)
    
    assert client.get_book("b1") is None


def test_create_book_posts_payload():
    client, session = make_client(status_code=201, body={"_id": "new"})
    
    record = client.create_book({"title": "T", "author": "A", "tags": []})
    
    assert record == {"_id": "new"}
    args, kwargs = session.request.call_args
    assert args == ("POST", "http://api.test/books")
    assert kwargs["json"] == {"title": "T", "author": "A", "tags": []}


def test_delete_book_ignores_body():
    client, session = make_client(status_code=204)
    
    client.delete_book("b1")
    
    session.request.return_value.json.assert_not_called()


def test_non_success_status_raises():
    """Any non-2xx status is the same generic failure."""
    for status in (302, 404, 500):
        client, _ = make_client(status_code=status)
        with pytest.raises(ApiError, match="Failed to fetch books"):
            client.list_books()


def test_connection_error_raises():
    client, _ = make_client(error=requests.exceptions.ConnectionError("refused"))
    
    with pytest.raises(ApiError, match="Failed to fetch book") as excinfo:
        client.get_book("b1")
    
    assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectionError)


def test_malformed_json_raises():
    client, session = make_client()
    session.request.return_value.json.side_effect = ValueError("bad json")
    
    with pytest.raises(ApiError):
        client.list_books()


def test_context_manager_closes_session():
    client, session = make_client()
    
    with client:
        pass
    
    session.close.assert_called_once()
