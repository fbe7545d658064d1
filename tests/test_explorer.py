"""Tests for the command-line interface."""
from unittest.mock import MagicMock, patch

import pytest

import explorer
from booklog.endpoints import ApiError
from booklog.models import Book, Chapter


def patched_client(**methods):
    """Patch explorer.BookLogClient so `with make_client(...)` yields a mock."""
    client = MagicMock()
    for name, value in methods.items():
        getattr(client, name).return_value = value
    factory = MagicMock()
    factory.return_value.__enter__.return_value = client
    return patch("explorer.BookLogClient", factory), client


def test_list_compact_output(capsys):
    """Test listing books in compact format with filters passed through."""
    patcher, client = patched_client(list_books=[Book("1", "Dune", "Frank Herbert", ["sci-fi"])])
    
    with patcher:
        explorer.main(["list", "--title", "du", "--tag", "Sci-fi", "--format", "compact"])
    
    client.list_books.assert_called_once_with("du", "Sci-fi")
    assert "1. Dune - Frank Herbert" in capsys.readouterr().out


def test_list_empty(capsys):
    patcher, _ = patched_client(list_books=[])
    
    with patcher:
        explorer.main(["list"])
    
    assert "No books found." in capsys.readouterr().out


def test_show_table(capsys):
    book = Book(
        "b1", "Dune", "Frank Herbert", ["sci-fi"],
        [Chapter("c1", 1, "Arrakis", "2024-03-05T00:00:00.000Z", "")]
    )
    patcher, _ = patched_client(get_book=book)
    
    with patcher:
        explorer.main(["show", "b1"])
    
    out = capsys.readouterr().out
    assert "by Frank Herbert" in out
    assert "Arrakis" in out
    assert "3/5/2024" in out


def test_add_prints_identifier(capsys):
    patcher, client = patched_client(create_book={"_id": "n1"})
    
    with patcher:
        explorer.main(["add", "--title", "T", "--author", "A", "--tags", "a, , b"])
    
    client.create_book.assert_called_once_with({"title": "T", "author": "A", "tags": ["a", "b"]})
    assert capsys.readouterr().out.strip() == "n1"


def test_delete_requires_confirmation(monkeypatch):
    """Declining the prompt sends no request."""
    patcher, client = patched_client()
    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    
    with patcher:
        explorer.main(["delete", "b1"])
    
    client.delete_book.assert_not_called()


def test_delete_with_yes():
    patcher, client = patched_client()
    
    with patcher:
        explorer.main(["delete", "b1", "--yes"])
    
    client.delete_book.assert_called_once_with("b1")


def test_api_error_exits_nonzero():
    patcher, client = patched_client()
    client.list_books.side_effect = ApiError("Failed to fetch books")
    
    with patcher, pytest.raises(SystemExit) as excinfo:
        explorer.main(["list"])
    
    assert excinfo.value.code == 1


def test_missing_command_exits_nonzero():
    with pytest.raises(SystemExit) as excinfo:
        explorer.main([])
    
    assert excinfo.value.code == 1


def test_add_without_identifier_exits_nonzero(capsys):
    """A create response lacking an identifier is a failed save."""
    patcher, _ = patched_client(create_book={"title": "T"})
    
    with patcher, pytest.raises(SystemExit) as excinfo:
        explorer.main(["add", "--title", "T", "--author", "A"])
    
    assert excinfo.value.code == 1
    assert "None" not in capsys.readouterr().out
