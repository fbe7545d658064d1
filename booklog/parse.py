"""Parse API responses and assemble request payloads."""
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Iterable
import logging

from booklog.models import Book, Chapter

logger = logging.getLogger(__name__)

ALL_TAGS = "All"


def parse_chapter(item: Dict[str, Any]) -> Chapter:
    """
    Parse a single embedded chapter.
    
    Args:
        item: Chapter object from a book response
        
    Returns:
        Chapter object
    """
    return Chapter(
        id=str(item.get("_id") or item.get("id") or ""),
        chapter_number=item.get("chapterNumber"),
        chapter_title=item.get("chapterTitle") or "",
        date=item.get("date"),
        content=item.get("content") or "",
    )


def parse_book(item: Any) -> Optional[Book]:
    """
    Parse a single book object from the API.
    
    Args:
        item: Book JSON as returned by the API
        
    Returns:
        Book object or None if the payload is not a book
    """
    if not isinstance(item, dict):
        return None
    
    book_id = item.get("_id") or item.get("id")
    if not book_id:
        logger.warning("Skipping book without an identifier")
        return None
    
    chapters = [
        parse_chapter(chapter)
        for chapter in item.get("chapters") or []
        if isinstance(chapter, dict)
    ]
    
    return Book(
        id=str(book_id),
        title=item.get("title") or "",
        author=item.get("author") or "",
        tags=list(item.get("tags") or []),
        chapters=chapters,
    )


def parse_books_response(response_json: Any) -> List[Book]:
    """
    Parse a list-books response.
    
    Args:
        response_json: Complete API response JSON
        
    Returns:
        List of Book objects (empty if the body is not an array)
    """
    if not isinstance(response_json, list):
        return []
    
    books = []
    for item in response_json:
        book = parse_book(item)
        if book:
            books.append(book)
    
    return books


def parse_tags_input(text: str) -> List[str]:
    """Split a comma separated tags field, trimming entries and dropping empty ones."""
    return [tag.strip() for tag in text.split(",") if tag.strip()]


def format_tags_input(tags: Iterable[str]) -> str:
    return ", ".join(tags)


def capitalize_tag(tag: str) -> str:
    """Upper-case the first character only; the rest is left as typed."""
    return tag[:1].upper() + tag[1:]


def tag_options(books: List[Book]) -> List[str]:
    """
    Build the tag filter menu from the currently loaded books.
    
    Args:
        books: Books in the current result set
        
    Returns:
        "All" followed by each distinct capitalized tag in first-seen order
    """
    options = [ALL_TAGS]
    for book in books:
        for tag in book.tags:
            label = capitalize_tag(tag)
            if label not in options:
                options.append(label)
    return options


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable chapter date: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format as UTC with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def date_input_value(value: Optional[str]) -> str:
    """Stored timestamp -> YYYY-MM-DD for a date input ('' when absent)."""
    parsed = parse_timestamp(value)
    return parsed.strftime("%Y-%m-%d") if parsed else ""


def date_input_to_timestamp(value: str, now: Optional[datetime] = None) -> str:
    """
    Convert a date input to the timestamp sent to the API.
    
    Args:
        value: YYYY-MM-DD string, or blank
        now: Clock override for blank values
        
    Returns:
        Midnight UTC of the given day, or the current moment when blank
        
    Raises:
        ValueError: If the value is not a calendar date
    """
    if not value.strip():
        return format_timestamp(now or datetime.now(timezone.utc))
    
    try:
        day = datetime.strptime(value.strip(), "%Y-%m-%d")
    except ValueError:
        raise ValueError("Invalid date") from None
    return format_timestamp(day.replace(tzinfo=timezone.utc))


def coerce_chapter_number(value: Any) -> int:
    """Coerce the chapter number field to an integer."""
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        raise ValueError("Chapter number must be a whole number") from None
    if not number.is_integer():
        raise ValueError("Chapter number must be a whole number")
    return int(number)


def book_payload(title: str, author: str, tags_text: str) -> Dict[str, Any]:
    """Assemble the body for create/update book."""
    return {
        "title": title,
        "author": author,
        "tags": parse_tags_input(tags_text),
    }


def chapter_payload(
    chapter_number: Any,
    chapter_title: str,
    date: str,
    content: str,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """Assemble the body for create/update chapter."""
    return {
        "chapterNumber": coerce_chapter_number(chapter_number),
        "chapterTitle": chapter_title,
        "date": date_input_to_timestamp(date, now=now),
        "content": content,
    }
