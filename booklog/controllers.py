"""View controllers: the state and actions behind each screen.

Controllers know nothing about HTML or Flask. Each one owns the fetch for
its screen and the local form state; side effects that belong to the
surrounding UI (confirmation prompts, alerts, navigation) are passed in as
callables.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional
import logging

from booklog.async_client import AsyncBookLogClient
from booklog.endpoints import ApiError, RequestDescriptor, list_books_request
from booklog.models import Book
from booklog.parse import (
    ALL_TAGS,
    book_payload,
    chapter_payload,
    date_input_value,
    format_tags_input,
    tag_options,
)
from booklog.routes import BOOK_DETAIL, BOOK_LIST, path_for

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this book?"

Navigate = Callable[[str], None]


class RequestSequencer:
    """Hands out increasing request numbers; only the newest may apply its result."""
    
    def __init__(self):
        self.latest = 0
    
    def issue(self) -> int:
        self.latest += 1
        return self.latest
    
    def is_current(self, token: int) -> bool:
        return token == self.latest


class BookListController:
    """Book list with title search and tag filter."""
    
    def __init__(self, api: AsyncBookLogClient):
        self.api = api
        self.search = ""
        self.tag_filter = ALL_TAGS
        self.books: List[Book] = []
        self.loading = True
        self.error: Optional[str] = None
        self._sequencer = RequestSequencer()
    
    @property
    def request(self) -> RequestDescriptor:
        """The list request implied by the current filters."""
        return list_books_request(self.search, self.tag_filter)
    
    @property
    def tag_options(self) -> List[str]:
        return tag_options(self.books)
    
    @property
    def status(self) -> str:
        if self.loading:
            return "loading"
        if self.error:
            return "error"
        if not self.books:
            return "empty"
        return "loaded"
    
    async def activate(self):
        await self.refresh()
    
    async def set_search(self, search: str):
        self.search = search
        await self.refresh()
    
    async def set_tag_filter(self, tag: str):
        self.tag_filter = tag or ALL_TAGS
        await self.refresh()
    
    async def apply_filters(self, search: str, tag: str):
        """Set both filters and fetch once."""
        self.search = search
        self.tag_filter = tag or ALL_TAGS
        await self.refresh()
    
    async def refresh(self):
        """Fetch books for the current filters, ignoring the result if superseded."""
        token = self._sequencer.issue()
        search, tag = self.search, self.tag_filter
        self.loading = True
        self.error = None
        
        try:
            books = await self.api.list_books(search, tag)
        except ApiError as e:
            if self._sequencer.is_current(token):
                self.error = str(e)
                self.loading = False
            return
        
        if not self._sequencer.is_current(token):
            logger.debug(f"Discarding stale book list #{token} (latest #{self._sequencer.latest})")
            return
        
        self.books = books
        self.loading = False
        logger.info(f"Loaded {len(books)} books")


class BookDetailController:
    """One book with its chapters, plus the delete action."""
    
    def __init__(self, api: AsyncBookLogClient, book_id: str):
        self.api = api
        self.book_id = book_id
        self.book: Optional[Book] = None
        self.loading = True
        self.error: Optional[str] = None
        self._sequencer = RequestSequencer()
    
    @property
    def status(self) -> str:
        if self.loading:
            return "loading"
        if self.error:
            return "error"
        if self.book is None:
            return "not_found"
        return "loaded"
    
    @property
    def has_chapters(self) -> bool:
        return bool(self.book and self.book.chapters)
    
    async def activate(self):
        token = self._sequencer.issue()
        self.loading = True
        self.error = None
        
        try:
            book = await self.api.get_book(self.book_id)
        except ApiError as e:
            if self._sequencer.is_current(token):
                self.error = str(e)
                self.loading = False
            return
        
        if self._sequencer.is_current(token):
            self.book = book
            self.loading = False
    
    async def delete(
        self,
        confirm: Callable[[str], bool],
        alert: Callable[[str], None],
        navigate: Navigate
    ) -> bool:
        """
        Delete the book after interactive confirmation.
        
        Args:
            confirm: Asks the user; False cancels without any request
            alert: Blocking report of a failed delete
            navigate: Called with the list path on success
            
        Returns:
            True if the book was deleted
        """
        if not confirm(DELETE_PROMPT):
            logger.info(f"Delete of book {self.book_id} cancelled")
            return False
        
        try:
            await self.api.delete_book(self.book_id)
        except ApiError as e:
            alert(str(e))
            return False
        
        logger.info(f"Deleted book {self.book_id}")
        navigate(path_for(BOOK_LIST))
        return True


@dataclass
class SubmitStrategy:
    """How a form saves: button label and the coroutine that stores the payload.
    
    `save` returns the path to navigate to afterwards.
    """
    label: str
    save: Callable[[Dict[str, Any]], Awaitable[str]]


Loader = Callable[[], Awaitable[Optional[Dict[str, str]]]]


class RecordForm:
    """
    Create/edit form for a single record.
    
    Edit mode is simply the presence of a loader, which pre-populates the
    fields from the existing record.
    """
    
    def __init__(
        self,
        heading: str,
        fields: Dict[str, str],
        required: Dict[str, str],
        build_payload: Callable[[Dict[str, str]], Dict[str, Any]],
        strategy: SubmitStrategy,
        loader: Optional[Loader] = None
    ):
        """
        Args:
            heading: Page heading
            fields: Field names and initial values
            required: Required field names mapped to their labels
            build_payload: Turns field values into the request body
            strategy: Create or update
            loader: Fetches existing values (edit mode only)
        """
        self.heading = heading
        self.values = dict(fields)
        self.required = required
        self.build_payload = build_payload
        self.strategy = strategy
        self.loader = loader
        self.loading = False
        self.error: Optional[str] = None
        self._sequencer = RequestSequencer()
    
    @property
    def is_edit(self) -> bool:
        return self.loader is not None
    
    @property
    def submit_label(self) -> str:
        return "Saving..." if self.loading else self.strategy.label
    
    async def activate(self):
        """Pre-populate fields in edit mode; a create form has nothing to load."""
        if self.loader is None:
            return
        
        token = self._sequencer.issue()
        self.loading = True
        try:
            loaded = await self.loader()
        except ApiError as e:
            if self._sequencer.is_current(token):
                self.error = str(e)
                self.loading = False
            return
        
        if not self._sequencer.is_current(token):
            return
        if loaded:
            self.values.update(loaded)
        self.loading = False
    
    def update(self, values: Dict[str, Any]):
        """Copy submitted values for known fields."""
        for name in self.values:
            if name in values:
                self.values[name] = values[name]
    
    def missing_fields(self) -> List[str]:
        return [
            label
            for name, label in self.required.items()
            if not str(self.values.get(name, "")).strip()
        ]
    
    async def submit(self, values: Dict[str, Any], navigate: Navigate) -> bool:
        """
        Save the form.
        
        Args:
            values: Submitted field values
            navigate: Called with the destination path on success
            
        Returns:
            True if saved; otherwise `error` explains why
        """
        self.update(values)
        
        missing = self.missing_fields()
        if missing:
            self.error = f"Please fill out: {', '.join(missing)}"
            return False
        
        try:
            payload = self.build_payload(self.values)
        except ValueError as e:
            self.error = str(e)
            return False
        
        self.loading = True
        self.error = None
        try:
            destination = await self.strategy.save(payload)
        except ApiError as e:
            self.error = str(e)
            return False
        finally:
            self.loading = False
        
        navigate(destination)
        return True


BOOK_FIELDS = {"title": "", "author": "", "tags": ""}
BOOK_REQUIRED = {"title": "Title", "author": "Author"}

CHAPTER_FIELDS = {"chapter_number": "", "chapter_title": "", "date": "", "content": ""}
CHAPTER_REQUIRED = {"chapter_number": "Chapter Number", "chapter_title": "Chapter Title"}


def _book_values(values: Dict[str, str]) -> Dict[str, Any]:
    return book_payload(values["title"], values["author"], values["tags"])


def _chapter_values(values: Dict[str, str]) -> Dict[str, Any]:
    return chapter_payload(
        values["chapter_number"],
        values["chapter_title"],
        values["date"],
        values["content"],
    )


def book_form(api: AsyncBookLogClient, book_id: Optional[str] = None) -> RecordForm:
    """Book form in create mode, or edit mode when a book id is given."""
    if book_id is None:
        async def create(payload: Dict[str, Any]) -> str:
            record = await api.create_book(payload)
            new_id = record.get("_id") if isinstance(record, dict) else None
            if not new_id:
                logger.error("Create book response carried no identifier")
                raise ApiError("Failed to save book")
            return path_for(BOOK_DETAIL, book_id=new_id)
        
        return RecordForm("Add Book", BOOK_FIELDS, BOOK_REQUIRED, _book_values, SubmitStrategy("Add Book", create))
    
    async def load() -> Optional[Dict[str, str]]:
        book = await api.get_book(book_id)
        if book is None:
            return None
        return {
            "title": book.title,
            "author": book.author,
            "tags": format_tags_input(book.tags),
        }
    
    async def update(payload: Dict[str, Any]) -> str:
        await api.update_book(book_id, payload)
        return path_for(BOOK_DETAIL, book_id=book_id)
    
    return RecordForm(
        "Edit Book",
        BOOK_FIELDS,
        BOOK_REQUIRED,
        _book_values,
        SubmitStrategy("Update Book", update),
        loader=load
    )


def chapter_form(
    api: AsyncBookLogClient,
    book_id: str,
    chapter_id: Optional[str] = None
) -> RecordForm:
    """Chapter form for a book; edit mode when a chapter id is given."""
    detail_path = path_for(BOOK_DETAIL, book_id=book_id)
    
    if chapter_id is None:
        async def create(payload: Dict[str, Any]) -> str:
            await api.create_chapter(book_id, payload)
            return detail_path
        
        return RecordForm(
            "Add Chapter",
            CHAPTER_FIELDS,
            CHAPTER_REQUIRED,
            _chapter_values,
            SubmitStrategy("Add Chapter", create)
        )
    
    # There is no single-chapter endpoint; the chapter is found in its book.
    async def load() -> Optional[Dict[str, str]]:
        book = await api.get_book(book_id)
        chapter = book.find_chapter(chapter_id) if book else None
        if chapter is None:
            logger.warning(f"Chapter {chapter_id} not found in book {book_id}")
            return None
        return {
            "chapter_number": "" if chapter.chapter_number is None else str(chapter.chapter_number),
            "chapter_title": chapter.chapter_title,
            "date": date_input_value(chapter.date),
            "content": chapter.content,
        }
    
    async def update(payload: Dict[str, Any]) -> str:
        await api.update_chapter(book_id, chapter_id, payload)
        return detail_path
    
    return RecordForm(
        "Edit Chapter",
        CHAPTER_FIELDS,
        CHAPTER_REQUIRED,
        _chapter_values,
        SubmitStrategy("Update Chapter", update),
        loader=load
    )
