"""Async HTTP client used by the view controllers."""
import httpx
from typing import List, Optional, Dict, Any
import logging

from booklog.endpoints import (
    ApiError,
    RequestDescriptor,
    create_book_request,
    create_chapter_request,
    delete_book_request,
    get_book_request,
    list_books_request,
    update_book_request,
    update_chapter_request,
)
from booklog.models import Book
from booklog.parse import ALL_TAGS, parse_book, parse_books_response

logger = logging.getLogger(__name__)


class AsyncBookLogClient:
    """Async client for the book API."""
    
    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.
        
        Args:
            base_url: API root, e.g. http://localhost:8080
            timeout: Request timeout in seconds (None waits indefinitely)
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        self.base_url = base_url
        self.timeout = timeout
        
        # Create async HTTP client
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)
    
    async def send(
        self,
        request: RequestDescriptor,
        error_message: str,
        expect_json: bool = True
    ) -> Any:
        """
        Issue a described request.
        
        Args:
            request: What to send
            error_message: Message carried by ApiError on any failure
            expect_json: Whether the response body must be decoded
            
        Returns:
            Decoded JSON body, or None when expect_json is False
        """
        url = request.url(self.base_url)
        logger.info(f"Async request: {request.method} {url}")
        
        try:
            response = await self.client.request(request.method, url, json=request.body)
        except httpx.HTTPError as e:
            logger.warning(f"Async request failed: {e}")
            raise ApiError(error_message) from e
        
        if not response.is_success:
            logger.warning(f"Status {response.status_code} for {request.method} {url}")
            raise ApiError(error_message)
        
        if not expect_json:
            return None
        
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Malformed JSON from {url}: {e}")
            raise ApiError(error_message) from e
    
    async def list_books(self, title: str = "", tag: str = ALL_TAGS) -> List[Book]:
        payload = await self.send(list_books_request(title, tag), "Failed to fetch books")
        return parse_books_response(payload)
    
    async def get_book(self, book_id: str) -> Optional[Book]:
        payload = await self.send(get_book_request(book_id), "Failed to fetch book")
        return parse_book(payload)
    
    async def create_book(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.send(create_book_request(payload), "Failed to save book")
    
    async def update_book(self, book_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.send(update_book_request(book_id, payload), "Failed to save book")
    
    async def delete_book(self, book_id: str) -> None:
        await self.send(delete_book_request(book_id), "Failed to delete book", expect_json=False)
    
    async def create_chapter(self, book_id: str, payload: Dict[str, Any]) -> None:
        await self.send(
            create_chapter_request(book_id, payload),
            "Failed to save chapter",
            expect_json=False
        )
    
    async def update_chapter(
        self,
        book_id: str,
        chapter_id: str,
        payload: Dict[str, Any]
    ) -> None:
        await self.send(
            update_chapter_request(book_id, chapter_id, payload),
            "Failed to save chapter",
            expect_json=False
        )
    
    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
    
    async def __aenter__(self):
        """Async context manager entry."""
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
