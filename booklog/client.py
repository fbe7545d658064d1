"""HTTP client for the book API."""
import requests
from typing import Optional, Dict, Any, List
import logging

from booklog.endpoints import (
    ApiError,
    RequestDescriptor,
    create_book_request,
    delete_book_request,
    get_book_request,
    list_books_request,
)
from booklog.models import Book
from booklog.parse import ALL_TAGS, parse_book, parse_books_response

logger = logging.getLogger(__name__)


class BookLogClient:
    """Blocking client for the book API. No retries: a failure is reported once."""
    
    def __init__(
        self, 
        base_url: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize book API client.
        
        Args:
            base_url: API root, e.g. http://localhost:8080
            timeout: Request timeout in seconds (None waits indefinitely)
            session: Optional preconfigured session
        """
        self.base_url = base_url
        self.timeout = timeout
        
        # Create session for connection pooling
        self.session = session or requests.Session()
    
    def send(
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
            
        Raises:
            ApiError: On transport failure, non-2xx status or malformed JSON
        """
        url = request.url(self.base_url)
        logger.info(f"{request.method} {url}")
        
        try:
            response = self.session.request(
                request.method,
                url,
                json=request.body,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"Request failed: {e}")
            raise ApiError(error_message) from e
        
        if not 200 <= response.status_code < 300:
            logger.warning(f"Status {response.status_code} for {request.method} {url}")
            raise ApiError(error_message)
        
        if not expect_json:
            return None
        
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Malformed JSON from {url}: {e}")
            raise ApiError(error_message) from e
    
    def list_books(self, title: str = "", tag: str = ALL_TAGS) -> List[Book]:
        """Fetch books matching the title substring and tag filter."""
        payload = self.send(list_books_request(title, tag), "Failed to fetch books")
        return parse_books_response(payload)
    
    def get_book(self, book_id: str) -> Optional[Book]:
        """Fetch one book with its chapters; None when the API answers null."""
        return parse_book(self.send(get_book_request(book_id), "Failed to fetch book"))
    
    def create_book(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a book and return the stored record."""
        return self.send(create_book_request(payload), "Failed to save book")
    
    def delete_book(self, book_id: str) -> None:
        self.send(delete_book_request(book_id), "Failed to delete book", expect_json=False)
    
    def close(self):
        """Close the session."""
        self.session.close()
    
    def __enter__(self):
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
