#!/usr/bin/env python3
"""BookLog CLI - browse and manage books through the book API."""
import argparse
import sys
import json
from tabulate import tabulate
from booklog.client import BookLogClient
from booklog.config import Config
from booklog.endpoints import ApiError
from booklog.parse import ALL_TAGS, book_payload
from booklog.render import format_chapter_date
import logging

logger = logging.getLogger(__name__)


def make_client(config: Config) -> BookLogClient:
    """Build the API client from configuration."""
    return BookLogClient(config.API_BASE_URL, timeout=config.REQUEST_TIMEOUT)


def book_to_dict(book) -> dict:
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "tags": book.tags,
        "chapters": [
            {
                "id": chapter.id,
                "chapterNumber": chapter.chapter_number,
                "chapterTitle": chapter.chapter_title,
                "date": chapter.date,
            }
            for chapter in book.chapters
        ]
    }


def display_books(books, format_type: str):
    """Display books in specified format."""
    if format_type == "table":
        headers = ["ID", "Title", "Author", "Tags", "Chapters"]
        rows = [
            [
                book.id,
                book.title[:50] + "..." if len(book.title) > 50 else book.title,
                book.author[:30] + "..." if len(book.author) > 30 else book.author,
                book.tags_str[:30] + "..." if len(book.tags_str) > 30 else book.tags_str,
                len(book.chapters)
            ]
            for book in books
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([book_to_dict(book) for book in books], indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, 1):
            print(f"{i}. {book.title} - {book.author}")


def list_books(args, config: Config):
    """List books, optionally filtered by title and tag."""
    with make_client(config) as client:
        books = client.list_books(args.title or "", args.tag or ALL_TAGS)

    if not books:
        print("No books found.")
        return

    logger.info(f"Found {len(books)} books")
    display_books(books, args.format)


def show_book(args, config: Config):
    """Show one book and its chapters."""
    with make_client(config) as client:
        book = client.get_book(args.book_id)

    if book is None:
        print("Book not found.")
        return

    if args.format == "json":
        print(json.dumps(book_to_dict(book), indent=2))
        return

    print("\n" + "=" * 50)
    print(book.title)
    print("=" * 50)
    print(f"by {book.author}")
    print(f"Tags: {book.tags_str}")

    if not book.chapters:
        print("\nNo chapters yet.\n")
        return

    rows = [
        [chapter.chapter_number, chapter.chapter_title, format_chapter_date(chapter.date), chapter.id]
        for chapter in book.chapters
    ]
    print("\n" + tabulate(rows, headers=["#", "Chapter", "Date", "ID"], tablefmt="grid"))


def add_book(args, config: Config):
    """Create a book and print its identifier."""
    payload = book_payload(args.title, args.author, args.tags or "")

    with make_client(config) as client:
        record = client.create_book(payload)

    book_id = record.get("_id") if isinstance(record, dict) else None
    if not book_id:
        logger.error("Create book response carried no identifier")
        raise ApiError("Failed to save book")

    logger.info(f"✅ Created book {book_id}")
    print(book_id)


def delete_book(args, config: Config):
    """Delete a book after confirmation."""
    if not args.yes:
        answer = input("Are you sure you want to delete this book? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Cancelled.")
            return

    with make_client(config) as client:
        client.delete_book(args.book_id)

    logger.info(f"✅ Deleted book {args.book_id}")


def serve(args, config: Config):
    """Run the web front end."""
    from booklog.web import create_app

    app = create_app(config)

    print(f"\n📚 BookLog starting on http://{args.host}:{args.port}")
    print(f"🔗 Book API: {config.API_BASE_URL}\n")

    app.run(host=args.host, port=args.port, debug=args.debug)


def build_parser(config: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="BookLog - manage books and chapters through the book API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List books tagged drama whose title contains "night"
  %(prog)s list --title night --tag drama

  # Show a book with its chapters
  %(prog)s show 665f1c2e9b

  # Add a book
  %(prog)s add --title "Dune" --author "Frank Herbert" --tags "sci-fi, classic"

  # Start the web front end
  %(prog)s serve --port 5000
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # List command
    list_parser = subparsers.add_parser("list", help="List books")
    list_parser.add_argument("--title", help="Title contains")
    list_parser.add_argument("--tag", help="Tag equals (case-insensitive)")
    list_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    # Show command
    show_parser = subparsers.add_parser("show", help="Show a book with its chapters")
    show_parser.add_argument("book_id", help="Book identifier")
    show_parser.add_argument("--format", choices=["table", "json"], default="table", help="Output format")

    # Add command
    add_parser = subparsers.add_parser("add", help="Add a book")
    add_parser.add_argument("--title", required=True, help="Book title")
    add_parser.add_argument("--author", required=True, help="Book author")
    add_parser.add_argument("--tags", help="Comma separated tags")

    # Delete command
    delete_parser = subparsers.add_parser("delete", help="Delete a book")
    delete_parser.add_argument("book_id", help="Book identifier")
    delete_parser.add_argument("--yes", action="store_true", help="Skip confirmation")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the web front end")
    serve_parser.add_argument("--host", default=config.HOST, help=f"Bind address (default: {config.HOST})")
    serve_parser.add_argument("--port", type=int, default=config.PORT, help=f"Port (default: {config.PORT})")
    serve_parser.add_argument("--debug", action="store_true", default=config.DEBUG, help="Flask debug mode")

    return parser


COMMANDS = {
    "list": list_books,
    "show": show_book,
    "add": add_book,
    "delete": delete_book,
    "serve": serve,
}


def main(argv=None):
    """Main CLI entry point."""
    config = Config()

    # Configure logging
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    parser = build_parser(config)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        COMMANDS[args.command](args, config)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except ApiError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
