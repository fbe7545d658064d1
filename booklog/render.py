"""Markdown rendering for chapter content."""
from typing import Optional

from markdown_it import MarkdownIt
from markupsafe import Markup

from booklog.parse import parse_timestamp

# Raw HTML in chapter bodies is escaped, not passed through.
_md = MarkdownIt("commonmark", {"html": False, "typographer": True}).enable("table").enable("strikethrough")


def render_markdown(source: Optional[str]) -> Markup:
    """Render stored markdown to HTML safe for direct insertion in a template."""
    return Markup(_md.render(source or ""))


def format_chapter_date(value: Optional[str]) -> str:
    """Display a chapter timestamp as M/D/YYYY, or '' when missing."""
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    return f"{moment.month}/{moment.day}/{moment.year}"
