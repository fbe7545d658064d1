"""Data models for books and chapters."""
from dataclasses import dataclass, field
from typing import Optional, List


@dataclass
class Chapter:
    """A dated, numbered markdown document owned by one book."""
    id: str
    chapter_number: Optional[int]
    chapter_title: str
    date: Optional[str]
    content: str


@dataclass
class Book:
    """Normalized book representation."""
    id: str
    title: str
    author: str
    tags: List[str] = field(default_factory=list)
    chapters: List[Chapter] = field(default_factory=list)
    
    @property
    def tags_str(self) -> str:
        """Format tags as comma-separated string."""
        return ", ".join(self.tags) if self.tags else "None"
    
    def find_chapter(self, chapter_id: str) -> Optional[Chapter]:
        """Locate a chapter by identifier, or None if the book has no such chapter."""
        for chapter in self.chapters:
            if chapter.id == chapter_id:
                return chapter
        return None
