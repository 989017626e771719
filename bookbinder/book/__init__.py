"""The book model: summary parsing, chapter loading, and tree traversal."""

from .loader import chapter_dest_path, load_book, load_book_from_disk
from .model import Book, BookItem, BookItems, Chapter, Separator
from .summary import Link, SectionNumber, Summary, SummaryItem, load_summary, parse_summary

__all__ = [
    "Book",
    "BookItem",
    "BookItems",
    "Chapter",
    "Link",
    "SectionNumber",
    "Separator",
    "Summary",
    "SummaryItem",
    "chapter_dest_path",
    "load_book",
    "load_book_from_disk",
    "load_summary",
    "parse_summary",
]
