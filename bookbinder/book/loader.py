"""Load chapter content from disk according to a parsed summary.

The loader walks the summary's prefix, numbered, and suffix sections in that
order and produces a :class:`~bookbinder.book.model.Book` whose chapters own
their nested items. Every link location is resolved against the same source
directory, regardless of how deeply it is nested.

Example
-------
>>> from pathlib import Path
>>> from bookbinder.book import load_book
>>> book = load_book(Path("my-book/src"))  # doctest: +SKIP
>>> [chapter.name for chapter in book.chapters()]  # doctest: +SKIP
['Introduction', 'Chapter 1']
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from bookbinder._constants import INDEX_PAGE
from bookbinder.errors import BookIoError, ChapterNotFoundError

from .model import Book, BookItem, Chapter, Separator
from .summary import Link, load_summary
from .summary import Separator as SummarySeparator

if typ.TYPE_CHECKING:
    from .summary import Summary, SummaryItem

logger = logging.getLogger(__name__)

README_STEM = "readme"
_NOT_FOUND = (FileNotFoundError, IsADirectoryError, NotADirectoryError)


def load_book(src_dir: Path, *, create_missing: bool = False) -> Book:
    """Parse ``SUMMARY.md`` in ``src_dir`` and load every chapter it lists."""
    summary = load_summary(src_dir)
    return load_book_from_disk(summary, src_dir, create_missing=create_missing)


def load_book_from_disk(
    summary: Summary, src_dir: Path, *, create_missing: bool = False
) -> Book:
    """Use ``summary`` to load a :class:`Book` from ``src_dir``.

    Parameters
    ----------
    summary : Summary
        Parsed table of contents.
    src_dir : Path
        Directory that relative link locations are resolved against.
    create_missing : bool, optional
        Write a ``# <name>`` stub for chapters whose file does not exist
        instead of failing.

    Returns
    -------
    Book
        The loaded tree, with items in prefix + numbered + suffix order.

    Raises
    ------
    ChapterNotFoundError
        If a linked file does not exist and ``create_missing`` is false.
    BookIoError
        If a file exists but cannot be read as UTF-8 text.
    """
    logger.debug("Loading the book from %s", src_dir)
    sections = [_load_summary_item(item, src_dir, create_missing) for item in summary.items()]
    return Book(sections=sections)


def _load_summary_item(item: SummaryItem, src_dir: Path, create_missing: bool) -> BookItem:
    match item:
        case SummarySeparator():
            return Separator()
        case Link():
            return _load_chapter(item, src_dir, create_missing)
    msg = f"unsupported summary item {item!r}"  # pragma: no cover - exhaustive
    raise TypeError(msg)


def _load_chapter(link: Link, src_dir: Path, create_missing: bool) -> Chapter:
    """Read one linked file and recurse into its nested items."""
    chapter = Chapter(name=link.name, number=link.number)
    if link.location is not None:
        logger.debug("Loading %s (%s)", link.name, link.location)
        location = link.location if link.location.is_absolute() else src_dir / link.location
        if create_missing and not location.exists():
            _create_stub(location, link.name)
        chapter.content = _read_chapter(location, link.location)
        chapter.source_path = link.location
        chapter.dest_path = chapter_dest_path(_relative_source(link.location, src_dir))

    chapter.sub_items = [
        _load_summary_item(item, src_dir, create_missing) for item in link.nested_items
    ]
    return chapter


def _read_chapter(location: Path, logical: Path) -> str:
    try:
        raw = location.read_bytes()
    except _NOT_FOUND as exc:
        raise ChapterNotFoundError(str(logical)) from exc
    except OSError as exc:
        msg = f"Unable to read chapter {logical}"
        raise BookIoError(msg) from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Chapter {logical} is not valid UTF-8"
        raise BookIoError(msg) from exc


def _create_stub(location: Path, name: str) -> None:
    logger.info("Creating missing file %s", location)
    try:
        location.parent.mkdir(parents=True, exist_ok=True)
        location.write_text(f"# {name}\n", encoding="utf-8")
    except OSError as exc:
        msg = f"Unable to create missing chapter {location}"
        raise BookIoError(msg) from exc


def _relative_source(location: Path, src_dir: Path) -> Path:
    """Return ``location`` relative to ``src_dir``; outside files keep their name."""
    if not location.is_absolute():
        return location
    try:
        return location.relative_to(src_dir.absolute())
    except ValueError:
        return Path(location.name)


def chapter_dest_path(source: Path) -> Path:
    """Return the output path for a chapter source file.

    ``README.md`` files (any case) become ``index.html`` in the same
    directory; everything else swaps its suffix for ``.html``.

    >>> chapter_dest_path(Path("guide/README.md")).as_posix()
    'guide/index.html'
    >>> chapter_dest_path(Path("guide/setup.md")).as_posix()
    'guide/setup.html'
    """
    if source.stem.lower() == README_STEM:
        return source.with_name(INDEX_PAGE)
    return source.with_suffix(".html")


__all__ = ["chapter_dest_path", "load_book", "load_book_from_disk"]
