"""Unit tests for loading chapters from disk and walking the book tree."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

from bookbinder.book import (
    Book,
    Chapter,
    Link,
    SectionNumber,
    Separator,
    Summary,
    chapter_dest_path,
    load_book,
    load_book_from_disk,
)
from bookbinder.errors import BookIoError, ChapterNotFoundError

if typ.TYPE_CHECKING:
    from .conftest import BookFactory

SUMMARY = """
    # Summary

    [Introduction](README.md)

    - [Chapter 1](chapter_1.md)
        - [Hello World](chapter_1/hello.md)
        - [Draft]()
    ---
    - [Guide](guide/README.md)
"""

CHAPTERS = {
    "README.md": "# Introduction\n",
    "chapter_1.md": "# Chapter 1\n",
    "chapter_1/hello.md": "# Hello World\n",
    "guide/README.md": "# Guide\n",
}


def _names(book: Book) -> list[str]:
    return [item.name if isinstance(item, Chapter) else "---" for item in book.iter()]


def test_load_book_preserves_order_and_nesting(make_book: BookFactory) -> None:
    """Items follow prefix, numbered, suffix order with children in place."""
    root = make_book(SUMMARY, CHAPTERS)
    book = load_book(root / "src")

    assert _names(book) == [
        "Introduction",
        "Chapter 1",
        "Hello World",
        "Draft",
        "---",
        "Guide",
    ]
    chapter_1 = book.sections[1]
    assert isinstance(chapter_1, Chapter)
    assert chapter_1.number == SectionNumber((1,))
    assert [item.name for item in chapter_1.sub_items] == ["Hello World", "Draft"]


def test_chapter_paths(make_book: BookFactory) -> None:
    """Source paths come from the summary; README files become index pages."""
    root = make_book(SUMMARY, CHAPTERS)
    chapters = {chapter.name: chapter for chapter in load_book(root / "src").chapters()}

    assert chapters["Introduction"].dest_path == Path("index.html")
    assert chapters["Guide"].dest_path == Path("guide/index.html")
    hello = chapters["Hello World"]
    assert hello.source_path == Path("chapter_1/hello.md")
    assert hello.dest_path == Path("chapter_1/hello.html")
    assert hello.content == "# Hello World\n"


def test_drafts_have_no_paths(make_book: BookFactory) -> None:
    """Draft chapters carry no content, source, or destination."""
    root = make_book(SUMMARY, CHAPTERS)
    draft = next(c for c in load_book(root / "src").chapters() if c.name == "Draft")

    assert draft.is_draft
    assert draft.content == ""
    assert draft.source_path is None
    assert draft.dest_path is None


def test_content_is_exact_file_text(make_book: BookFactory) -> None:
    """Line endings and trailing whitespace are kept verbatim."""
    raw = b"# Windows\r\n\r\nline with trailing space \r\n"
    root = make_book("- [Windows](windows.md)\n", {"windows.md": raw})
    (chapter,) = load_book(root / "src").chapters()

    assert chapter.content == raw.decode("utf-8")


def test_missing_chapter_raises(make_book: BookFactory) -> None:
    """A summary entry without a file is a fatal, named error."""
    root = make_book("- [Missing](missing.md)\n", {})

    with pytest.raises(ChapterNotFoundError) as excinfo:
        load_book(root / "src")

    assert str(excinfo.value) == "Chapter file not found, missing.md"
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_create_missing_writes_stub(make_book: BookFactory) -> None:
    """With ``create_missing`` a stub heading is written and loaded."""
    root = make_book("- [Brand New](nested/new.md)\n", {})
    (chapter,) = load_book(root / "src", create_missing=True).chapters()

    stub = root / "src" / "nested" / "new.md"
    assert stub.read_text(encoding="utf-8") == "# Brand New\n"
    assert chapter.content == "# Brand New\n"


def test_undecodable_chapter_is_io_error(make_book: BookFactory) -> None:
    """Invalid UTF-8 is reported as an I/O error with the decode cause."""
    root = make_book("- [Bad](bad.md)\n", {"bad.md": b"\xff\xfe\xfa"})

    with pytest.raises(BookIoError) as excinfo:
        load_book(root / "src")

    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


def test_load_from_hand_built_summary(tmp_path: Path) -> None:
    """Nested locations resolve against the source dir, not their parent."""
    (tmp_path / "chapter_1.md").write_text("# Chapter 1\n", encoding="utf-8")
    (tmp_path / "hello.md").write_text("Hello World!", encoding="utf-8")
    summary = Summary(
        numbered_chapters=[
            Link(
                name="Chapter 1",
                location=Path("chapter_1.md"),
                number=SectionNumber((1,)),
                nested_items=[
                    Link(
                        name="Hello World",
                        location=Path("hello.md"),
                        number=SectionNumber((1, 1)),
                    ),
                    Separator(),
                ],
            )
        ]
    )

    book = load_book_from_disk(summary, tmp_path)

    (chapter,) = book.sections
    assert isinstance(chapter, Chapter)
    hello, separator = chapter.sub_items
    assert isinstance(separator, Separator)
    assert isinstance(hello, Chapter)
    assert hello.content == "Hello World!"
    assert str(hello.number) == "1.1."


def test_iterator_is_depth_first_and_restartable() -> None:
    """Iteration is pre-order, lazy, and never consumes the tree."""
    leaf = Chapter(name="Leaf")
    branch = Chapter(name="Branch", sub_items=[leaf, Separator()])
    book = Book(sections=[Chapter(name="Root"), branch, Chapter(name="Tail")])

    first_pass = [getattr(item, "name", "---") for item in book.iter()]
    second_pass = [getattr(item, "name", "---") for item in book]

    assert first_pass == ["Root", "Branch", "Leaf", "---", "Tail"]
    assert second_pass == first_pass
    assert branch.sub_items == [leaf, Separator()]


def test_iterator_yields_the_owned_chapters() -> None:
    """Yielded chapters are the tree's own objects, not copies."""
    child = Chapter(name="Child")
    book = Book(sections=[Chapter(name="Parent", sub_items=[child])])

    items = list(book.iter())

    assert items[1] is child


def test_chapter_dest_path_readme_any_case() -> None:
    """``readme.md`` in any case maps to ``index.html``."""
    assert chapter_dest_path(Path("docs/ReadMe.md")) == Path("docs/index.html")
    assert chapter_dest_path(Path("notes.md")) == Path("notes.html")
