"""The loaded document tree and its depth-first iterator."""

from __future__ import annotations

import collections
import collections.abc as cabc
import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .summary import SectionNumber


@dc.dataclass(frozen=True, slots=True)
class Separator:
    """A spacer between chapters in the rendered table of contents."""


@dc.dataclass(slots=True)
class Chapter:
    """A loaded unit of content, usually backed by a single Markdown file.

    Attributes
    ----------
    name : str
        Chapter title from the summary.
    content : str
        Exact text of the source file; empty for drafts.
    number : SectionNumber or None
        Section number, or ``None`` when the entry was not numbered.
    sub_items : list[BookItem]
        Nested chapters and separators, owned by this chapter.
    source_path : Path or None
        Location relative to the source directory (or absolute).
    dest_path : Path or None
        Output HTML path relative to the destination root. ``None`` marks a
        draft chapter that is not rendered to its own file.
    translation_links : list[dict[str, str]] or None
        Links to the same chapter in other languages, when known.
    """

    name: str
    content: str = ""
    number: SectionNumber | None = None
    sub_items: list[BookItem] = dc.field(default_factory=list)
    source_path: Path | None = None
    dest_path: Path | None = None
    translation_links: list[dict[str, str]] | None = None

    @property
    def is_draft(self) -> bool:
        return self.dest_path is None


BookItem = Chapter | Separator


class BookItems(cabc.Iterator[BookItem]):
    """Lazy pre-order iterator over a list of book items.

    Prefer :meth:`Book.iter` over constructing this directly.
    """

    def __init__(self, items: cabc.Iterable[BookItem]) -> None:
        self._items: collections.deque[BookItem] = collections.deque(items)

    def __iter__(self) -> BookItems:
        return self

    def __next__(self) -> BookItem:
        if not self._items:
            raise StopIteration
        item = self._items.popleft()
        match item:
            case Chapter(sub_items=sub_items):
                # push children to the front in reverse so they come out in order
                self._items.extendleft(reversed(sub_items))
            case Separator():
                pass
        return item


@dc.dataclass(slots=True)
class Book:
    """Root of the loaded tree; owns every chapter."""

    sections: list[BookItem] = dc.field(default_factory=list)

    def iter(self) -> BookItems:
        """Return a fresh depth-first iterator over every item in the book."""
        return BookItems(self.sections)

    def __iter__(self) -> BookItems:
        return self.iter()

    def chapters(self) -> cabc.Iterator[Chapter]:
        """Yield only the chapters, in document order."""
        for item in self.iter():
            if isinstance(item, Chapter):
                yield item

    def rendered_chapters(self) -> list[Chapter]:
        """Return the non-draft chapters in document order."""
        return [chapter for chapter in self.chapters() if not chapter.is_draft]


__all__ = ["Book", "BookItem", "BookItems", "Chapter", "Separator"]
