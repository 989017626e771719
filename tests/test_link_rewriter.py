"""Unit tests for chapter link rewriting.

These cover the plain rewrite rules of :func:`fix_link`, the print-page
prefixing, resolution through the symlink render map, and the raw HTML
rewriter used for ``<a>``/``<img>`` tags embedded in Markdown.
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path, PurePosixPath

import pytest

from bookbinder.book import load_book
from bookbinder.generator.link_rewriter import (
    HtmlLinkRewriter,
    SymlinkResolveContext,
    build_render_paths,
    fix_link,
)

if typ.TYPE_CHECKING:
    from .conftest import BookFactory


@pytest.mark.parametrize(
    ("dest", "expected"),
    [
        ("#usage", "#usage"),
        ("https://example.com/page.md", "https://example.com/page.md"),
        ("HTTPS://example.com/", "HTTPS://example.com/"),
        ("mailto:someone@example.com", "mailto:someone@example.com"),
        ("chapter.md", "chapter.html"),
        ("dir/chapter.md#section", "dir/chapter.html#section"),
        ("../up.md", "../up.html"),
        ("image.png", "image.png"),
        ("notes.md.txt", "notes.md.txt"),
    ],
)
def test_fix_link_without_context(dest: str, expected: str) -> None:
    """Without a render map, ``.md`` becomes ``.html`` and the rest stays."""
    assert fix_link(dest) == expected


@pytest.mark.parametrize(
    ("dest", "expected"),
    [
        ("#usage", "guide/cli.html#usage"),
        ("image.png", "guide/image.png"),
        ("other.md#part", "guide/other.html#part"),
        ("../index.md", "index.html"),
        ("https://example.com/", "https://example.com/"),
    ],
)
def test_fix_link_for_print_page(dest: str, expected: str) -> None:
    """Print rendering points relative links back at the chapter's directory."""
    assert fix_link(dest, PurePosixPath("guide/cli.html")) == expected


def test_fix_link_print_page_at_root() -> None:
    """Chapters at the root need no directory prefix."""
    assert fix_link("pic.png", PurePosixPath("intro.html")) == "pic.png"
    assert fix_link("#top", PurePosixPath("intro.html")) == "intro.html#top"


@pytest.fixture
def linked_book(make_book: BookFactory) -> tuple[Path, dict[Path, Path]]:
    """Write a book with a nested chapter and a symlinked alias."""
    root = make_book(
        """
        - [Alias](alias.md)
        - [Two](two.md)
        - [Nested](nested/one.md)
        """,
        {
            "real/page.md": "# Real\n",
            "two.md": "# Two\n",
            "nested/one.md": "# One\n",
            "outside.md": "# Not listed\n",
        },
    )
    src = root / "src"
    (src / "alias.md").symlink_to(src / "real" / "page.md")
    book = load_book(src)
    render_paths = build_render_paths(book, src, root / "book")
    return src, render_paths


def _ctx(src: Path, render_paths: dict[Path, Path], current: str) -> SymlinkResolveContext:
    return SymlinkResolveContext(
        to_render_paths=render_paths, src_dir=src, current_md_relative_path=Path(current)
    )


def test_render_paths_use_canonical_sources(
    linked_book: tuple[Path, dict[Path, Path]],
) -> None:
    """Keys are resolved source files; values are absolute output files."""
    src, render_paths = linked_book

    target = render_paths[(src / "real" / "page.md").resolve()]
    assert target.is_absolute()
    assert target.name == "alias.html"


def test_relative_md_link_resolves_from_referrer(
    linked_book: tuple[Path, dict[Path, Path]],
) -> None:
    """Targets resolve against the referring chapter's directory."""
    src, render_paths = linked_book
    ctx = _ctx(src, render_paths, "nested/one.md")

    assert fix_link("../two.md#x", symlink_ctx=ctx) == "../two.html#x"


def test_link_through_canonical_path_finds_alias(
    linked_book: tuple[Path, dict[Path, Path]],
) -> None:
    """A link to the real file lands on the page rendered for its alias."""
    src, render_paths = linked_book
    ctx = _ctx(src, render_paths, "two.md")

    assert fix_link("real/page.md", symlink_ctx=ctx) == "alias.html"


def test_missing_target_falls_back_with_warning(
    linked_book: tuple[Path, dict[Path, Path]], caplog: pytest.LogCaptureFixture
) -> None:
    """Unresolvable targets keep the plain rewrite and log a warning."""
    src, render_paths = linked_book
    ctx = _ctx(src, render_paths, "two.md")

    with caplog.at_level(logging.WARNING):
        result = fix_link("ghost.md#top", symlink_ctx=ctx)

    assert result == "ghost.html#top"
    assert "ghost.md" in caplog.text


def test_unlisted_target_falls_back_with_warning(
    linked_book: tuple[Path, dict[Path, Path]], caplog: pytest.LogCaptureFixture
) -> None:
    """Existing files outside the book are reported, not fatal."""
    src, render_paths = linked_book
    ctx = _ctx(src, render_paths, "two.md")

    with caplog.at_level(logging.WARNING):
        result = fix_link("outside.md", symlink_ctx=ctx)

    assert result == "outside.html"
    assert "not part of the book" in caplog.text


def test_first_tree_position_wins(make_book: BookFactory) -> None:
    """Two entries sharing one canonical file map to the first entry's page."""
    root = make_book(
        "- [Real](real.md)\n- [Again](again.md)\n", {"real.md": "# Real\n"}
    )
    src = root / "src"
    (src / "again.md").symlink_to(src / "real.md")

    render_paths = build_render_paths(load_book(src), src, root / "book")

    assert list(render_paths.values()) == [(root / "book" / "real.html").absolute()]


def test_html_rewriter_handles_anchor_and_image_tags() -> None:
    """Both ``href`` and ``src`` attributes are rewritten."""
    rewriter = HtmlLinkRewriter(PurePosixPath("guide/intro.html"))
    html = '<a class="x" href="next.md#a">n</a> <img src="fig.png" alt=""> <b>b.md</b>'

    assert rewriter.rewrite(html) == (
        '<a class="x" href="guide/next.html#a">n</a> '
        '<img src="guide/fig.png" alt=""> <b>b.md</b>'
    )


def test_html_rewriter_leaves_absolute_urls() -> None:
    """Scheme URLs in raw HTML are untouched."""
    html = '<a href="http://example.com/x.md">x</a>'

    assert HtmlLinkRewriter().rewrite(html) == html
