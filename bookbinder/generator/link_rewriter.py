"""Rewrite chapter links so they resolve from the generated HTML pages.

Markdown sources link to each other with ``.md`` paths. Once rendered, those
links must point at the ``.html`` files the generator writes, and they must
keep working when one source file appears at several places in the tree
(through symlinks). :class:`RelativeLinkExtension` plugs the rewriting into a
``markdown.Markdown`` instance for both Markdown links/images and raw HTML
``<a>``/``<img>`` tags.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import posixpath
import re
import typing as typ
from pathlib import Path, PurePosixPath

from markdown.extensions import Extension
from markdown.postprocessors import Postprocessor
from markdown.treeprocessors import Treeprocessor

from bookbinder.book.model import Chapter

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from bookbinder.book.model import Book
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

logger = logging.getLogger(__name__)

SCHEME_LINK = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
MD_LINK = re.compile(r"^(?P<link>.*)\.md(?P<anchor>#.*)?$", re.DOTALL)
HTML_LINK = re.compile(r'(<(?:a|img) [^>]*?(?:src|href)=")([^"]+?)"')


@dc.dataclass(frozen=True, slots=True)
class SymlinkResolveContext:
    """Everything needed to resolve ``.md`` links through symlinked sources.

    Attributes
    ----------
    to_render_paths : Mapping[Path, Path]
        Canonical absolute source path to absolute destination HTML path.
    src_dir : Path
        The book's source directory.
    current_md_relative_path : Path
        Source path of the chapter being rendered, as written in the summary.
    """

    to_render_paths: cabc.Mapping[Path, Path]
    src_dir: Path
    current_md_relative_path: Path


def build_render_paths(book: Book, src_dir: Path, dest_dir: Path) -> dict[Path, Path]:
    """Map each chapter's canonical source file to its absolute output file.

    When several tree positions share one canonical file, the first position
    in document order wins.
    """
    paths: dict[Path, Path] = {}
    for item in book.iter():
        if not isinstance(item, Chapter) or item.source_path is None:
            continue
        if item.dest_path is None:
            continue
        source = item.source_path if item.source_path.is_absolute() else src_dir / item.source_path
        canonical = source.resolve()
        paths.setdefault(canonical, (dest_dir / item.dest_path).absolute())
    return paths


def _with_html_suffix(path: PurePosixPath) -> str:
    text = path.as_posix()
    if text.endswith(".md"):
        return text[: -len(".md")] + ".html"
    return text


def _resolve_through_symlinks(target: str, ctx: SymlinkResolveContext) -> str | None:
    """Return the target's output path relative to the referrer's output dir."""
    current = ctx.current_md_relative_path
    current_md = current if current.is_absolute() else ctx.src_dir / current
    target_path = Path(target)
    target_md = target_path if target_path.is_absolute() else current_md.parent / target_path

    try:
        target_canonical = target_md.resolve(strict=True)
        current_canonical = current_md.resolve(strict=True)
    except OSError:
        logger.warning("Links to markdown file %s, which does not exist.", target)
        return None

    target_html = ctx.to_render_paths.get(target_canonical)
    if target_html is None:
        logger.warning("Links to markdown file %s, which is not part of the book.", target)
        return None
    current_html = ctx.to_render_paths.get(current_canonical)
    if current_html is None:
        return None
    relative = os.path.relpath(target_html, current_html.parent)
    return Path(relative).as_posix()


def fix_link(
    dest: str,
    print_path: PurePosixPath | None = None,
    symlink_ctx: SymlinkResolveContext | None = None,
) -> str:
    """Rewrite one link destination so it resolves from the rendered page.

    Parameters
    ----------
    dest : str
        The destination as written in the Markdown source.
    print_path : PurePosixPath, optional
        The chapter's own output path, supplied only when rendering the
        single-page print view so every link points back at the chapter page.
    symlink_ctx : SymlinkResolveContext, optional
        Context for resolving ``.md`` targets through the render map.

    Returns
    -------
    str
        The rewritten destination.

    Examples
    --------
    >>> fix_link("intro.md#setup")
    'intro.html#setup'
    >>> fix_link("https://example.com/a.md")
    'https://example.com/a.md'
    >>> fix_link("#usage", PurePosixPath("guide/cli.md"))
    'guide/cli.html#usage'
    """
    if dest.startswith("#"):
        if print_path is None:
            return dest
        return f"{_with_html_suffix(print_path)}{dest}"
    if SCHEME_LINK.match(dest):
        return dest

    base = ""
    if print_path is not None:
        base = posixpath.dirname(print_path.as_posix())

    match = MD_LINK.match(dest)
    if match is None:
        return _under(base, dest)

    link = match["link"]
    anchor = match["anchor"] or ""
    resolved = None
    if symlink_ctx is not None:
        resolved = _resolve_through_symlinks(f"{link}.md", symlink_ctx)
    if resolved is None:
        resolved = f"{link}.html"
    return f"{_under(base, resolved)}{anchor}"


def _under(base: str, path: str) -> str:
    """Join ``path`` below ``base``, collapsing ``..`` segments.

    >>> _under("guide", "../index.html")
    'index.html'
    >>> _under("", "../index.html")
    '../index.html'
    """
    if not base:
        return path
    joined = posixpath.normpath(f"{base}/{path}")
    if path.endswith("/") and not joined.endswith("/"):
        joined += "/"
    return joined


class HtmlLinkRewriter:
    """Rewrite ``href``/``src`` attributes of ``<a>`` and ``<img>`` tags.

    Raw HTML fragments embedded in Markdown are narrow in shape, so a regular
    expression is good enough here. Call sites only depend on :meth:`rewrite`.
    """

    def __init__(
        self,
        print_path: PurePosixPath | None = None,
        symlink_ctx: SymlinkResolveContext | None = None,
    ) -> None:
        self.print_path = print_path
        self.symlink_ctx = symlink_ctx

    def rewrite(self, html: str) -> str:
        """Return ``html`` with every matched link destination fixed."""

        def _repl(match: re.Match[str]) -> str:
            fixed = fix_link(match.group(2), self.print_path, self.symlink_ctx)
            return f'{match.group(1)}{fixed}"'

        return HTML_LINK.sub(_repl, html)


class RelativeLinkExtension(Extension):
    """Fix chapter links in Markdown output.

    Insert this extension into a ``markdown.Markdown`` instance so that
    ``[text](other.md#anchor)`` becomes ``other.html#anchor`` (or the path
    found through the symlink render map), images and raw HTML tags included.
    """

    def __init__(
        self,
        print_path: PurePosixPath | None = None,
        symlink_ctx: SymlinkResolveContext | None = None,
    ) -> None:
        super().__init__()
        self.print_path = print_path
        self.symlink_ctx = symlink_ctx

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the link treeprocessor and raw HTML postprocessor."""
        rewriter = HtmlLinkRewriter(self.print_path, self.symlink_ctx)
        md.treeprocessors.register(
            RelativeLinkTreeprocessor(md, self.print_path, self.symlink_ctx),
            "bookbinder_relative_links",
            15,
        )
        # must run before "raw_html" (30) puts the stashed fragments back
        md.postprocessors.register(
            RawHtmlLinkPostprocessor(md, rewriter), "bookbinder_raw_html_links", 35
        )


class RelativeLinkTreeprocessor(Treeprocessor):
    """Rewrite ``a[href]`` and ``img[src]`` in the parsed Markdown tree."""

    ATTRIBUTES: typ.ClassVar[dict[str, str]] = {"a": "href", "img": "src"}

    def __init__(
        self,
        md: Markdown,
        print_path: PurePosixPath | None,
        symlink_ctx: SymlinkResolveContext | None,
    ) -> None:
        super().__init__(md)
        self.print_path = print_path
        self.symlink_ctx = symlink_ctx

    def run(self, root: Element) -> Element:
        """Rewrite link and image destinations in place."""
        for element in root.iter():
            attribute = self.ATTRIBUTES.get(element.tag)
            if attribute is None:
                continue
            target = element.get(attribute)
            if target:
                element.set(attribute, fix_link(target, self.print_path, self.symlink_ctx))
        return root


class RawHtmlLinkPostprocessor(Postprocessor):
    """Rewrite links inside raw HTML blocks held in the Markdown HTML stash."""

    def __init__(self, md: Markdown, rewriter: HtmlLinkRewriter) -> None:
        super().__init__(md)
        self.rewriter = rewriter

    def run(self, text: str) -> str:
        """Fix the stashed fragments; ``text`` itself is returned unchanged."""
        blocks = self.md.htmlStash.rawHtmlBlocks
        for index, block in enumerate(blocks):
            if isinstance(block, str):
                blocks[index] = self.rewriter.rewrite(block)
        return text


__all__ = [
    "HtmlLinkRewriter",
    "RawHtmlLinkPostprocessor",
    "RelativeLinkExtension",
    "RelativeLinkTreeprocessor",
    "SymlinkResolveContext",
    "build_render_paths",
    "fix_link",
]
