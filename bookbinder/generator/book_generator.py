"""High-level orchestration for rendering a book into a static HTML site.

:class:`BookGenerator` consumes a :class:`~bookbinder.config.BookConfig`,
loads the book described by ``SUMMARY.md``, runs the static asset pipeline,
and renders every chapter through the shared ``page.jinja`` template. Besides
one page per chapter it writes ``print.html`` (all chapters on one page) and
an ``index.html`` when no chapter already owns that path.

Example
-------
>>> from pathlib import Path
>>> from bookbinder.config import load_book_config
>>> from bookbinder.generator import BookGenerator
>>> config = load_book_config(Path("my-book"))  # doctest: +SKIP
>>> BookGenerator(config).run()  # doctest: +SKIP
[PosixPath('my-book/book/intro.html'), ...]
"""

from __future__ import annotations

import logging
import shutil
import typing as typ
from pathlib import Path, PurePosixPath

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from bookbinder._constants import INDEX_PAGE, PAGE_TEMPLATE, PRINT_PAGE, REDIRECT_TEMPLATE
from bookbinder.book import load_book
from bookbinder.errors import BookIoError
from bookbinder.theme import Theme, load_theme

from .link_rewriter import SymlinkResolveContext, build_render_paths
from .models import PageModel
from .navigation import (
    build_toc,
    next_chapter,
    previous_chapter,
    relative_link,
    site_path,
)
from .paths import path_to_root, posix_text
from .renderer import HtmlContentRenderer
from .static_files import StaticFiles

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from jinja2 import Template

    from bookbinder.book.model import Book, Chapter
    from bookbinder.config import BookConfig

logger = logging.getLogger(__name__)

PYGMENTS_STYLESHEET = "css/pygments.css"


class BookGenerator:
    """Load a book and emit its themed HTML pages and static assets."""

    def __init__(
        self,
        config: BookConfig,
        *,
        templates_dir: Path | None = None,
        dest_dir: Path | None = None,
    ) -> None:
        """Initialize the generator with configuration and template context.

        Parameters
        ----------
        config : BookConfig
            Book configuration describing sources, output, and HTML options.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package templates.
        dest_dir : Path, optional
            Override for the output directory; defaults to the configured build dir.
        """
        self.config = config
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.dest_dir = dest_dir or config.dest_dir
        self.language = config.language_dir
        self.renderer = HtmlContentRenderer(
            curly_quotes=config.html.curly_quotes,
            pygments_style=config.html.pygments_style,
        )
        self._name_map: cabc.Mapping[str, str] = {}

    @property
    def chapter_dir(self) -> Path:
        """Directory chapter pages are written to."""
        if self.language:
            return self.dest_dir / self.language
        return self.dest_dir

    def run(self) -> list[Path]:
        """Render the book into themed HTML files on disk.

        Returns
        -------
        list[Path]
            Paths to the generated HTML documents, in document order,
            followed by the print page and any index or redirect pages.

        Raises
        ------
        BookError
            Raised for any fatal loading, asset, or output failure; nothing
            after the failing step is written.

        Notes
        -----
        Side effects include clearing the output directory (when
        ``build.clean`` is set) and writing every static asset.
        """
        src_dir = self.config.src_dir
        logger.info("Building book from %s", src_dir)
        book = load_book(src_dir, create_missing=self.config.build.create_missing)

        if self.config.build.clean:
            self._clean_destination()
        self.chapter_dir.mkdir(parents=True, exist_ok=True)

        theme = self._load_theme()
        self._name_map = self._write_assets(theme)
        template = _get_template(self._environment(theme), PAGE_TEMPLATE)

        render_paths = build_render_paths(book, src_dir, self.chapter_dir)
        context = self._base_context(theme)
        written: list[Path] = []
        seen: set[PurePosixPath] = set()
        for chapter in book.rendered_chapters():
            page_path = site_path(chapter, self.language)
            if page_path in seen:
                logger.debug("Skipping repeated chapter %s", page_path)
                continue
            seen.add(page_path)
            chapter.translation_links = self._translation_links(chapter)
            content = self.renderer.markdown(
                chapter.content,
                symlink_context=self._symlink_context(chapter, render_paths),
            )
            page = self._chapter_page(book, chapter, content, page_path)
            written.append(self._write_page(template, context, page))

        if self.config.html.print_enabled and seen:
            written.append(self._write_print_page(book, template, context, render_paths))

        written.extend(self._write_indexes(book, template, context, render_paths, seen))
        logger.info("Wrote %d pages to %s", len(written), self.dest_dir)
        return written

    def _clean_destination(self) -> None:
        """Remove previous output, keeping the destination directory itself."""
        target = self.chapter_dir
        if not target.exists():
            return
        ensure_safe_to_clean(target, self.config)
        logger.debug("Cleaning %s", target)
        try:
            for entry in target.iterdir():
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
        except OSError as exc:
            msg = f"Unable to clean the output directory {target}"
            raise BookIoError(msg) from exc

    def _load_theme(self) -> Theme:
        extra: dict[str, bytes] = {}
        stylesheet = self.renderer.stylesheet
        if stylesheet is not None:
            extra[PYGMENTS_STYLESHEET] = stylesheet.encode("utf-8")
        return load_theme(
            self.config.theme_dir,
            print_enabled=self.config.html.print_enabled,
            copy_fonts=self.config.html.copy_fonts,
            extra=extra,
        )

    def _write_assets(self, theme: Theme) -> cabc.Mapping[str, str]:
        html = self.config.html
        static_files = StaticFiles(
            theme.assets, [*html.additional_css, *html.additional_js], self.config.root
        )
        if html.hash_files:
            static_files.hash_files()
        return static_files.write_files(self.dest_dir)

    def _environment(self, theme: Theme) -> Environment:
        search_path = [str(self.templates_dir)]
        if theme.templates_dir is not None:
            search_path.insert(0, str(theme.templates_dir))
        return Environment(
            loader=FileSystemLoader(search_path),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def _base_context(self, theme: Theme) -> dict[str, typ.Any]:
        html = self.config.html
        return {
            "book": self.config.book,
            "stylesheets": [
                *theme.stylesheets,
                *(posix_text(path) for path in html.additional_css),
            ],
            "scripts": [
                *theme.scripts,
                *(posix_text(path) for path in html.additional_js),
            ],
        }

    def _symlink_context(
        self, chapter: Chapter, render_paths: dict[Path, Path]
    ) -> SymlinkResolveContext | None:
        if chapter.source_path is None:
            return None
        return SymlinkResolveContext(
            to_render_paths=render_paths,
            src_dir=self.config.src_dir,
            current_md_relative_path=chapter.source_path,
        )

    def _page_title(self, title: str) -> str:
        book_title = self.config.book.title
        if book_title and book_title != title:
            return f"{title} - {book_title}"
        return title

    def _chapter_page(
        self, book: Book, chapter: Chapter, content: str, page_path: PurePosixPath
    ) -> PageModel:
        return PageModel(
            title=chapter.name,
            page_title=self._page_title(chapter.name),
            path=page_path.as_posix(),
            path_to_root=path_to_root(page_path),
            content=content,
            toc=build_toc(book, page_path, current=chapter, language=self.language),
            previous=previous_chapter(book, chapter, language=self.language),
            next=next_chapter(book, chapter, language=self.language),
            translation_links=list(chapter.translation_links or []),
        )

    def _translation_links(self, chapter: Chapter) -> list[dict[str, str]] | None:
        """Return site-root relative links to this chapter in other languages."""
        if not self.language:
            return None
        dest = posix_text(chapter.dest_path) if chapter.dest_path else INDEX_PAGE
        return [
            {"language": code, "label": label, "link": f"{code}/{dest}"}
            for code, label in self.config.book.translations.items()
            if code != self.language
        ]

    def _site_path(self, filename: str) -> PurePosixPath:
        if self.language:
            return PurePosixPath(self.language) / filename
        return PurePosixPath(filename)

    def _write_print_page(
        self,
        book: Book,
        template: Template,
        context: dict[str, typ.Any],
        render_paths: dict[Path, Path],
    ) -> Path:
        """Render every chapter body onto ``print.html`` in document order."""
        bodies = [
            self.renderer.markdown(
                chapter.content,
                print_path=PurePosixPath(posix_text(chapter.dest_path)),
                symlink_context=self._symlink_context(chapter, render_paths),
            )
            for chapter in book.rendered_chapters()
            if chapter.dest_path is not None
        ]
        page_path = self._site_path(PRINT_PAGE)
        title = self.config.book.title or PurePosixPath(PRINT_PAGE).stem.title()
        page = PageModel(
            title=title,
            page_title=title,
            path=page_path.as_posix(),
            path_to_root=path_to_root(page_path),
            content="\n".join(body for body in bodies if body),
            toc=build_toc(book, page_path, language=self.language),
            is_print=True,
        )
        return self._write_page(template, context, page)

    def _write_indexes(
        self,
        book: Book,
        template: Template,
        context: dict[str, typ.Any],
        render_paths: dict[Path, Path],
        seen: set[PurePosixPath],
    ) -> list[Path]:
        """Write ``index.html`` pages that no chapter already provides."""
        chapters = book.rendered_chapters()
        if not chapters:
            logger.warning("The book has no chapters to render")
            return []
        first = chapters[0]
        first_path = site_path(first, self.language)
        written: list[Path] = []

        index_path = self._site_path(INDEX_PAGE)
        if index_path not in seen:
            if first_path.parent == index_path.parent:
                # same directory, so the rendered body's relative links stay valid
                content = self.renderer.markdown(
                    first.content,
                    symlink_context=self._symlink_context(first, render_paths),
                )
                page = self._chapter_page(book, first, content, first_path)
                page.path = index_path.as_posix()
                page.toc = build_toc(book, index_path, current=first, language=self.language)
                written.append(self._write_page(template, context, page))
            else:
                written.append(self._write_redirect(index_path, first_path))

        if self.language and self._is_main_language():
            written.append(self._write_redirect(PurePosixPath(INDEX_PAGE), first_path))
        return written

    def _is_main_language(self) -> bool:
        languages = list(self.config.book.translations)
        return not languages or languages[0] == self.language

    def _write_redirect(self, page_path: PurePosixPath, target: PurePosixPath) -> Path:
        template = _get_template(self._environment(Theme()), REDIRECT_TEMPLATE)
        html = template.render(
            language=self.config.book.language,
            title=self.config.book.title or "Redirecting",
            target=relative_link(page_path, target),
        )
        return self._write_html(page_path, html)

    def _write_page(
        self, template: Template, context: dict[str, typ.Any], page: PageModel
    ) -> Path:
        page_path = PurePosixPath(page.path)
        print_link = None
        if self.config.html.print_enabled and not page.is_print:
            print_link = relative_link(page_path, self._site_path(PRINT_PAGE))

        def resource(name: str) -> str:
            return f"{page.path_to_root}{self._name_map.get(name, name)}"

        html = template.render(
            **context, page=page, resource=resource, print_link=print_link
        )
        return self._write_html(page_path, html)

    def _write_html(self, page_path: PurePosixPath, html: str) -> Path:
        output_path = self.dest_dir / page_path
        logger.debug("Writing %s", output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(html, encoding="utf-8")
        except OSError as exc:
            msg = f"Unable to write {output_path}"
            raise BookIoError(msg) from exc
        return output_path


def ensure_safe_to_clean(target: Path, config: BookConfig) -> None:
    """Refuse to delete ``target`` when that would remove the book sources.

    Raises
    ------
    BookIoError
        If ``target`` is the book root, the source directory, or one of the
        source directory's ancestors.
    """
    resolved = target.resolve()
    root = config.root.resolve()
    src = config.src_dir.resolve()
    if resolved in (root, src) or resolved in src.parents:
        msg = f"Refusing to clean {target}: it contains the book sources"
        raise BookIoError(msg)


def _get_template(env: Environment, name: str) -> Template:
    """Return template ``name`` from ``env``, reporting a missing file as BookIoError."""
    try:
        return env.get_template(name)
    except TemplateNotFound as exc:
        msg = f"Unable to load the {name} template"
        raise BookIoError(msg) from exc


__all__ = ["PYGMENTS_STYLESHEET", "BookGenerator", "ensure_safe_to_clean"]
