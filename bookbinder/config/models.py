"""Typed dataclasses describing ``book.yaml`` configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path


class BookConfigError(ValueError):
    """Raised when the book configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class BookMeta:
    """Metadata about the book itself."""

    title: str | None = None
    authors: list[str] = dc.field(default_factory=list)
    description: str | None = None
    language: str = "en"
    multilingual: bool = False
    translations: dict[str, str] = dc.field(default_factory=dict)
    src: Path = Path("src")


@dc.dataclass(slots=True)
class BuildConfig:
    """Options controlling the build process."""

    build_dir: Path = Path("book")
    create_missing: bool = True
    clean: bool = True


@dc.dataclass(slots=True)
class HtmlConfig:
    """Options for the HTML renderer and its static assets.

    Attributes
    ----------
    curly_quotes : bool
        Convert straight quotes to typographic quotes outside code.
    additional_css : list[Path]
        Extra stylesheets, relative to the book root, linked from every page.
    additional_js : list[Path]
        Extra scripts, relative to the book root, loaded by every page.
    copy_fonts : bool
        Ship the bundled font stylesheet and licence.
    hash_files : bool
        Fingerprint static asset filenames with a content digest.
    print_enabled : bool
        Emit ``print.html`` with every chapter on one page.
    theme : Path
        Directory, relative to the book root, whose files override the
        bundled theme.
    pygments_style : str or None
        Highlight code on the server with this Pygments style.
    """

    curly_quotes: bool = False
    additional_css: list[Path] = dc.field(default_factory=list)
    additional_js: list[Path] = dc.field(default_factory=list)
    copy_fonts: bool = True
    hash_files: bool = True
    print_enabled: bool = True
    theme: Path = Path("theme")
    pygments_style: str | None = None


@dc.dataclass(slots=True)
class BookConfig:
    """Root configuration for a book project."""

    root: Path
    book: BookMeta = dc.field(default_factory=BookMeta)
    build: BuildConfig = dc.field(default_factory=BuildConfig)
    html: HtmlConfig = dc.field(default_factory=HtmlConfig)

    @property
    def src_dir(self) -> Path:
        """Directory holding ``SUMMARY.md`` and the chapter sources."""
        return self.root / self.book.src

    @property
    def dest_dir(self) -> Path:
        """Directory the rendered site is written to."""
        return self.root / self.build.build_dir

    @property
    def theme_dir(self) -> Path:
        """Directory with user theme overrides (may not exist)."""
        return self.root / self.html.theme

    @property
    def language_dir(self) -> str | None:
        """Language subdirectory for chapters in multilingual builds."""
        return self.book.language if self.book.multilingual else None


__all__ = ["BookConfig", "BookConfigError", "BookMeta", "BuildConfig", "HtmlConfig"]
