"""Load ``book.yaml`` into typed dataclasses."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from bookbinder._constants import CONFIG_FILENAME

from .helpers import (
    _as_bool,
    _as_mapping,
    _as_relative_path,
    _as_str_list,
    _as_translations,
    _optional_str,
)
from .models import BookConfig, BookConfigError, BookMeta, BuildConfig, HtmlConfig

logger = logging.getLogger(__name__)


def load_book_config(root: Path) -> BookConfig:
    """Load the configuration for the book rooted at ``root``.

    Parameters
    ----------
    root : Path
        Book project directory, holding ``book.yaml`` and the source tree.

    Returns
    -------
    BookConfig
        Parsed configuration. A missing ``book.yaml`` yields the defaults.

    Raises
    ------
    BookConfigError
        If the YAML does not describe a valid configuration.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from bookbinder.config import load_book_config
    >>> config = load_book_config(Path("my-book"))  # doctest: +SKIP
    >>> config.src_dir  # doctest: +SKIP
    PosixPath('my-book/src')
    """
    path = root / CONFIG_FILENAME
    if not path.exists():
        logger.info("No %s found in %s, using defaults", CONFIG_FILENAME, root)
        return BookConfig(root=root)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise BookConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    return BookConfig(
        root=root,
        book=_build_book_meta(_as_mapping(raw.get("book"), "book")),
        build=_build_build_config(_as_mapping(raw.get("build"), "build")),
        html=_build_html_config(_as_mapping(raw.get("html"), "html")),
    )


def _build_book_meta(payload: typ.Mapping[str, typ.Any]) -> BookMeta:
    """Build BookMeta from the ``book`` table."""
    base = BookMeta()
    language = _optional_str(payload.get("language")) or base.language
    meta = BookMeta(
        title=_optional_str(payload.get("title")),
        authors=_as_str_list(payload.get("authors"), "book.authors"),
        description=_optional_str(payload.get("description")),
        language=language.lower(),
        multilingual=_as_bool(
            payload.get("multilingual"), "book.multilingual", base.multilingual
        ),
        translations=_as_translations(payload.get("translations")),
        src=_as_relative_path(payload.get("src"), "book.src", base.src),
    )
    if meta.multilingual and "/" in meta.language:
        msg = f"'book.language' must be a plain language code, got '{meta.language}'."
        raise BookConfigError(msg)
    return meta


def _build_build_config(payload: typ.Mapping[str, typ.Any]) -> BuildConfig:
    """Build BuildConfig from the ``build`` table."""
    base = BuildConfig()
    return BuildConfig(
        build_dir=_as_relative_path(
            payload.get("build_dir"), "build.build_dir", base.build_dir
        ),
        create_missing=_as_bool(
            payload.get("create_missing"), "build.create_missing", base.create_missing
        ),
        clean=_as_bool(payload.get("clean"), "build.clean", base.clean),
    )


def _build_html_config(payload: typ.Mapping[str, typ.Any]) -> HtmlConfig:
    """Build HtmlConfig from the ``html`` table."""
    base = HtmlConfig()
    return HtmlConfig(
        curly_quotes=_as_bool(
            payload.get("curly_quotes"), "html.curly_quotes", base.curly_quotes
        ),
        additional_css=[
            Path(item)
            for item in _as_str_list(payload.get("additional_css"), "html.additional_css")
        ],
        additional_js=[
            Path(item)
            for item in _as_str_list(payload.get("additional_js"), "html.additional_js")
        ],
        copy_fonts=_as_bool(payload.get("copy_fonts"), "html.copy_fonts", base.copy_fonts),
        hash_files=_as_bool(payload.get("hash_files"), "html.hash_files", base.hash_files),
        print_enabled=_as_bool(payload.get("print"), "html.print", base.print_enabled),
        theme=_as_relative_path(payload.get("theme"), "html.theme", base.theme),
        pygments_style=_optional_str(payload.get("pygments_style")),
    )


__all__ = ["load_book_config"]
