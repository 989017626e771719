"""Load and validate ``book.yaml`` for bookbinder builds.

This subpackage parses the book's configuration file, applies defaults for
every missing table or key, and produces typed dataclasses
(:class:`BookConfig`, :class:`HtmlConfig`, etc.) that the generator consumes.
The primary entry point is :func:`load_book_config`.

Examples
--------
>>> from pathlib import Path
>>> from bookbinder.config import load_book_config
>>> config = load_book_config(Path("my-book"))  # doctest: +SKIP
>>> config.html.hash_files  # doctest: +SKIP
True
"""

from .loader import load_book_config
from .models import BookConfig, BookConfigError, BookMeta, BuildConfig, HtmlConfig

__all__ = [
    "BookConfig",
    "BookConfigError",
    "BookMeta",
    "BuildConfig",
    "HtmlConfig",
    "load_book_config",
]
