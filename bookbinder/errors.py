"""Exception types raised while loading and rendering a book.

Fatal conditions derive from :class:`BookError` and are always raised with
``raise ... from exc`` so callers can print the full cause chain. Unresolved
cross-document links and unresolved ``{{ resource }}`` directives are not
errors; they are reported through :mod:`logging` and the build carries on.

Example
-------
>>> from bookbinder.errors import BookIoError, format_error_chain
>>> try:
...     try:
...         raise FileNotFoundError("theme/page.jinja")
...     except FileNotFoundError as exc:
...         raise BookIoError("Unable to load the page template") from exc
... except BookIoError as err:
...     print(format_error_chain(err))
Error: Unable to load the page template
	Caused by: theme/page.jinja
"""

from __future__ import annotations


class BookError(Exception):
    """Base class for every fatal build condition."""


class ChapterNotFoundError(BookError):
    """Raised when a summary entry points at a file that does not exist."""

    def __init__(self, location: str) -> None:
        super().__init__(f"Chapter file not found, {location}")
        self.location = location


class BookIoError(BookError):
    """Raised for any other read, write, or directory-creation failure."""


class PathEncodingError(BookError):
    """Raised when a path cannot be emitted into output as UTF-8 text."""


class SummaryParseError(BookError):
    """Raised when ``SUMMARY.md`` does not follow the supported grammar."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"SUMMARY.md line {line}: {message}")
        self.line = line


class AssetNameCollisionError(BookError):
    """Raised when two static assets resolve to the same logical filename."""


class AssetPipelineError(BookError):
    """Raised when the asset pipeline phases are invoked out of order."""


def format_error_chain(error: BaseException) -> str:
    """Render ``error`` followed by one ``Caused by`` line per chained cause."""
    lines = [f"Error: {error}"]
    cause = error.__cause__ or error.__context__
    while cause is not None:
        lines.append(f"\tCaused by: {cause}")
        cause = cause.__cause__ or cause.__context__
    return "\n".join(lines)


__all__ = [
    "AssetNameCollisionError",
    "AssetPipelineError",
    "BookError",
    "BookIoError",
    "ChapterNotFoundError",
    "PathEncodingError",
    "SummaryParseError",
    "format_error_chain",
]
