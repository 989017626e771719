"""Path helpers shared by the page generator and the asset pipeline."""

from __future__ import annotations

from pathlib import PurePath, PurePosixPath

from bookbinder.errors import PathEncodingError


def posix_text(path: PurePath | str) -> str:
    """Return ``path`` with forward slashes, guaranteed to be valid UTF-8.

    Raises
    ------
    PathEncodingError
        If the path holds undecodable bytes (surrogate escapes) and so cannot
        be written into HTML or CSS output.
    """
    text = PurePath(path).as_posix() if not isinstance(path, str) else path.replace("\\", "/")
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        msg = f"Path {text!r} is not valid UTF-8"
        raise PathEncodingError(msg) from exc
    return text


def path_to_root(path: PurePath | str) -> str:
    """Return the relative prefix leading from ``path``'s directory to the root.

    >>> path_to_root("css/general.css")
    '../'
    >>> path_to_root("index.html")
    ''
    """
    parents = PurePosixPath(posix_text(path)).parent.parts
    return "../" * len([part for part in parents if part not in ("", ".")])


__all__ = ["path_to_root", "posix_text"]
