"""Cyclopts CLI entrypoint for building books into static HTML sites.

The ``bookbinder`` console script defined here renders a book project (a
``book.yaml`` plus a ``src/`` tree with ``SUMMARY.md``) into a directory of
HTML pages and fingerprinted static assets. Typical usage involves running
``bookbinder init`` once to scaffold a project and ``bookbinder build``
locally or in CI to regenerate the site.

Examples
--------
Build the book in the current directory:

>>> from bookbinder.cli import main
>>> main()  # doctest: +SKIP

Build into a custom directory with verbose logging:

>>> from bookbinder.cli import app
>>> app(["build", "--root", "my-book", "--dest-dir", "dist", "--verbose"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import shutil
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from ruamel.yaml.error import YAMLError

from ._constants import CONFIG_FILENAME, SUMMARY_FILENAME
from .config import BookConfigError, load_book_config
from .errors import BookError, BookIoError, format_error_chain
from .generator import BookGenerator, ensure_safe_to_clean

logger = logging.getLogger(__name__)

BUILD_ERRORS = (BookError, BookConfigError, YAMLError)
LOG_FORMAT = "[%(levelname)s] %(message)s"
STARTER_CHAPTER = "chapter_1.md"

app = App(name="bookbinder", config=cyclopts.config.Env("BOOKBINDER_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


@app.command(help="Render the book into static HTML.")
def build(
    *,
    root: typ.Annotated[
        Path, Parameter(help="Book root directory", env_var="BOOKBINDER_ROOT")
    ] = Path(),
    dest_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="BOOKBINDER_DEST_DIR"),
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Log per-file progress", env_var="BOOKBINDER_VERBOSE")
    ] = False,
) -> None:
    """Build the book rooted at ``root``.

    Parameters
    ----------
    root : Path, optional
        Directory holding ``book.yaml`` and the source tree (overridable via
        ``BOOKBINDER_ROOT``).
    dest_dir : Path or None, optional
        Override the configured build directory.
    verbose : bool, optional
        Enable debug logging.

    Returns
    -------
    None
        Writes the rendered site and prints each generated page.

    Raises
    ------
    SystemExit
        With status ``1`` when the build fails; the error and its causes are
        logged first.
    """
    _configure_logging(verbose=verbose)
    try:
        config = load_book_config(root)
        written = BookGenerator(config, dest_dir=dest_dir).run()
    except BUILD_ERRORS as exc:
        logger.error("%s", format_error_chain(exc))  # noqa: TRY400
        raise SystemExit(1) from exc
    for path in written:
        print(f"wrote {_format_path(path)}")


@app.command(help="Create a new book skeleton.")
def init(
    *,
    root: typ.Annotated[
        Path, Parameter(help="Book root directory", env_var="BOOKBINDER_ROOT")
    ] = Path(),
    title: typ.Annotated[str | None, Parameter(help="Book title")] = None,
) -> None:
    """Create ``book.yaml``, ``SUMMARY.md`` and a first chapter if missing.

    Existing files are left untouched, so running ``init`` on an existing
    project only fills in what is absent.
    """
    _configure_logging(verbose=False)
    config = load_book_config(root)
    src_dir = config.src_dir
    src_dir.mkdir(parents=True, exist_ok=True)

    files = {
        root / CONFIG_FILENAME: _starter_config(title),
        src_dir / SUMMARY_FILENAME: f"# Summary\n\n- [Chapter 1](./{STARTER_CHAPTER})\n",
        src_dir / STARTER_CHAPTER: "# Chapter 1\n",
    }
    for path, content in files.items():
        if path.exists():
            logger.info("Keeping existing %s", _format_path(path))
            continue
        path.write_text(content, encoding="utf-8")
        print(f"wrote {_format_path(path)}")


def _starter_config(title: str | None) -> str:
    lines = ["book:"]
    if title:
        escaped = title.replace('"', '\\"')
        lines.append(f'  title: "{escaped}"')
    lines.extend(["  src: src", "build:", "  build_dir: book", ""])
    return "\n".join(lines)


@app.command(help="Delete the rendered output.")
def clean(
    *,
    root: typ.Annotated[
        Path, Parameter(help="Book root directory", env_var="BOOKBINDER_ROOT")
    ] = Path(),
    dest_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="BOOKBINDER_DEST_DIR"),
    ] = None,
) -> None:
    """Remove the build directory of the book rooted at ``root``.

    Raises
    ------
    SystemExit
        With status ``1`` when the directory holds the book sources or cannot
        be removed.
    """
    _configure_logging(verbose=False)
    try:
        config = load_book_config(root)
        target = dest_dir or config.dest_dir
        if not target.exists():
            logger.info("Nothing to clean at %s", _format_path(target))
            return
        ensure_safe_to_clean(target, config)
        _remove_tree(target)
    except BUILD_ERRORS as exc:
        logger.error("%s", format_error_chain(exc))  # noqa: TRY400
        raise SystemExit(1) from exc
    print(f"removed {_format_path(target)}")


def _remove_tree(target: Path) -> None:
    try:
        shutil.rmtree(target)
    except OSError as exc:
        msg = f"Unable to remove {target}"
        raise BookIoError(msg) from exc


def main() -> None:
    """Invoke the Cyclopts application that powers the ``bookbinder`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
