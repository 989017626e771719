"""Build navigable static HTML books from linked Markdown chapters.

This package exposes the CLI entry points used by the ``bookbinder`` console
script to scaffold, build, and clean book projects.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from bookbinder import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
