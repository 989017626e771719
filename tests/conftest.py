"""Shared fixtures for bookbinder tests.

``make_book`` writes a throwaway book project (``book.yaml`` plus ``src/``)
into ``tmp_path`` so loader, generator, and CLI tests can build from real
files without repeating the scaffolding.
"""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

BookFactory = typ.Callable[..., "Path"]


@pytest.fixture
def make_book(tmp_path: Path) -> BookFactory:
    """Return a factory that writes a book project and returns its root."""

    def _make(
        summary: str,
        chapters: cabc.Mapping[str, str | bytes],
        *,
        config: str | None = None,
        name: str = "book-root",
    ) -> Path:
        root = tmp_path / name
        src = root / "src"
        src.mkdir(parents=True, exist_ok=True)
        (src / "SUMMARY.md").write_text(dedent(summary).lstrip(), encoding="utf-8")
        for relative, content in chapters.items():
            path = src / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(dedent(content).lstrip(), encoding="utf-8")
        if config is not None:
            (root / "book.yaml").write_text(dedent(config).lstrip(), encoding="utf-8")
        return root

    return _make
