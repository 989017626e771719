"""Unit tests for loading ``book.yaml``."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from bookbinder.config import BookConfigError, load_book_config


def _write_config(tmp_path: Path, text: str) -> Path:
    (tmp_path / "book.yaml").write_text(dedent(text).lstrip(), encoding="utf-8")
    return tmp_path


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    """A project without ``book.yaml`` builds with default settings."""
    config = load_book_config(tmp_path)

    assert config.src_dir == tmp_path / "src"
    assert config.dest_dir == tmp_path / "book"
    assert config.theme_dir == tmp_path / "theme"
    assert config.book.title is None
    assert config.build.create_missing is True
    assert config.html.hash_files is True
    assert config.html.print_enabled is True
    assert config.language_dir is None


def test_full_configuration(tmp_path: Path) -> None:
    """Every supported key is read into its dataclass field."""
    root = _write_config(
        tmp_path,
        """
        book:
          title: The Book
          authors: [Ada, Grace]
          description: A test book
          language: FR
          multilingual: true
          translations:
            fr: Français
            en: English
          src: content
        build:
          build_dir: site
          create_missing: false
          clean: false
        html:
          curly_quotes: true
          additional_css: custom.css
          additional_js: [extra/a.js, extra/b.js]
          copy_fonts: false
          hash_files: false
          print: false
          theme: my-theme
          pygments_style: monokai
        """,
    )

    config = load_book_config(root)

    assert config.book.title == "The Book"
    assert config.book.authors == ["Ada", "Grace"]
    assert config.book.language == "fr"
    assert config.book.translations == {"fr": "Français", "en": "English"}
    assert config.src_dir == root / "content"
    assert config.dest_dir == root / "site"
    assert config.language_dir == "fr"
    assert config.build.create_missing is False
    assert config.build.clean is False
    assert config.html.curly_quotes is True
    assert config.html.additional_css == [Path("custom.css")]
    assert config.html.additional_js == [Path("extra/a.js"), Path("extra/b.js")]
    assert config.html.copy_fonts is False
    assert config.html.hash_files is False
    assert config.html.print_enabled is False
    assert config.theme_dir == root / "my-theme"
    assert config.html.pygments_style == "monokai"


def test_translation_list_uses_codes_as_labels(tmp_path: Path) -> None:
    """A plain list of language codes is accepted."""
    root = _write_config(tmp_path, "book:\n  translations: [en, de]\n")

    assert load_book_config(root).book.translations == {"en": "en", "de": "de"}


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    """An empty YAML document is treated as an empty mapping."""
    root = _write_config(tmp_path, "\n")

    assert load_book_config(root).html.hash_files is True


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "html:\n  curly_quotes: 'yes'\n",
        "build:\n  build_dir: /absolute/out\n",
        "book: [not, a, mapping]\n",
        "html:\n  additional_css: {a: b}\n",
    ],
)
def test_invalid_shapes_are_rejected(tmp_path: Path, text: str) -> None:
    """Structural mistakes raise ``BookConfigError``."""
    root = _write_config(tmp_path, text)

    with pytest.raises(BookConfigError):
        load_book_config(root)
