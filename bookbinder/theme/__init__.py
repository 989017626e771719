"""Bundled theme assets and user overrides.

The generator never reads theme files itself. :func:`load_theme` gathers the
bytes of every bundled asset the configuration asks for, lets files in the
book's ``theme/`` directory replace them by logical name, and hands the
resulting table to the asset pipeline.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

from bookbinder._constants import PAGE_TEMPLATE
from bookbinder.errors import BookIoError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

THEME_DIR = Path(__file__).resolve().parent
CORE_ASSETS = (
    "book.js",
    "css/variables.css",
    "css/general.css",
    "css/chrome.css",
    "favicon.svg",
)
PRINT_ASSETS = ("css/print.css",)
FONT_ASSETS = ("fonts/fonts.css", "fonts/OFL.txt")


@dc.dataclass(slots=True)
class Theme:
    """Static assets and template location for one build.

    Attributes
    ----------
    assets : dict[str, bytes]
        Logical filename to bytes, in the order pages should load them.
    templates_dir : Path or None
        User directory whose ``page.jinja`` overrides the bundled template.
    """

    assets: dict[str, bytes] = dc.field(default_factory=dict)
    templates_dir: Path | None = None

    @property
    def stylesheets(self) -> list[str]:
        """Logical names of the CSS files pages link to."""
        return [name for name in self.assets if name.endswith(".css")]

    @property
    def scripts(self) -> list[str]:
        """Logical names of the scripts pages load."""
        return [name for name in self.assets if name.endswith(".js")]


def _read_asset(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        msg = f"Unable to read theme file {path}"
        raise BookIoError(msg) from exc


def load_theme(
    theme_dir: Path | None = None,
    *,
    print_enabled: bool = True,
    copy_fonts: bool = True,
    extra: cabc.Mapping[str, bytes] | None = None,
) -> Theme:
    """Collect the bundled theme, applying overrides from ``theme_dir``.

    Parameters
    ----------
    theme_dir : Path, optional
        The book's theme directory; missing directories are ignored.
    print_enabled : bool, optional
        Include the print stylesheet.
    copy_fonts : bool, optional
        Include the font stylesheet and its licence.
    extra : Mapping[str, bytes], optional
        Generated assets (such as Pygments CSS) appended after the bundled
        files; a user file with the same name still wins.

    Returns
    -------
    Theme
        The asset table and optional template override directory.

    Raises
    ------
    BookIoError
        If a bundled or user theme file cannot be read.
    """
    names = list(CORE_ASSETS)
    if print_enabled:
        names.extend(PRINT_ASSETS)
    if copy_fonts:
        names.extend(FONT_ASSETS)

    assets: dict[str, bytes] = {name: _read_asset(THEME_DIR / name) for name in names}
    if extra:
        assets.update(extra)

    templates_dir: Path | None = None
    if theme_dir is not None and theme_dir.is_dir():
        for name in assets:
            override = theme_dir / name
            if override.is_file():
                logger.debug("Theme override %s", override)
                assets[name] = _read_asset(override)
        if (theme_dir / PAGE_TEMPLATE).is_file():
            templates_dir = theme_dir
    return Theme(assets=assets, templates_dir=templates_dir)


__all__ = ["CORE_ASSETS", "FONT_ASSETS", "PRINT_ASSETS", "THEME_DIR", "Theme", "load_theme"]
