"""Behaviour tests for content-addressed static asset names.

The scenarios build a small book with an extra user stylesheet and check the
rendered output: every ``<link rel="stylesheet">`` on a nested page must
resolve to a file on disk, names must carry a digest of their content, and an
unchanged book must produce identical names when rebuilt.
"""

from __future__ import annotations

import re
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, scenarios, then, when

from bookbinder.config import load_book_config
from bookbinder.generator import BookGenerator

if typ.TYPE_CHECKING:
    from ..conftest import BookFactory

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "asset_fingerprinting.feature"
)
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]

SUMMARY = "- [Intro](intro.md)\n- [Setup](guide/setup.md)\n"
CHAPTERS = {"intro.md": "# Intro\n", "guide/setup.md": "# Setup\n"}
DIGESTED = re.compile(r"-[0-9a-f]{8}\.")


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


def _asset_names(dest: Path) -> list[str]:
    return sorted(
        path.relative_to(dest).as_posix()
        for path in dest.rglob("*")
        if path.is_file() and path.suffix != ".html"
    )


@given("a book with an additional stylesheet")
def given_additional_css(make_book: BookFactory, scenario_state: ScenarioState) -> None:
    """Add ``extra/custom.css`` to the book configuration."""
    root = make_book(
        SUMMARY,
        CHAPTERS,
        config="html:\n  additional_css: [extra/custom.css]\n",
    )
    (root / "extra").mkdir()
    (root / "extra" / "custom.css").write_text(".custom { color: teal; }\n", encoding="utf-8")
    scenario_state["root"] = root


@given("a book with hashing disabled")
def given_hashing_disabled(make_book: BookFactory, scenario_state: ScenarioState) -> None:
    """Turn off ``html.hash_files``."""
    scenario_state["root"] = make_book(
        SUMMARY, CHAPTERS, config="html:\n  hash_files: false\n"
    )


@when("I build the book")
def when_build(scenario_state: ScenarioState) -> None:
    """Render the book once."""
    root = typ.cast("Path", scenario_state["root"])
    BookGenerator(load_book_config(root)).run()
    scenario_state["dest"] = root / "book"


@when("I build the book twice")
def when_build_twice(scenario_state: ScenarioState) -> None:
    """Render the book twice, recording the asset names after each build."""
    root = typ.cast("Path", scenario_state["root"])
    dest = root / "book"
    builds = []
    for _ in range(2):
        BookGenerator(load_book_config(root)).run()
        builds.append(_asset_names(dest))
    scenario_state["builds"] = builds


@then("every stylesheet linked from the nested page exists on disk")
def then_links_exist(scenario_state: ScenarioState) -> None:
    """Each stylesheet href resolves from ``guide/setup.html``."""
    dest = typ.cast("Path", scenario_state["dest"])
    page = dest / "guide" / "setup.html"
    soup = BeautifulSoup(page.read_text(encoding="utf-8"), "html.parser")
    hrefs = [link["href"] for link in soup.select("link[rel=stylesheet]")]
    scenario_state["hrefs"] = hrefs

    assert hrefs
    for href in hrefs:
        assert (page.parent / href).resolve().is_file(), href


@then("the additional stylesheet carries a content digest")
def then_custom_digest(scenario_state: ScenarioState) -> None:
    """``extra/custom.css`` is linked under its fingerprinted name."""
    hrefs = typ.cast("list[str]", scenario_state["hrefs"])
    (custom,) = [href for href in hrefs if "/extra/" in href]

    assert custom.startswith("../extra/custom-")
    assert DIGESTED.search(custom)


@then("both builds produce the same asset names")
def then_same_names(scenario_state: ScenarioState) -> None:
    """Fingerprints depend only on content."""
    first, second = typ.cast("list[list[str]]", scenario_state["builds"])

    assert first == second
    assert any(DIGESTED.search(name) for name in first)


@then("assets keep their original names")
def then_original_names(scenario_state: ScenarioState) -> None:
    """Without hashing the bundled names are written unchanged."""
    dest = typ.cast("Path", scenario_state["dest"])
    names = _asset_names(dest)

    assert "css/general.css" in names
    assert "book.js" in names
    assert not any(DIGESTED.search(name) for name in names)
