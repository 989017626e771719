"""Common literal values used across bookbinder.

These constants keep filenames centralized so the loader, generators, and
tests can import the same values without drifting. Intended for internal use
within the bookbinder package.

Examples
--------
>>> from bookbinder import _constants
>>> _constants.SUMMARY_FILENAME
'SUMMARY.md'
"""

CONFIG_FILENAME = "book.yaml"
SUMMARY_FILENAME = "SUMMARY.md"
PRINT_PAGE = "print.html"
INDEX_PAGE = "index.html"
PAGE_TEMPLATE = "page.jinja"
REDIRECT_TEMPLATE = "redirect.jinja"
