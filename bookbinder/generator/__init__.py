"""Utilities for rendering a loaded book into HTML pages and static assets."""

from .book_generator import BookGenerator, ensure_safe_to_clean
from .link_rewriter import RelativeLinkExtension, SymlinkResolveContext, fix_link
from .models import PageModel
from .renderer import HtmlContentRenderer
from .static_files import StaticFiles

__all__ = [
    "BookGenerator",
    "HtmlContentRenderer",
    "PageModel",
    "RelativeLinkExtension",
    "StaticFiles",
    "SymlinkResolveContext",
    "ensure_safe_to_clean",
    "fix_link",
]
