"""
Page (tab) access rules for an embedded report.

`allowed` is either None, meaning the user has no explicit rows and may open
every page, or the list of page names granted to the user.
"""
from typing import Iterable, List, Optional, Sequence, Tuple


def resolve_allowed_pages(page_names: Iterable[str]) -> Optional[List[str]]:
    """Turn the user's permission rows into an allow list (None = all pages)."""
    allowed: List[str] = []
    for name in page_names:
        if name and name not in allowed:
            allowed.append(name)
    return allowed or None


def is_page_allowed(allowed: Optional[Sequence[str]], page_name: Optional[str]) -> bool:
    if allowed is None:
        return True
    return page_name is not None and page_name in allowed


def filter_pages(pages: Iterable, allowed: Optional[Sequence[str]]) -> list:
    """Keep pages (objects with a `name`) the user may open, preserving order."""
    return [page for page in pages if is_page_allowed(allowed, page.name)]


def first_allowed_page(
    allowed: Optional[Sequence[str]],
    page_order: Optional[Sequence[str]] = None,
) -> Optional[str]:
    """First page the user may open, in report order when known."""
    if page_order:
        for name in page_order:
            if is_page_allowed(allowed, name):
                return name
        return None
    if allowed:
        return allowed[0]
    return None


def resolve_navigation(
    allowed: Optional[Sequence[str]],
    target_page: str,
    current_page: Optional[str] = None,
    page_order: Optional[Sequence[str]] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Decide where a page change lands.

    Returns (allowed, page). A permitted target is kept. A forbidden one
    is reverted to the current page when that one is permitted, otherwise
    to the first permitted page.
    """
    if is_page_allowed(allowed, target_page):
        return True, target_page
    if current_page is not None and current_page != target_page and is_page_allowed(allowed, current_page):
        return False, current_page
    return False, first_allowed_page(allowed, page_order)
