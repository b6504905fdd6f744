"""Content extraction: isolates the document body of a rendered page."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from docs_cache.config import settings

# Tried in order; the first match whose text is long enough wins, with the
# whole <body> as the unconditional fallback.
DEFAULT_CONTENT_SELECTORS: tuple[str, ...] = (
    "#content-area",
    "main",
    "article",
    "[role='main']",
    ".prose",
    ".markdown-body",
    ".content",
)

_STRIP_TAGS = ["script", "style", "noscript"]
_CHROME_TAGS = ["nav", "header", "footer", "aside"]

_CHROME_KEYWORDS = {
    "nav",
    "navbar",
    "navigation",
    "sidebar",
    "menu",
    "toc",
    "breadcrumb",
    "breadcrumbs",
    "search",
    "footer",
    "header",
    "logo",
}

_CONTAINER_TAGS = [
    "div", "span", "section", "p", "ul", "ol", "li", "a",
    "strong", "em", "b", "i", "small", "figure", "figcaption",
]

_KEEP_INSIDE = ["img", "svg", "code", "pre", "picture", "video"]

# Headings and code keep their place even when a theme class says "header".
_NEVER_CHROME = {"h1", "h2", "h3", "h4", "h5", "h6", "pre", "code"}

_TOKEN_SPLIT = re.compile(r"[-_\s]+")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _looks_like_chrome(value: str) -> bool:
    """Return ``True`` if a class/role token names page chrome.

    ``site-navigation``, ``sidebar_left`` and ``table-of-contents`` match;
    ``heading`` and ``content`` do not.
    """
    lowered = value.lower()
    if "table-of-contents" in lowered:
        return True
    return any(part in _CHROME_KEYWORDS for part in _TOKEN_SPLIT.split(lowered) if part)


def _is_chrome_element(tag: Tag) -> bool:
    if tag.name in _NEVER_CHROME:
        return False
    role = tag.get("role")
    if isinstance(role, str) and _looks_like_chrome(role):
        return True
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return any(_looks_like_chrome(c) for c in classes)


def _is_decorative_image(tag: Tag) -> bool:
    if tag.get("aria-hidden") == "true" or tag.get("role") in ("presentation", "none"):
        return True
    alt = tag.get("alt")
    return alt is not None and not alt.strip()


def _text_length(tag: Tag) -> int:
    return len(tag.get_text(" ", strip=True))


def select_content_region(
    soup: BeautifulSoup,
    selectors: Optional[Sequence[str]] = None,
    min_length: Optional[int] = None,
) -> Tag:
    """Return the first region matching *selectors* with enough text.

    Falls back to ``<body>`` (or the whole document when there is no body).
    """
    threshold = settings.content_min_length if min_length is None else min_length
    for selector in selectors or DEFAULT_CONTENT_SELECTORS:
        candidate = soup.select_one(selector)
        if candidate is not None and _text_length(candidate) > threshold:
            return candidate
    return soup.body or soup


def _remove_all(tags: Iterable[Tag]) -> None:
    for tag in list(tags):
        if not tag.decomposed:
            tag.decompose()


def _strip_cruft(region: Tag) -> None:
    _remove_all(region.find_all(_STRIP_TAGS))
    _remove_all(region.find_all(_CHROME_TAGS))
    _remove_all(t for t in region.find_all(True) if not t.decomposed and _is_chrome_element(t))
    _remove_all(region.find_all("button"))
    _remove_all(region.find_all(attrs={"role": "button"}))
    _remove_all(region.find_all("svg"))
    _remove_all(t for t in region.find_all("img") if _is_decorative_image(t))


def _remove_empty_shells(region: Tag) -> None:
    # Innermost first so a wrapper emptied by its children goes in this pass.
    for tag in reversed(region.find_all(_CONTAINER_TAGS)):
        if tag.decomposed:
            continue
        if tag.get_text(strip=True):
            continue
        if tag.find(_KEEP_INSIDE) is not None:
            continue
        tag.decompose()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_title(html: str) -> str:
    """Return the text content of the first ``<title>`` tag, or empty string."""
    soup = BeautifulSoup(html, "html.parser")
    if soup.title and soup.title.string:
        return soup.title.string.strip()
    return ""


def extract_content(
    html: str,
    selectors: Optional[Sequence[str]] = None,
    min_length: Optional[int] = None,
) -> str:
    """Isolate the meaningful document content of *html* and return its markup.

    The region is chosen by :func:`select_content_region`.  Inside it, scripts,
    navigation chrome, interactive controls and decorative graphics are
    removed, followed by a sweep over containers left empty by that pass.
    """
    soup = BeautifulSoup(html, "html.parser")
    region = select_content_region(soup, selectors, min_length)
    _strip_cruft(region)
    _remove_empty_shells(region)
    return str(region)
