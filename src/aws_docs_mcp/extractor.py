"""HTML→Markdown content extraction for documentation pages.

Picks the main content region of a page, strips navigation and widget noise,
and converts what is left to Markdown. The entry point never raises: it sits
directly on untrusted network content, so every failure degrades to a
sentinel string instead.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag
from markdownify import ATX, MarkdownConverter

log = logging.getLogger("aws-docs-mcp")

EMPTY_HTML = "<e>Empty HTML content</e>"
SIMPLIFY_FAILED = "<e>Page failed to be simplified from HTML</e>"
_CONVERSION_ERROR = "<e>Error converting HTML to Markdown: {error}</e>"

# First match wins.
_CONTENT_SELECTORS = (
    "main",
    "article",
    "#main-content",
    ".main-content",
    "#content",
    ".content",
    "div[role='main']",
    "#awsdocs-content",
    ".awsui-article",
)

_NOISE_SELECTORS = (
    "noscript",
    ".prev-next",
    "#main-col-footer",
    ".awsdocs-page-utilities",
    "#quick-feedback-yes",
    "#quick-feedback-no",
    ".page-loading-indicator",
    "#tools-panel",
    ".doc-cookie-banner",
    "awsdocs-copyright",
    "awsdocs-thumb-feedback",
    "script",
    "style",
    "meta",
    "link",
    "footer",
    "nav",
    "aside",
    "header",
)


def extract_content_from_html(html: str) -> str:
    """Convert a raw HTML document into Markdown.

    Args:
        html: Arbitrary, possibly malformed, markup.

    Returns:
        The Markdown text of the page's main content, or one of the
        ``<e>...</e>`` sentinels when nothing usable could be extracted.
    """
    if not html:
        return EMPTY_HTML

    try:
        soup = BeautifulSoup(html, "lxml")
        main = _select_main_content(soup)
        _strip_noise(main)
        markdown = _converter().convert_soup(main)
        markdown = re.sub(r"\n{3,}", "\n\n", markdown).strip()
    except Exception as exc:  # noqa: BLE001
        log.warning("HTML conversion failed: %s: %s", type(exc).__name__, exc)
        return _CONVERSION_ERROR.format(error=exc)

    if not markdown:
        return SIMPLIFY_FAILED
    return markdown


def is_html_content(page_raw: str, content_type: str) -> bool:
    """Return True if a fetched payload should go through the extractor."""
    return "<html" in page_raw[:100] or "text/html" in content_type or not content_type


def _select_main_content(soup: BeautifulSoup) -> Tag:
    for selector in _CONTENT_SELECTORS:
        found = soup.select_one(selector)
        if found is not None:
            return found
    body = soup.find("body")
    return body if isinstance(body, Tag) else soup


def _strip_noise(root: Tag) -> None:
    for selector in _NOISE_SELECTORS:
        for el in root.select(selector):
            # A nested match may already be gone with its ancestor.
            if not el.decomposed:
                el.decompose()


def _converter() -> MarkdownConverter:
    return MarkdownConverter(heading_style=ATX, code_language_callback=_detect_lang)


def _detect_lang(el: Tag | str) -> str:
    """Try to extract a language hint from a ``<pre>`` block's ``language-*`` class."""
    if isinstance(el, str):
        return ""
    code = el.find("code")
    for candidate in (code, el):
        if not isinstance(candidate, Tag):
            continue
        classes = candidate.get("class", [])
        if isinstance(classes, list):
            for cls in classes:
                if isinstance(cls, str) and cls.startswith("language-"):
                    return cls.removeprefix("language-")
    return ""
