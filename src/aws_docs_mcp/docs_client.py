"""Async clients for the AWS documentation origins using httpx.

Features:
- Page fetch restricted to docs.aws.amazon.com ``.html`` pages
- Documentation search via the public search proxy
- Content recommendations for a documentation page
- Configurable timeout via AWS_DOCS_TIMEOUT env var

Every request carries the session token as an ``X-MCP-Session-Id`` header and
a ``session`` query parameter. Failures surface as ``UpstreamError``; nothing
is retried.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from typing import Any

import httpx

from aws_docs_mcp.errors import UpstreamError, ValidationError
from aws_docs_mcp.extractor import extract_content_from_html, is_html_content
from aws_docs_mcp.formatter import format_documentation_result
from aws_docs_mcp.models import RecommendationResult, SearchResult

SEARCH_API_URL = "https://proxy.search.docs.aws.amazon.com/search"
RECOMMENDATIONS_API_URL = "https://contentrecs-api.docs.aws.amazon.com/v1/recommendations"

_DOCS_URL_RE = re.compile(r"^https?://docs\.aws\.amazon\.com/")
_PAGE_CACHE_SECONDS = 300

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36 "
    "ModelContextProtocol/1.1.0 (AWS Documentation Server)"
)

log = logging.getLogger("aws-docs-mcp")


def _timeout() -> float:
    return float(os.environ.get("AWS_DOCS_TIMEOUT", "30"))


def _user_agent() -> str:
    return os.environ.get("AWS_DOCS_USER_AGENT") or DEFAULT_USER_AGENT


def _headers(session_id: str | None = None) -> dict[str, str]:
    headers: dict[str, str] = {"User-Agent": _user_agent()}
    if session_id:
        headers["X-MCP-Session-Id"] = session_id
    return headers


def _make_client() -> httpx.AsyncClient:
    """Create an AsyncClient (caller manages lifecycle)."""
    return httpx.AsyncClient(timeout=_timeout(), follow_redirects=True)


async def _send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    failure: str,
    **kwargs: Any,
) -> httpx.Response:
    """Issue one request and map transport failures and non-2xx to UpstreamError.

    *failure* is the message prefix, e.g. ``"Error searching AWS docs"``. The
    client timeout bounds each connect or read; ``_timeout()`` also bounds the
    whole exchange, so a slow trickle of bytes cannot outlast it.
    """
    try:
        resp = await asyncio.wait_for(client.request(method, url, **kwargs), timeout=_timeout())
    except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
        log.warning("%s %s timed out", method, url)
        raise UpstreamError(f"{failure}: request timed out ({type(exc).__name__})") from exc
    except (httpx.HTTPError, OSError) as exc:
        raise UpstreamError(f"{failure}: {type(exc).__name__}: {exc}") from exc

    if not resp.is_success:
        log.warning("%s %s returned %d", method, url, resp.status_code)
        raise UpstreamError(
            f"{failure} - status code {resp.status_code}", status_code=resp.status_code
        )
    return resp


def _json_body(resp: httpx.Response, failure: str) -> Any:
    try:
        return resp.json()
    except ValueError as exc:
        raise UpstreamError(f"{failure}: response was not valid JSON") from exc


def _dicts(value: Any) -> list[dict[str, Any]]:
    """The dict entries of a JSON array; anything else in the payload is skipped."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


# ---------------------------------------------------------------------------
# Page fetch
# ---------------------------------------------------------------------------


def validate_documentation_url(url: str) -> None:
    """Reject URLs outside docs.aws.amazon.com or not ending in ``.html``."""
    if not _DOCS_URL_RE.match(url):
        raise ValidationError("URL must be from the docs.aws.amazon.com domain")
    if not url.endswith(".html"):
        raise ValidationError("URL must end with .html")


async def fetch_documentation_page(url: str, session_id: str) -> str:
    """Fetch a documentation page and return its content as Markdown.

    HTML payloads go through the extractor; anything else is returned as-is.
    """
    validate_documentation_url(url)
    failure = f"Failed to fetch {url}"

    async with _make_client() as client:
        resp = await _send(
            client,
            "GET",
            url,
            failure,
            params={"session": session_id},
            headers={
                **_headers(session_id),
                "Cache-Control": f"max-age={_PAGE_CACHE_SECONDS}",
            },
        )

    page_raw = resp.text
    content_type = resp.headers.get("content-type", "")
    log.info("Fetched %s (%d chars, %s)", url, len(page_raw), content_type or "no content-type")

    if is_html_content(page_raw, content_type):
        return extract_content_from_html(page_raw)
    return page_raw


async def read_documentation(
    url: str,
    max_length: int = 5000,
    start_index: int = 0,
    session_id: str = "",
) -> str:
    """Fetch *url* and return the ``[start_index, start_index+max_length)`` window."""
    content = await fetch_documentation_page(url, session_id)
    return format_documentation_result(url, content, start_index, max_length)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def build_search_request(search_phrase: str) -> dict[str, Any]:
    return {
        "textQuery": {"input": search_phrase},
        "contextAttributes": [{"key": "domain", "value": "docs.aws.amazon.com"}],
        "acceptSuggestionBody": "RawText",
        "locales": ["en_us"],
    }


async def search_documentation(
    search_phrase: str,
    limit: int = 10,
    session_id: str = "",
) -> list[SearchResult]:
    """Search AWS documentation and return up to *limit* ranked hits."""
    failure = "Error searching AWS docs"
    async with _make_client() as client:
        resp = await _send(
            client,
            "POST",
            SEARCH_API_URL,
            failure,
            params={"session": session_id},
            headers={**_headers(session_id), "Content-Type": "application/json"},
            json=build_search_request(search_phrase),
        )
    results = parse_search_results(_json_body(resp, failure), limit)
    log.info("Search %r returned %d results", search_phrase, len(results))
    return results


def parse_search_results(data: Any, limit: int) -> list[SearchResult]:
    """Extract ranked results from a search response.

    Only ``textExcerptSuggestion`` entries are kept; ranks are assigned
    1..k over the kept entries in response order.
    """
    if not isinstance(data, dict):
        return []
    results: list[SearchResult] = []
    for suggestion in _dicts(data.get("suggestions")):
        if len(results) >= limit:
            break
        text = suggestion.get("textExcerptSuggestion")
        if not isinstance(text, dict) or not text:
            continue
        results.append(
            SearchResult(
                rank_order=len(results) + 1,
                url=text.get("link") or "",
                title=text.get("title") or "",
                context=text.get("summary") or text.get("suggestionBody") or None,
            )
        )
    return results


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------


async def recommend(url: str, session_id: str = "") -> list[RecommendationResult]:
    """Fetch content recommendations for a documentation page."""
    failure = "Error getting recommendations"
    async with _make_client() as client:
        resp = await _send(
            client,
            "GET",
            RECOMMENDATIONS_API_URL,
            failure,
            params={"path": url, "session": session_id},
            headers=_headers(),
        )
    results = parse_recommendation_results(_json_body(resp, failure))
    log.info("Recommendations for %s: %d results", url, len(results))
    return results


def _group_items(data: dict[str, Any], group: str) -> list[dict[str, Any]]:
    section = data.get(group)
    if not isinstance(section, dict):
        return []
    return _dicts(section.get("items"))


def parse_recommendation_results(data: Any) -> list[RecommendationResult]:
    """Flatten the four recommendation groups into one list.

    Group order: highly rated, journey (one entry per URL, labelled with its
    intent), new, similar.
    """
    if not isinstance(data, dict):
        return []
    results: list[RecommendationResult] = []

    for item in _group_items(data, "highlyRated"):
        results.append(
            RecommendationResult(
                url=item.get("url") or "",
                title=item.get("assetTitle") or "",
                context=item.get("abstract") or None,
            )
        )

    for intent_group in _group_items(data, "journey"):
        intent = intent_group.get("intent") or ""
        for url_item in _dicts(intent_group.get("urls")):
            results.append(
                RecommendationResult(
                    url=url_item.get("url") or "",
                    title=url_item.get("assetTitle") or "",
                    context=f"Intent: {intent}" if intent else None,
                )
            )

    for item in _group_items(data, "new"):
        date_created = item.get("dateCreated") or ""
        results.append(
            RecommendationResult(
                url=item.get("url") or "",
                title=item.get("assetTitle") or "",
                context=f"New content added on {date_created}" if date_created else "New content",
            )
        )

    for item in _group_items(data, "similar"):
        results.append(
            RecommendationResult(
                url=item.get("url") or "",
                title=item.get("assetTitle") or "",
                context=item.get("abstract") or "Similar content",
            )
        )

    return results
