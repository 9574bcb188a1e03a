"""Unit tests for the pagination formatter."""

from __future__ import annotations

import re

import pytest

from aws_docs_mcp.formatter import NO_MORE_CONTENT, format_documentation_result

URL = "https://docs.aws.amazon.com/lambda/latest/dg/welcome.html"
HEADER = f"AWS Documentation from {URL}:\n\n"
_NEXT_RE = re.compile(
    r"\n\n<e>Content truncated\. Call the read_documentation tool with "
    r"start_index=(\d+) to get more content\.</e>$"
)


def _split(output: str) -> tuple[str, int | None]:
    """Return (window text, next start_index or None) from formatter output."""
    assert output.startswith(HEADER)
    body = output[len(HEADER) :]
    match = _NEXT_RE.search(body)
    if match is None:
        return body, None
    return body[: match.start()], int(match.group(1))


class TestFormatDocumentationResult:
    def test_first_window_with_continuation(self) -> None:
        content = "abcdefghijklmnopqrst"  # 20 chars
        result = format_documentation_result(URL, content, 0, 5)
        window, next_start = _split(result)
        assert window == "abcde"
        assert next_start == 5
        assert "start_index=5" in result

    def test_last_window_has_no_continuation(self) -> None:
        content = "abcdefghijklmnopqrst"
        result = format_documentation_result(URL, content, 15, 5)
        assert result == HEADER + "pqrst"

    def test_window_larger_than_content(self) -> None:
        result = format_documentation_result(URL, "short", 0, 5000)
        assert result == HEADER + "short"

    def test_partial_final_window(self) -> None:
        result = format_documentation_result(URL, "0123456789", 8, 5)
        assert result == HEADER + "89"

    @pytest.mark.parametrize("content", ["", "a", "exactly-ten"])
    @pytest.mark.parametrize("max_length", [1, 5, 50_000])
    def test_start_at_or_past_end_is_no_more_content(self, content: str, max_length: int) -> None:
        for start in (len(content), len(content) + 1, len(content) + 1000):
            assert format_documentation_result(URL, content, start, max_length) == (
                HEADER + NO_MORE_CONTENT
            )

    def test_is_pure(self) -> None:
        content = "x" * 123
        first = format_documentation_result(URL, content, 10, 7)
        second = format_documentation_result(URL, content, 10, 7)
        assert first == second

    @pytest.mark.parametrize("max_length", [1, 3, 7, 64, 1000])
    def test_following_next_start_reconstructs_content(self, max_length: int) -> None:
        content = "# Heading\n\nSome *markdown* body with [a link](https://x).\n" * 5
        pieces: list[str] = []
        start: int | None = 0
        while start is not None:
            window, start = _split(format_documentation_result(URL, content, start, max_length))
            pieces.append(window)
        assert "".join(pieces) == content
