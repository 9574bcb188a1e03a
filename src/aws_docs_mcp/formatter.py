"""Windowed pagination of extracted documentation text.

Nothing is stored between calls: the caller passes ``start_index`` back in,
so identical arguments always give identical output.
"""

from __future__ import annotations

NO_MORE_CONTENT = "<e>No more content available.</e>"


def format_documentation_result(
    url: str,
    content: str,
    start_index: int,
    max_length: int,
) -> str:
    """Return one page of *content*, prefixed with its source *url*.

    When more text remains after the window, a note naming the next
    ``start_index`` is appended.
    """
    header = f"AWS Documentation from {url}:\n\n"
    original_length = len(content)

    if start_index >= original_length:
        return header + NO_MORE_CONTENT

    truncated = content[start_index : start_index + max_length]
    if not truncated:
        return header + NO_MORE_CONTENT

    next_start = start_index + len(truncated)
    result = header + truncated
    if next_start < original_length:
        result += (
            "\n\n<e>Content truncated. Call the read_documentation tool with "
            f"start_index={next_start} to get more content.</e>"
        )
    return result
