"""
Segmentation of raw extracted text into pages of addressable lines.

Page selection, in priority order:
  1. The extractor already split pages → use them as-is.
  2. A form feed is present → split on form feeds.
  3. Otherwise → split on runs of two or more newlines.

Every page and line is trimmed and empties are dropped, so page and line
numbers are dense over what survives. A document that yields nothing is
valid and simply produces zero pages.
"""

from __future__ import annotations

import re
from typing import Sequence, Union

_FORM_FEED = "\f"
_BLANK_RUN = re.compile(r"\n{2,}")
_LINE_BREAK = re.compile(r"\r?\n")

ExtractedText = Union[str, Sequence[str]]


def split_pages(text: ExtractedText) -> list[str]:
    """Split extracted text into trimmed, non-empty page strings."""
    if isinstance(text, str):
        if _FORM_FEED in text:
            raw_pages = text.split(_FORM_FEED)
        else:
            raw_pages = _BLANK_RUN.split(text)
    else:
        raw_pages = [str(page or "") for page in text]

    pages = (page.strip() for page in raw_pages)
    return [page for page in pages if page]


def split_lines(page_text: str) -> list[str]:
    """Split one page into trimmed, non-empty lines."""
    lines = (line.strip() for line in _LINE_BREAK.split(page_text))
    return [line for line in lines if line]


def segment(text: ExtractedText | None) -> list[list[str]]:
    """Turn extracted text into ``pages[page][line]`` with 0-based storage.

    Callers address the result 1-based through :class:`AddressIndex`.
    """
    if text is None:
        return []
    pages = [split_lines(page) for page in split_pages(text)]
    return [lines for lines in pages if lines]


def join_segments(pages: Sequence[Sequence[str]]) -> str:
    """Rebuild text that segments back into ``pages`` unchanged."""
    return _FORM_FEED.join("\n".join(lines) for lines in pages)
