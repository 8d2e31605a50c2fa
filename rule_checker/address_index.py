"""
Read-only (page, line) → text lookup over segmented pages.

Addresses are 1-based on both axes, matching the "Page N, Line N" labels the
model sees. Out-of-range lookups return ``NOT_FOUND`` (``None``) rather than
raising, because every address checked here comes from untrusted model output.
"""

from __future__ import annotations

from typing import Iterator, NamedTuple, Sequence

from .segmenter import ExtractedText, segment

NOT_FOUND = None


class Address(NamedTuple):
    page: int
    line: int


class AddressIndex:
    """Ground-truth line text keyed by address.

    Usage:
        index = AddressIndex.from_text(extracted_text)
        index.text_at(1, 2)   # "Signed: J. Doe" or None
    """

    __slots__ = ("_pages",)

    def __init__(self, pages: Sequence[Sequence[str]]):
        self._pages: tuple[tuple[str, ...], ...] = tuple(
            tuple(lines) for lines in pages
        )

    @classmethod
    def from_text(cls, text: ExtractedText | None) -> AddressIndex:
        return cls(segment(text))

    def page_count(self) -> int:
        return len(self._pages)

    def line_count(self, page: int) -> int:
        """Number of lines on ``page``; 0 when the page does not exist."""
        if not 1 <= page <= len(self._pages):
            return 0
        return len(self._pages[page - 1])

    def total_lines(self) -> int:
        return sum(len(lines) for lines in self._pages)

    def contains(self, page: int, line: int) -> bool:
        return 1 <= line <= self.line_count(page)

    def text_at(self, page: int, line: int) -> str | None:
        """Exact source text at the address, or ``NOT_FOUND``."""
        if not self.contains(page, line):
            return NOT_FOUND
        return self._pages[page - 1][line - 1]

    def addresses(self) -> Iterator[tuple[Address, str]]:
        """Yield every (address, text) in page-then-line order."""
        for p, lines in enumerate(self._pages, start=1):
            for n, text in enumerate(lines, start=1):
                yield Address(p, n), text
