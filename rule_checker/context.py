"""
Serialization of the address index into the text the model sees.

One entry per line, ``"Page {p}, Line {l}: {text}"``, joined by newlines.
Oversized documents keep a head and a tail around a visible marker so that
titles/definitions and signatures/totals both survive.

Truncation is tracked by address, not just by characters: an entry is
visible only if it survives whole in the head or the tail. Anything else is
recorded as excluded, and citations into it are never accepted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .address_index import Address, AddressIndex

logger = logging.getLogger(__name__)

MAX_CONTEXT_CHARS = 100_000
HEAD_CHARS = 80_000
TAIL_CHARS = 15_000
TRUNCATION_MARKER = "\n\n[... truncated ...]\n\n"


def format_entry(page: int, line: int, text: str) -> str:
    return f"Page {page}, Line {line}: {text}"


@dataclass(frozen=True)
class AssembledContext:
    """The block of text sent to the model plus what it left out."""

    text: str
    truncated: bool = False
    excluded: frozenset[Address] = field(default_factory=frozenset)

    def is_visible(self, page: int, line: int) -> bool:
        return Address(page, line) not in self.excluded


def assemble_context(
    index: AddressIndex,
    max_chars: int = MAX_CONTEXT_CHARS,
    head_chars: int = HEAD_CHARS,
    tail_chars: int = TAIL_CHARS,
) -> AssembledContext:
    """Serialize ``index`` and apply the head/tail size cap."""
    entries = [
        (address, format_entry(address.page, address.line, text))
        for address, text in index.addresses()
    ]
    full = "\n".join(entry for _, entry in entries)
    if len(full) <= max_chars:
        return AssembledContext(text=full)

    tail_start = len(full) - tail_chars
    excluded: set[Address] = set()
    offset = 0
    for address, entry in entries:
        end = offset + len(entry)
        if end > head_chars and offset < tail_start:
            excluded.add(address)
        offset = end + 1  # newline separator

    logger.warning(
        "Context truncated: %d chars > %d cap, %d of %d lines hidden from model",
        len(full),
        max_chars,
        len(excluded),
        len(entries),
    )
    tail = full[tail_start:] if tail_chars > 0 else ""
    text = full[:head_chars] + TRUNCATION_MARKER + tail
    return AssembledContext(text=text, truncated=True, excluded=frozenset(excluded))
