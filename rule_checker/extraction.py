"""
PDF text extraction with PyMuPDF.

Returns one string per page so the segmenter can keep the document's real
page boundaries instead of guessing them from blank lines.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence, Union

import fitz

from .exceptions import ExtractionError

logger = logging.getLogger(__name__)

ExtractFn = Callable[[bytes], Union[str, Sequence[str]]]


def extract_text(file_bytes: bytes) -> list[str]:
    """Return the text of every page of the PDF in ``file_bytes``.

    Raises:
        ExtractionError: if the bytes are not a readable PDF.
    """
    try:
        with fitz.open(stream=file_bytes, filetype="pdf") as doc:
            pages = [doc.load_page(i).get_text("text") or "" for i in range(doc.page_count)]
    except Exception as e:
        raise ExtractionError(f"Could not extract text from PDF: {e}") from e

    logger.info("Extracted %d page(s) from PDF", len(pages))
    return pages
