"""
PDF text extraction.

Two strategies are offered:

* ``extract_text_with_pymupdf`` - real content-stream interpretation through
  PyMuPDF. Preferred whenever the document is a well-formed PDF.
* ``extract_text_from_pdf`` - a parser-free heuristic that pattern-matches the
  raw file for text-show operands. It survives truncated or odd producer output
  that PyMuPDF refuses to open, at the cost of noise and missed text inside
  compressed streams.

Both return an empty string instead of raising.
"""
import logging
import re
from typing import List, Set

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

MAX_SEGMENT_LENGTH = 300
MIN_SEGMENTS_BEFORE_FALLBACK = 10

_PARENTHESIZED = re.compile(r"\(([^)]*)\)")
_TEXT_OBJECT = re.compile(r"BT\s+(.*?)\s+ET", re.S)
_SHOW_TEXT = re.compile(r"\(([^)]*)\)\s*Tj")
_SHOW_TEXT_ARRAY = re.compile(r"\[([^\]]*)\]\s*TJ")
_SHOW_OR_POSITION = re.compile(r"\(([^)]*)\)\s*[Tt][jd]")
_STREAM = re.compile(r"stream.*?endstream", re.S)
_READABLE_RUN = re.compile(r"[a-zA-Z0-9@.\-_+\s]{3,}")
_NUMERIC_ONLY = re.compile(r"^[0-9.\s]+$")
_FALLBACK_RUN = re.compile(r"[A-Za-z][A-Za-z0-9@.\-_+\s]{2,}")

_OCTAL_ESCAPE = re.compile(r"\\[0-9]{3}")
_OTHER_ESCAPE = re.compile(r"\\(.)")
_WHITESPACE = re.compile(r"\s+")
_CONTENT_CHAR = re.compile(r"[a-zA-Z0-9@.]")
_LETTER = re.compile(r"[a-zA-Z]")


def clean_pdf_string(raw: str) -> str:
    """Unescape a PDF literal string and collapse its whitespace."""
    text = (
        raw.replace("\\n", " ")
        .replace("\\r", " ")
        .replace("\\t", " ")
        .replace("\\\\", " ")
    )
    text = _OCTAL_ESCAPE.sub(" ", text)
    text = _OTHER_ESCAPE.sub(r"\1", text)
    return _WHITESPACE.sub(" ", text).strip()


class _SegmentCollector:
    """Ordered, case-insensitively de-duplicated text segments."""

    def __init__(self):
        self.segments: List[str] = []
        self._seen: Set[str] = set()

    def add(self, raw: str) -> None:
        text = clean_pdf_string(raw)
        if (
            text
            and _CONTENT_CHAR.search(text)
            and len(text) < MAX_SEGMENT_LENGTH
            and "\x00" not in text
            and text.lower() not in self._seen
        ):
            self._seen.add(text.lower())
            self.segments.append(text)

    def __len__(self) -> int:
        return len(self.segments)


def extract_text_from_pdf(pdf_bytes: bytes) -> str:
    """Recover readable text from raw PDF bytes without a PDF parser."""
    try:
        # latin-1 maps every byte to the code point of the same value
        raw = pdf_bytes.decode("latin-1")
        collected = _SegmentCollector()

        # Literal strings anywhere in the file
        for inner in _PARENTHESIZED.findall(raw):
            collected.add(inner)

        # Literal strings inside BT ... ET text objects
        for block in _TEXT_OBJECT.findall(raw):
            for inner in _PARENTHESIZED.findall(block):
                collected.add(inner)

        # (text) Tj
        for inner in _SHOW_TEXT.findall(raw):
            collected.add(inner)

        # [(te) -20 (xt)] TJ
        for array_content in _SHOW_TEXT_ARRAY.findall(raw):
            for inner in _PARENTHESIZED.findall(array_content):
                collected.add(inner)

        # (text) Tj / Td variants
        for inner in _SHOW_OR_POSITION.findall(raw):
            collected.add(inner)

        # Loose printable runs inside content streams
        for stream in _STREAM.findall(raw):
            for run in _READABLE_RUN.findall(stream):
                run = run.strip()
                if len(run) > 2 and not _NUMERIC_ONLY.match(run):
                    collected.add(run)

        if len(collected) < MIN_SEGMENTS_BEFORE_FALLBACK:
            logger.debug("Low PDF text yield, running permissive fallback pattern")
            for run in _FALLBACK_RUN.findall(raw):
                run = run.strip()
                if (
                    2 < len(run) < 100
                    and _LETTER.search(run)
                    and "obj" not in run
                ):
                    collected.add(run)

        combined = _WHITESPACE.sub(" ", " ".join(collected.segments)).strip()

        logger.info(
            f"Heuristic PDF extraction: {len(combined)} chars from {len(collected)} unique segments"
        )
        logger.debug(f"First 500 characters: {combined[:500]}")
        return combined
    except Exception as e:
        logger.warning(f"Heuristic PDF text extraction failed: {e}")
        return ""


def extract_text_with_pymupdf(pdf_bytes: bytes) -> str:
    """
    Extract text page by page with PyMuPDF.

    Returns an empty string when the bytes are not an openable PDF.
    """
    try:
        pdf_document = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        logger.info(f"PyMuPDF could not open document: {e}")
        return ""

    try:
        pages = [pdf_document[page_num].get_text() for page_num in range(len(pdf_document))]
    except Exception as e:
        logger.warning(f"PyMuPDF text extraction failed: {e}")
        return ""
    finally:
        pdf_document.close()

    text = "\n".join(page.strip() for page in pages if page and page.strip())
    logger.info(f"PyMuPDF extraction: {len(text)} chars from {len(pages)} pages")
    return text
