"""
DOCX text extraction: python-docx for real archives, plus a substring
heuristic over the raw bytes for anything python-docx rejects.
"""
import io
import logging
import re

from docx import Document

logger = logging.getLogger(__name__)

_DOCUMENT_PART = re.compile(r"<w:document[^>]*>.*?</w:document>", re.I | re.S)
_TEXT_RUN = re.compile(r"<w:t[^>]*>[^<]*</w:t>", re.I)
_TAG = re.compile(r"<[^>]*>")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\s]")
_WHITESPACE = re.compile(r"\s+")
_TOKEN = re.compile(r"^[a-zA-Z0-9@.-]+$")

XML_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&apos;", "'"),
)


def _readable_tokens(decoded: str) -> str:
    """Last resort: keep word-like tokens from the whole buffer."""
    readable = _WHITESPACE.sub(" ", _NON_PRINTABLE.sub(" ", decoded))
    words = [
        word for word in readable.split(" ")
        if len(word) > 2
        and _TOKEN.match(word)
        and "xml" not in word
        and "rels" not in word
    ]
    return " ".join(words).strip()


def xml_to_text(xml: str) -> str:
    """Strip tags, unescape the standard entities and collapse whitespace."""
    text = _TAG.sub(" ", xml)
    for entity, char in XML_ENTITIES:
        text = text.replace(entity, char)
    return _WHITESPACE.sub(" ", text).strip()


def extract_text_from_docx(docx_bytes: bytes) -> str:
    """Recover text from DOCX bytes without unpacking the ZIP container."""
    try:
        decoded = docx_bytes.decode("utf-8", errors="replace")

        document_match = _DOCUMENT_PART.search(decoded)
        if document_match:
            document_xml = document_match.group(0)
        else:
            document_xml = " ".join(_TEXT_RUN.findall(decoded))

        if not document_xml:
            logger.info("No WordprocessingML found, falling back to readable tokens")
            return _readable_tokens(decoded)

        text = xml_to_text(document_xml)
        logger.info(f"Heuristic DOCX extraction: {len(text)} chars")
        logger.debug(f"First 300 characters: {text[:300]}")
        return text
    except Exception as e:
        logger.warning(f"Heuristic DOCX text extraction failed: {e}")
        return ""


def extract_text_with_python_docx(docx_bytes: bytes) -> str:
    """Paragraph and table text through python-docx, or "" if unreadable."""
    try:
        document = Document(io.BytesIO(docx_bytes))
    except Exception as e:
        logger.info(f"python-docx could not open document: {e}")
        return ""

    try:
        parts = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
        # Two-column resume templates keep most content in tables
        for table in document.tables:
            for row in table.rows:
                for cell in row.cells:
                    cell_text = cell.text.strip()
                    if cell_text and cell_text not in parts:
                        parts.append(cell_text)
    except Exception as e:
        logger.warning(f"python-docx text extraction failed: {e}")
        return ""

    text = "\n".join(parts)
    logger.info(f"python-docx extraction: {len(text)} chars")
    return text
