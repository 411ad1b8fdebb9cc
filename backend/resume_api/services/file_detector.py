"""
File type detection from magic-byte signatures.
"""
from ..schemas.candidate import FileType

PDF_SIGNATURE = b"%PDF"
ZIP_SIGNATURE = b"PK"
DOCX_MARKERS = ("word/", "document.xml")
DOCX_SNIFF_BYTES = 1000


def detect_file_type(data: bytes) -> FileType:
    """Classify a buffer as PDF, DOCX or unknown. Never raises."""
    if not data:
        return FileType.UNKNOWN

    if data[:4] == PDF_SIGNATURE:
        return FileType.PDF

    if data[:2] == ZIP_SIGNATURE:
        # A DOCX is a ZIP whose first entries live under word/
        head = data[:DOCX_SNIFF_BYTES].decode("utf-8", errors="replace")
        if any(marker in head for marker in DOCX_MARKERS):
            return FileType.DOCX

    return FileType.UNKNOWN
