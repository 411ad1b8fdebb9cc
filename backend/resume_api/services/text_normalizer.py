"""
Repairs layout damage left by PDF/DOCX text extraction before the text is
handed to an LLM.
"""
import re
from typing import List

# (pattern, replacement) pairs applied in order
_REPAIRS = (
    # Words split across lines, with and without a trailing hyphen
    (re.compile(r"([a-z])-[ \t\r]*\n\s*([a-z])", re.I), r"\1\2"),
    (re.compile(r"([a-z])[ \t\r]*\n\s*([a-z])", re.I), r"\1 \2"),
    # Spacing inside emails, phone numbers and domains
    (re.compile(r"(\w)\s?@\s?(\w)"), r"\1@\2"),
    (re.compile(r"(\d)\s?-\s?(\d)"), r"\1-\2"),
    (re.compile(r"(\w)\s?\.\s?(\w)"), r"\1.\2"),
    # Blank line after single-line section headers
    (re.compile(r"^([A-Z][A-Z \t\r]+\n)\s*([a-z])", re.M), r"\1\n\2"),
    (re.compile(r"^([A-Z][A-Z \t\r]+):[ \t\r]*\n\s*([a-z])", re.M), r"\1:\n\n\2"),
    # Page numbers and running headers
    (re.compile(r"\n[ \t\r]*\d[ \t\r]*\n"), "\n"),
    (re.compile(r"^[ \t\r]*resume[ \t\r]*$", re.I | re.M), ""),
    (re.compile(r"^[ \t\r]*page[ \t\r]*\d+[ \t\r]*$", re.I | re.M), ""),
    # Date ranges
    (re.compile(r"(\d{4})\s*-\s*(\d{4})"), r"\1-\2"),
    (re.compile(r"(\d{4})\s*to\s*(\d{4})"), r"\1-\2"),
)

SECTION_KEYWORDS = re.compile(r"^(PROFILE|SKILLS|EXPERIENCE|EDUCATION|PROJECT|CERTIFICATION)", re.I)
BULLET = re.compile(r"^[-•·◦]\s")
SENTENCE_END = (".", "!", "?")


def _is_standalone_line(line: str, next_line: str) -> bool:
    """Headers, bullets and short lead-ins stay on their own line."""
    if len(line) < 60 and (
        line.upper() == line
        or line.endswith(":")
        or SECTION_KEYWORDS.match(line)
    ):
        return True
    if BULLET.match(line):
        return True
    return len(line) < 40 and bool(next_line) and len(next_line) > 50


def reconstruct_paragraphs(text: str) -> str:
    lines = text.split("\n")
    reconstructed: List[str] = []
    paragraph = ""

    for i, raw_line in enumerate(lines):
        line = raw_line.strip()
        next_line = lines[i + 1].strip() if i + 1 < len(lines) else ""

        if not line:
            if paragraph:
                reconstructed.append(paragraph)
                paragraph = ""
            reconstructed.append("")
        elif _is_standalone_line(line, next_line):
            if paragraph:
                reconstructed.append(paragraph)
                paragraph = ""
            reconstructed.append(line)
        elif paragraph:
            paragraph += " " + line
            if line.endswith(SENTENCE_END):
                reconstructed.append(paragraph)
                paragraph = ""
        else:
            paragraph = line

    if paragraph:
        reconstructed.append(paragraph)

    return "\n".join(reconstructed)


def preprocess_resume_text(raw_text: str) -> str:
    """Deterministic cleanup of extracted resume text."""
    processed = raw_text
    for pattern, replacement in _REPAIRS:
        processed = pattern.sub(replacement, processed)
    return reconstruct_paragraphs(processed)
