"""
resume_scraper.py

Turns an uploaded resume into plain text.

Behavior:
- The format is picked from the filename extension (lowercased, text after the last dot).
- txt: UTF-8 decode, malformed bytes become replacement characters.
- docx: python-docx paragraphs and table cells in document order, joined by newlines.
- pdf: pdfplumber, walking every page and every word run in reading order;
  runs are percent-decoded and space-joined.
- Anything else is rejected with UnsupportedFormat.

Nothing is written to disk; the bytes are only read.
"""

import io
import logging
import os
import re
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional
from urllib.parse import unquote

from .errors import ParseFailure, UnsupportedFormat

logger = logging.getLogger(__name__)

Extractor = Callable[[bytes], str]

# a '%' not followed by two hex digits makes the whole run undecodable
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class DocumentFormat(Enum):
    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"
    UNKNOWN = ""

    @classmethod
    def from_filename(cls, filename: Optional[str]) -> "DocumentFormat":
        ext = file_extension(filename)
        for fmt in cls:
            if fmt is not cls.UNKNOWN and fmt.value == ext:
                return fmt
        return cls.UNKNOWN


def file_extension(filename: Optional[str]) -> str:
    name = (filename or "").lower()
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1]


# --- Library imports guarded at use-time ---
def _import_pdfplumber():
    try:
        import pdfplumber  # type: ignore
        return pdfplumber
    except ImportError as e:
        raise RuntimeError("pdfplumber not installed. Run: pip install pdfplumber") from e


def _import_docx():
    try:
        import docx  # type: ignore
        return docx
    except ImportError as e:
        raise RuntimeError("python-docx not installed. Run: pip install python-docx") from e


# --- Extractors ---
def decode_run(run: str) -> str:
    """Percent-decode one text run; on malformed escapes fall back to the raw
    run with '+' read as a space."""
    if "%" not in run:
        return run
    try:
        if _BAD_ESCAPE.search(run):
            raise ValueError(f"malformed escape in {run!r}")
        return unquote(run, errors="strict")
    except (ValueError, UnicodeDecodeError):
        return run.replace("+", " ")


def extract_txt(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def extract_docx(data: bytes) -> str:
    """Paragraph and table-cell text in document order, one block per line."""
    docx = _import_docx()
    from docx.table import Table  # type: ignore
    from docx.text.paragraph import Paragraph  # type: ignore

    document = docx.Document(io.BytesIO(data))
    parts: List[str] = []
    for child in document.element.body.iterchildren():
        if child.tag.endswith("}p"):
            parts.append(Paragraph(child, document).text)
        elif child.tag.endswith("}tbl"):
            for row in Table(child, document).rows:
                prev = None
                for cell in row.cells:
                    # a merged cell comes back once per grid column it spans
                    if cell._tc is prev:
                        continue
                    prev = cell._tc
                    if cell.text:
                        parts.append(cell.text)
    return "\n".join(parts)


def extract_pdf(data: bytes) -> str:
    pdfplumber = _import_pdfplumber()
    runs: List[str] = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            for word in page.extract_words() or []:
                t = word.get("text")
                if t:
                    runs.append(decode_run(t))
    return " ".join(runs)


DEFAULT_EXTRACTORS: Dict[DocumentFormat, Extractor] = {
    DocumentFormat.PDF: extract_pdf,
    DocumentFormat.DOCX: extract_docx,
    DocumentFormat.TXT: extract_txt,
}


def extract_text(data: bytes, filename: str,
                 extractors: Optional[Mapping[DocumentFormat, Extractor]] = None) -> str:
    """
    Extract plain text from a resume.

    Args:
        data: raw file bytes
        filename: declared name of the upload, used only for its extension
        extractors: optional replacement for the per-format strategies

    Returns:
        Extracted text, possibly empty.

    Raises:
        UnsupportedFormat: extension is not pdf, docx or txt
        ParseFailure: the document library could not read the file
    """
    fmt = DocumentFormat.from_filename(filename)
    table = DEFAULT_EXTRACTORS if extractors is None else extractors
    extractor = table.get(fmt)
    if extractor is None:
        raise UnsupportedFormat()

    logger.info("Extracting %s text from %s (%d bytes)", fmt.value, filename, len(data))
    if fmt is DocumentFormat.TXT:
        return extractor(data)
    try:
        text = extractor(data)
    except Exception as e:
        logger.warning("Failed to parse %s: %s", filename, e)
        raise ParseFailure(str(e) or None) from e
    return text or ""


def extract_text_from_path(path: str) -> str:
    if not os.path.exists(path):
        raise FileNotFoundError(f"File not found: {path}")
    with open(path, "rb") as f:
        data = f.read()
    return extract_text(data, os.path.basename(path))
