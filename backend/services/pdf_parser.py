"""Plain-text extraction from uploaded PDF documents."""

import io
import logging

import pdfplumber

logger = logging.getLogger(__name__)

MAX_PAGES = 20


def extract_text(pdf_bytes: bytes) -> str:
    """Extract all text from a PDF file."""
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages[:MAX_PAGES]]
    return "\n".join(pages).strip()


def try_extract_text(pdf_bytes: bytes) -> str | None:
    """Like ``extract_text`` but returns None for unreadable or image-only PDFs."""
    try:
        text = extract_text(pdf_bytes)
    except Exception as e:
        logger.warning("Could not read PDF: %s", e)
        return None
    return text or None
