"""
PDF Text Source

Extracts the text layer of statement PDFs page by page and joins the pages
into one line sequence. Byte-level extraction is left to pdfplumber (default)
or pypdf.
"""
import io
import logging
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b'%PDF-'
# some generators put a few garbage bytes in front of the signature
SIGNATURE_WINDOW = 20

BACKENDS = ('pdfplumber', 'pypdf')


def merge_pages(pages: Iterable[Optional[str]]) -> List[str]:
    """
    Joins page texts into lines.

    Leading lines a page shares with the page before it (repeated page
    headers) are dropped.

    Example:
        >>> merge_pages(["Kopf\\nA", "Kopf\\nB"])
        ['Kopf', 'A', 'B']
    """
    merged: List[str] = []
    previous: List[str] = []
    for text in pages:
        if not text or not text.strip():
            continue
        lines = text.replace('\r\n', '\n').replace('\r', '\n').split('\n')
        shared = 0
        for a, b in zip(previous, lines):
            if a != b:
                break
            shared += 1
        previous = lines
        merged.extend(lines[shared:])

    while merged and merged[-1] == '':
        merged.pop()
    return merged


class PdfTextSource:
    """
    Args:
        backend: 'pdfplumber' or 'pypdf'
    """

    def __init__(self, backend: str = 'pdfplumber'):
        if backend not in BACKENDS:
            raise ValueError(f"Unknown PDF backend: {backend!r} (expected one of {', '.join(BACKENDS)})")
        self.backend = backend

    @staticmethod
    def is_pdf(data: bytes) -> bool:
        return bool(data) and PDF_SIGNATURE in data[:SIGNATURE_WINDOW + len(PDF_SIGNATURE) - 1]

    def page_texts(self, data: bytes) -> List[str]:
        if self.backend == 'pypdf':
            from pypdf import PdfReader
            reader = PdfReader(io.BytesIO(data))
            return [page.extract_text() or '' for page in reader.pages]

        import pdfplumber
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            return [page.extract_text() or '' for page in pdf.pages]

    def read_lines(self, data: bytes) -> List[str]:
        texts = self.page_texts(data)
        logger.debug(f"Extracted {len(texts)} pages with {self.backend}")
        return merge_pages(texts)
