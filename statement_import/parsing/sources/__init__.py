# Text sources: turn uploaded bytes into statement lines
from .text import TextSource
from .pdf import PdfTextSource, merge_pages

__all__ = ['TextSource', 'PdfTextSource', 'merge_pages']
