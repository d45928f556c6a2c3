"""
Shared fixtures: the bundled templates and a pdfplumber stand-in that
returns fixed page texts.
"""
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from statement_import.common.settings import DEFAULT_TEMPLATES_DIR, ImportSettings
from statement_import.parsing.config.registry import TemplateRegistry

# fake PDF bytes; page text comes from the patched pdfplumber.open
PDF_BYTES = b"%PDF-1.4\n% statement\n"

TODAY = date(2024, 12, 31)


def mock_pdf(page_texts):
    """Context manager mock shaped like pdfplumber.open(...)."""
    pages = []
    for text in page_texts:
        page = MagicMock()
        page.extract_text.return_value = text
        pages.append(page)

    pdf = MagicMock()
    pdf.pages = pages

    ctx = MagicMock()
    ctx.__enter__.return_value = pdf
    ctx.__exit__.return_value = None
    return ctx


@pytest.fixture
def patch_pdf():
    """
    Usage:
        with patch_pdf([PAGE_1, PAGE_2]):
            reader.parse("auszug.pdf", PDF_BYTES)
    """
    def _patch(page_texts):
        return patch('pdfplumber.open', return_value=mock_pdf(page_texts))
    return _patch


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES


@pytest.fixture
def today():
    return TODAY


@pytest.fixture(scope="session")
def registry():
    return TemplateRegistry(DEFAULT_TEMPLATES_DIR, strict=True)


@pytest.fixture
def settings():
    return ImportSettings()
