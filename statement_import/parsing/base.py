"""
Base Classes for Statement Readers

A reader couples a text source (CSV text or PDF text layer) with the
templates of one source kind and runs them through the template engine.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from ..common.logging_config import get_logger
from ..common.models import StatementParseResult
from ..common.settings import ImportSettings
from .config.registry import TemplateRegistry
from .config.template import StatementTemplate
from .engine import TemplateEngine
from .sources.pdf import PdfTextSource
from .sources.text import TextSource

logger = get_logger(__name__)


class BaseStatementReader(ABC):
    """
    Abstract Base Class for all statement readers.

    Subclasses set `source_kind` (the key of their templates in the
    registry) and `bank_name`, and implement `recognizes()`.

    Returns of parse():
        StatementParseResult, or None when no template matched
    """
    source_kind: str = ''
    bank_name: str = 'Unknown Bank'

    def __init__(self, registry: TemplateRegistry, settings: Optional[ImportSettings] = None,
                 today: Optional[date] = None):
        self.registry = registry
        self.settings = settings or ImportSettings()
        self.today = today

    @property
    def templates(self) -> List[StatementTemplate]:
        return self.registry.templates_for(self.source_kind)

    @abstractmethod
    def text_source(self):
        """Adapter turning the uploaded bytes into lines."""
        raise NotImplementedError

    @abstractmethod
    def accepts(self, data: bytes) -> bool:
        """Cheap format check on the raw bytes."""
        raise NotImplementedError

    @abstractmethod
    def recognizes(self, lines: List[str]) -> bool:
        """Returns True if the decoded content belongs to this bank."""
        raise NotImplementedError

    def reconciler(self):
        """Continuation line strategy for table sections, None for single-line records."""
        return None

    def read_lines(self, data: bytes) -> List[str]:
        return self.text_source().read_lines(data)

    def identify(self, file_name: str, data: bytes) -> bool:
        if not self.accepts(data):
            return False
        try:
            lines = self.read_lines(data)
        except Exception as e:
            logger.warning(f"{self.__class__.__name__} could not read {file_name}: {e}",
                           reader=self.source_kind, file_name=file_name)
            return False
        return self.recognizes(lines)

    def default_description(self, file_name: str) -> str:
        return f"{self.bank_name} Import {file_name}"

    def parse(self, file_name: str, data: bytes) -> Optional[StatementParseResult]:
        """
        Template method: read lines, try the templates in order, fill in the
        header description.
        """
        lines = self.read_lines(data)
        engine = TemplateEngine(self.templates, reconciler=self.reconciler(), today=self.today)
        result = engine.parse(lines)
        if result is None:
            logger.info(f"No {self.source_kind} template matched {file_name}",
                        reader=self.source_kind, file_name=file_name, lines=len(lines))
            return None

        if not result.header.description:
            result.header.description = self.default_description(file_name)
        logger.info(f"Parsed {len(result.movements)} movements from {file_name}",
                    reader=self.source_kind, file_name=file_name)
        return result

    def parse_details(self, file_name: str, data: bytes) -> Optional[StatementParseResult]:
        """Detail parsing (e.g. securities settlements). Defaults to parse()."""
        return self.parse(file_name, data)


class TextStatementReader(BaseStatementReader):
    """Reader for delimited text exports."""

    def text_source(self) -> TextSource:
        return TextSource(self.settings.fallback_encoding)

    def accepts(self, data: bytes) -> bool:
        return TextSource.is_text(data)


class PdfStatementReader(BaseStatementReader):
    """Reader for the text layer of statement PDFs."""

    def text_source(self) -> PdfTextSource:
        return PdfTextSource(self.settings.pdf_backend)

    def accepts(self, data: bytes) -> bool:
        return PdfTextSource.is_pdf(data)
